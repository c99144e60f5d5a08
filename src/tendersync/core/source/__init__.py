"""External tender source access."""

from .envelope import ENVELOPE_KEYS, extract_records
from .http_source import TenderSource

__all__ = [
    "ENVELOPE_KEYS",
    "TenderSource",
    "extract_records",
]
