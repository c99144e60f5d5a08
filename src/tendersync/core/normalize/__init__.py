"""Normalization of sync settings and raw tender records."""

from .settings import build_query_params, coerce_settings
from .records import (
    SOURCE_TAG,
    NormalizedBatch,
    TenderDocument,
    compute_document_id,
    normalize_records,
)

__all__ = [
    # Settings
    "build_query_params",
    "coerce_settings",
    # Records
    "SOURCE_TAG",
    "NormalizedBatch",
    "TenderDocument",
    "compute_document_id",
    "normalize_records",
]
