"""
Canonical tender documents for the search index.

Provides the bridge between raw API records and index writes: a stable
document identifier, in-batch deduplication and pipeline stamps.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


logger = logging.getLogger(__name__)

SOURCE_TAG = "api_sync"

# Characters of tenderName used in the composite fallback identifier
COMPOSITE_NAME_LENGTH = 20


@dataclass
class TenderDocument:
    """Normalized tender ready for the index.

    ``fields`` is the raw record, kept as an opaque ordered field bag;
    only the identifier candidates are ever read from it.
    """

    document_id: str
    fields: dict[str, Any]
    added_date: datetime
    source: str = SOURCE_TAG

    def to_source(self) -> dict[str, Any]:
        """Render the index body: raw fields plus pipeline stamps."""
        return {
            **self.fields,
            "documentId": self.document_id,
            "added_date": self.added_date.isoformat(),
            "source": self.source,
        }


@dataclass
class NormalizedBatch:
    """Surviving documents plus what was filtered out of one fetch."""

    documents: list[TenderDocument] = field(default_factory=list)
    rejected: int = 0
    duplicates: int = 0

    @property
    def received(self) -> int:
        return len(self.documents) + self.rejected + self.duplicates


def _as_identifier(value: Any) -> str | None:
    """Stringify an identifier candidate, None when absent or blank."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def compute_document_id(raw: Mapping[str, Any]) -> str | None:
    """Derive the stable index identifier for a raw tender record.

    Tries, in order: ``tenderId`` (a number or non-blank string),
    ``tenderIdString``, then ``referenceNumber`` joined with the first
    20 characters of ``tenderName``.

    Returns:
        Document identifier, or None if the record carries none of them
    """
    tender_id = raw.get("tenderId")
    if isinstance(tender_id, (int, float, str)):
        tender_id = _as_identifier(tender_id)
        if tender_id:
            return tender_id

    id_string = _as_identifier(raw.get("tenderIdString"))
    if id_string:
        return id_string

    reference = _as_identifier(raw.get("referenceNumber"))
    if reference:
        name = raw.get("tenderName")
        name = str(name) if name is not None else ""
        return f"{reference}_{name[:COMPOSITE_NAME_LENGTH]}"

    return None


def normalize_records(
    records: Iterable[Any],
    now: datetime | None = None,
) -> NormalizedBatch:
    """Map raw records to TenderDocuments, rejecting and deduplicating.

    Records without any identifier are rejected. When two records share a
    document id, the first one seen is kept and later ones are counted as
    duplicates.

    Args:
        records: Records from one fetch, in source order
        now: Stamp for ``added_date`` (defaults to the current UTC time)

    Returns:
        NormalizedBatch with surviving documents and filter counts
    """
    stamp = now or datetime.now(timezone.utc)
    batch = NormalizedBatch()
    seen: set[str] = set()

    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Skipping non-object tender record: %r", record)
            batch.rejected += 1
            continue

        document_id = compute_document_id(record)
        if document_id is None:
            logger.warning("Skipping tender without ID: %s", repr(dict(record))[:200])
            batch.rejected += 1
            continue

        if document_id in seen:
            logger.debug("Dropping duplicate tender %s within batch", document_id)
            batch.duplicates += 1
            continue

        seen.add(document_id)
        batch.documents.append(
            TenderDocument(
                document_id=document_id,
                fields=dict(record),
                added_date=stamp,
            )
        )

    return batch
