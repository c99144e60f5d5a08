"""
Bulk upsert of tender documents into Elasticsearch.

One bulk request per batch, keyed by document id, refreshed on
completion. Per-item outcomes are folded into SyncStats.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from tendersync.core.errors import IndexingError
from tendersync.core.normalize.records import TenderDocument
from tendersync.core.results import SyncStats

if TYPE_CHECKING:
    from elasticsearch import AsyncElasticsearch


logger = logging.getLogger(__name__)

# Bulk action used for every document; replaces an existing document
BULK_ACTION = "index"


def build_operations(index: str, documents: Sequence[TenderDocument]) -> list[dict[str, Any]]:
    """Interleave action lines and document bodies for the bulk API."""
    operations: list[dict[str, Any]] = []
    for doc in documents:
        operations.append({BULK_ACTION: {"_index": index, "_id": doc.document_id}})
        operations.append(doc.to_source())
    return operations


def item_detail(item: Any) -> Mapping[str, Any]:
    """The per-action body of a bulk response item, empty if malformed."""
    if not isinstance(item, Mapping) or not item:
        return {}
    outcome = item.get(BULK_ACTION) or next(iter(item.values()), None)
    return outcome if isinstance(outcome, Mapping) else {}


def classify_item(item: Any) -> str:
    """Classify one bulk response item.

    Returns:
        "added", "updated" or "failed"
    """
    outcome = item_detail(item)
    status = outcome.get("status")
    result = outcome.get("result")

    if isinstance(status, int) and 200 <= status < 300:
        if result == "created":
            return "added"
        if result == "updated":
            return "updated"
    return "failed"


class BulkIndexer:
    """Upserts tender documents into one index."""

    def __init__(self, client: "AsyncElasticsearch", index: str, refresh: bool = True):
        """Initialize the indexer.

        Args:
            client: Elasticsearch client (owned by the caller)
            index: Target index name
            refresh: Refresh the index when the bulk call completes
        """
        self.client = client
        self.index = index
        self.refresh = refresh

    async def index_documents(self, documents: Sequence[TenderDocument]) -> SyncStats:
        """Bulk upsert documents and count per-item outcomes.

        ``total`` in the returned stats is the number of documents sent.

        Raises:
            IndexingError: If the bulk request itself fails
        """
        if not documents:
            return SyncStats()

        operations = build_operations(self.index, documents)
        logger.info(
            "Preparing to bulk index %d documents to Elasticsearch",
            len(documents),
            extra={"index": self.index},
        )

        try:
            response = await self.client.bulk(operations=operations, refresh=self.refresh)
        except Exception as e:
            logger.error("Elasticsearch bulk indexing error: %s", e, extra={"index": self.index})
            raise IndexingError(str(e), cause=e) from e

        body = getattr(response, "body", response)
        items = body.get("items") or []

        stats = SyncStats(total=len(documents))
        for item in items:
            outcome = classify_item(item)
            if outcome == "added":
                stats.added += 1
            elif outcome == "updated":
                stats.updated += 1
            else:
                stats.failed += 1
                detail = item_detail(item)
                logger.error(
                    "Elasticsearch indexing error for %s: %s",
                    detail.get("_id"),
                    detail.get("error") or detail.get("result"),
                    extra={"index": self.index},
                )

        # Items the response never mentioned did not make it into the index
        missing = len(documents) - len(items)
        if missing > 0:
            logger.error("Bulk response omitted %d item(s)", missing, extra={"index": self.index})
            stats.failed += missing

        logger.info(
            "Elasticsearch indexing completed: %d added, %d updated, %d failed",
            stats.added,
            stats.updated,
            stats.failed,
            extra={"index": self.index},
        )
        return stats
