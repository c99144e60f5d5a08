"""
Read-side queries over the tender index for dashboards and the CLI.

Failures raise IndexingError; there is no fallback data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from tendersync.core.errors import IndexingError

if TYPE_CHECKING:
    from elasticsearch import AsyncElasticsearch


TENDER_STATUS_NAMES: dict[int, str] = {
    1: "Draft",
    2: "Pending",
    3: "Under Review",
    4: "Open",
    5: "Closed",
    6: "Awarded",
    7: "Canceled",
}

STATUS_FIELD = "tenderStatusName"
CATEGORY_FIELD = "tenderActivityName"


@dataclass
class TenderStats:
    """Dashboard counters for the tender index."""

    total_tenders: int = 0
    new_today_count: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)


def status_name(status_id: Any) -> str:
    """Human name for a tender status id."""
    return TENDER_STATUS_NAMES.get(status_id, "Unknown")


def map_index_tender(doc_id: str | None, source: dict[str, Any]) -> dict[str, Any]:
    """Flatten an indexed tender into the dashboard's display shape."""
    return {
        "id": source.get("tenderId") or source.get("documentId") or doc_id,
        "tenderId": source.get("tenderId"),
        "tenderIdString": source.get("tenderIdString"),
        "referenceNumber": source.get("referenceNumber"),
        "title": source.get("tenderName") or source.get("title"),
        "status": source.get("tenderStatusName") or status_name(source.get("tenderStatusId")),
        "category": source.get("tenderActivityName") or source.get("category") or "Unknown",
        "organization": source.get("agencyName") or source.get("organization") or "Unknown",
        "branchName": source.get("branchName"),
        "closingDate": source.get("lastOfferPresentationDate"),
        "remainingDays": source.get("remainingDays"),
        "submitionDate": source.get("submitionDate"),
        "createdAt": source.get("added_date") or source.get("submitionDate"),
        "updatedAt": source.get("added_date"),
    }


def _body(response: Any) -> Any:
    """Unwrap a client ApiResponse to its decoded body."""
    return getattr(response, "body", response)


def _buckets(response: Any, name: str) -> dict[str, int]:
    aggregations = _body(response).get("aggregations") or {}
    buckets = (aggregations.get(name) or {}).get("buckets") or []
    return {str(b["key"]): int(b["doc_count"]) for b in buckets}


async def get_tender_stats(
    client: "AsyncElasticsearch",
    index: str,
    now: datetime | None = None,
) -> TenderStats:
    """Count tenders overall, added in the last day, by status and category.

    Raises:
        IndexingError: If any query fails
    """
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=1)

    try:
        total = await client.count(index=index)
        new_today = await client.count(
            index=index,
            query={"range": {"added_date": {"gte": since.isoformat()}}},
        )
        aggs = await client.search(
            index=index,
            size=0,
            aggs={
                "status_counts": {"terms": {"field": STATUS_FIELD, "size": 10}},
                "category_counts": {"terms": {"field": CATEGORY_FIELD, "size": 10}},
            },
        )
    except Exception as e:
        raise IndexingError(f"Error getting tender stats from Elasticsearch: {e}", cause=e) from e

    return TenderStats(
        total_tenders=int(_body(total)["count"]),
        new_today_count=int(_body(new_today)["count"]),
        by_status=_buckets(aggs, "status_counts"),
        by_category=_buckets(aggs, "category_counts"),
    )


async def get_recent_tenders(
    client: "AsyncElasticsearch",
    index: str,
    limit: int = 4,
) -> list[dict[str, Any]]:
    """Most recently indexed tenders, newest first.

    Raises:
        IndexingError: If the search fails
    """
    try:
        response = await client.search(
            index=index,
            size=limit,
            sort=[{"added_date": {"order": "desc"}}],
        )
    except Exception as e:
        raise IndexingError(f"Error getting recent tenders from Elasticsearch: {e}", cause=e) from e

    hits = (_body(response).get("hits") or {}).get("hits") or []
    return [map_index_tender(hit.get("_id"), hit.get("_source") or {}) for hit in hits]
