"""Search index access: client setup, bulk upserts and read queries."""

from .bulk import BulkIndexer, build_operations, classify_item
from .client import TENDER_MAPPINGS, check_connection, create_index_client, ensure_index
from .queries import TenderStats, get_recent_tenders, get_tender_stats, map_index_tender

__all__ = [
    # Client
    "TENDER_MAPPINGS",
    "check_connection",
    "create_index_client",
    "ensure_index",
    # Bulk
    "BulkIndexer",
    "build_operations",
    "classify_item",
    # Queries
    "TenderStats",
    "get_recent_tenders",
    "get_tender_stats",
    "map_index_tender",
]
