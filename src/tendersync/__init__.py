"""
TenderSync - Tender listing synchronization into a search index.

Pulls tender records from an external listing API, normalizes and
deduplicates them, bulk-upserts them into Elasticsearch and keeps an
auditable sync log in a relational store.
"""

__version__ = "0.1.0"
__app_name__ = "tendersync"
