"""
Elasticsearch client construction and index setup.

The client is always built explicitly from config and handed to the
components that need it; its lifecycle belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import AsyncElasticsearch
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import ConnectionTimeout
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tendersync.core.config.models import ElasticsearchConfig
from tendersync.core.errors import IndexingError


logger = logging.getLogger(__name__)


TENDER_MAPPINGS: dict[str, Any] = {
    "properties": {
        "documentId": {"type": "keyword"},
        "tenderId": {"type": "long"},
        "tenderIdString": {"type": "keyword"},
        "referenceNumber": {"type": "keyword"},
        "tenderName": {"type": "text"},
        "title": {"type": "text"},
        "agencyName": {"type": "keyword"},
        "organization": {"type": "keyword"},
        "branchName": {"type": "keyword"},
        "location": {"type": "keyword"},
        "tenderStatusId": {"type": "integer"},
        "tenderStatusName": {"type": "keyword"},
        "status": {"type": "keyword"},
        "tenderActivityId": {"type": "integer"},
        "tenderActivityName": {"type": "keyword"},
        "category": {"type": "keyword"},
        "lastOfferPresentationDate": {"type": "date"},
        "closingDate": {"type": "date"},
        "remainingDays": {"type": "integer"},
        "createdAt": {"type": "date"},
        "updatedAt": {"type": "date"},
        "added_date": {"type": "date"},
        "source": {"type": "keyword"},
    }
}


def create_index_client(config: ElasticsearchConfig) -> AsyncElasticsearch:
    """Build an Elasticsearch client from config.

    Args:
        config: Elasticsearch connection settings

    Returns:
        A new AsyncElasticsearch; close it with ``await client.close()``
    """
    kwargs: dict[str, Any] = {
        "request_timeout": config.request_timeout,
    }

    if config.url.startswith("https"):
        kwargs["verify_certs"] = config.verify_certs

    if config.auth_required:
        kwargs["basic_auth"] = (config.username or "", config.password or "")

    return AsyncElasticsearch(config.url, **kwargs)


async def check_connection(client: AsyncElasticsearch, attempts: int = 3) -> str:
    """Verify the cluster answers, retrying connection failures.

    Args:
        client: Elasticsearch client
        attempts: Maximum attempts before giving up

    Returns:
        Cluster name

    Raises:
        IndexingError: If the cluster cannot be reached
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((ESConnectionError, ConnectionTimeout)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                info = await client.info()
    except Exception as e:
        raise IndexingError(f"Elasticsearch connection error: {e}", cause=e) from e

    cluster_name = info["cluster_name"]
    logger.info("Connected to Elasticsearch cluster: %s", cluster_name)
    return cluster_name


async def ensure_index(client: AsyncElasticsearch, index: str) -> bool:
    """Create the tender index with its mapping if it is missing.

    Returns:
        True if the index was created, False if it already existed

    Raises:
        IndexingError: If the index cannot be checked or created
    """
    try:
        if await client.indices.exists(index=index):
            logger.info("Elasticsearch index exists: %s", index, extra={"index": index})
            return False

        logger.info("Creating Elasticsearch index: %s", index, extra={"index": index})
        await client.indices.create(index=index, mappings=TENDER_MAPPINGS)
        return True
    except Exception as e:
        raise IndexingError(f"Error ensuring index {index}: {e}", cause=e) from e
