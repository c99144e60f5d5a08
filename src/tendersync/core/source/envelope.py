"""
Response envelope handling for the tender listing API.

Different endpoints wrap the record array differently; the sync
accepts the array under ``results`` or ``data``.
"""

from __future__ import annotations

import logging
from typing import Any

from tendersync.core.errors import MalformedResponseError


logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("results", "data")


def extract_records(body: Any) -> list[Any]:
    """Pull the record array out of a decoded API response.

    Args:
        body: Decoded JSON body

    Returns:
        The record list (possibly empty)

    Raises:
        MalformedResponseError: If neither envelope key holds an array
    """
    if isinstance(body, dict):
        logger.debug("API response keys: %s", list(body.keys()))
        for key in ENVELOPE_KEYS:
            records = body.get(key)
            if isinstance(records, list):
                return records

    preview = repr(body)[:1000]
    logger.error("Unexpected API response structure: %s", preview)
    raise MalformedResponseError(
        "Unexpected API response format: neither results nor data array found"
    )
