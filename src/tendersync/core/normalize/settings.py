"""
Sync settings normalization.

Turns loosely-typed sync settings into the query parameters the
external tender API understands.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from tendersync.core.config.catalog import unknown_filters
from tendersync.core.config.models import DEFAULT_PAGE_SIZE, SyncSettings
from tendersync.core.errors import ConfigurationError


logger = logging.getLogger(__name__)


def coerce_settings(value: SyncSettings | Mapping[str, Any] | None) -> SyncSettings:
    """Accept settings as a model, a plain mapping, or nothing.

    Raises:
        ConfigurationError: If a mapping does not validate
    """
    if value is None:
        return SyncSettings()
    if isinstance(value, SyncSettings):
        return value
    if isinstance(value, Mapping):
        try:
            return SyncSettings.model_validate(dict(value))
        except ValidationError as e:
            summary = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(
                summary,
                details=str(e),
                cause=e,
            ) from e
    raise ConfigurationError(f"Unsupported sync settings type: {type(value).__name__}")


def _join_fields(fields: list[str] | str | None) -> str | None:
    if fields is None:
        return None
    if isinstance(fields, str):
        return fields or None
    joined = ",".join(str(f) for f in fields)
    return joined or None


def build_query_params(settings: SyncSettings | None = None) -> dict[str, str]:
    """Build external API query parameters from sync settings.

    PageSize is always present (defaulting to 50). Category, activity and
    area filters are forwarded only when set, and the field projection is
    comma-joined when given as a list.

    Args:
        settings: Sync settings (None means no constraints)

    Returns:
        Ordered mapping of query parameter name to value
    """
    if settings is None:
        settings = SyncSettings()

    params: dict[str, str] = {}

    if settings.page_size and settings.page_size > 0:
        params["PageSize"] = str(settings.page_size)
    else:
        params["PageSize"] = str(DEFAULT_PAGE_SIZE)

    if settings.tender_category:
        params["TenderCategory"] = str(settings.tender_category)

    if settings.tender_activity_id:
        params["TenderActivityId"] = str(settings.tender_activity_id)

    if settings.tender_areas_id:
        params["TenderAreasIdString"] = str(settings.tender_areas_id)

    fields = _join_fields(settings.requested_fields)
    if fields:
        params["fields"] = fields

    for note in unknown_filters(
        tender_category=settings.tender_category,
        tender_activity_id=settings.tender_activity_id,
        tender_areas_id=settings.tender_areas_id,
    ):
        logger.warning("%s; forwarding anyway", note)

    return params
