"""Configuration loading and validation."""

from .catalog import (
    DEFAULT_FIELDS,
    TENDER_ACTIVITIES,
    TENDER_AREAS,
    TENDER_CATEGORIES,
    unknown_filters,
)
from .models import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SOURCE_URL,
    # Config models
    AppConfig,
    DatabaseConfig,
    ElasticsearchConfig,
    LoggingConfig,
    SchedulerConfig,
    SourceConfig,
    SyncSettings,
)
from .loader import load_app_config, load_sync_settings

__all__ = [
    # Constants
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SOURCE_URL",
    "DEFAULT_FIELDS",
    # Catalog
    "TENDER_ACTIVITIES",
    "TENDER_AREAS",
    "TENDER_CATEGORIES",
    "unknown_filters",
    # Config models
    "AppConfig",
    "DatabaseConfig",
    "ElasticsearchConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "SourceConfig",
    "SyncSettings",
    # Loaders
    "load_app_config",
    "load_sync_settings",
]
