"""
Pydantic configuration models for TenderSync.

These models provide type-safe configuration with validation for:
- Per-run sync settings (external API filters)
- External source connection
- Elasticsearch connection
- Database, logging and scheduler settings
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


DEFAULT_SOURCE_URL = "https://tenders.etimad.sa/Tender/AllSupplierTendersForVisitorAsync"
DEFAULT_PAGE_SIZE = 50


# =============================================================================
# Sync Settings
# =============================================================================


class SyncSettings(BaseModel):
    """Filters and projection forwarded to the external tender API.

    Every option is optional; an absent option leaves that dimension
    unconstrained. Accepts the camelCase keys the dashboard sends as
    well as the attribute names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    page_size: int | None = Field(
        default=None,
        alias="pageSize",
        description="External page size (default 50 when absent or non-positive)",
    )
    tender_category: int | None = Field(
        default=None,
        alias="tenderCategory",
        description="Tender category filter",
    )
    tender_activity_id: int | None = Field(
        default=None,
        alias="tenderActivityId",
        description="Tender activity filter",
    )
    tender_areas_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("tenderAreasId", "tenderAreasIdString", "tender_areas_id"),
        description="Tender area (region) filter",
    )
    requested_fields: list[str] | str | None = Field(
        default=None,
        alias="fields",
        description="Field projection, joined with commas when forwarded",
    )

    @field_validator(
        "page_size",
        "tender_category",
        "tender_activity_id",
        "tender_areas_id",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Form inputs send empty strings for unset numbers."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


# =============================================================================
# External Source Configuration
# =============================================================================


class SourceConfig(BaseModel):
    """External tender-listing API settings."""

    url: str = Field(
        default=DEFAULT_SOURCE_URL,
        description="Endpoint returning tender records",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; TenderSync/0.1)",
        description="User-Agent header sent to the source",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers for every request",
    )


# =============================================================================
# Elasticsearch Configuration
# =============================================================================


class ElasticsearchConfig(BaseModel):
    """Search index connection settings."""

    url: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch node URL",
    )
    tenders_index: str = Field(
        default="tenders",
        description="Index holding tender documents",
    )
    auth_required: bool = Field(
        default=False,
        description="Send basic auth credentials",
    )
    username: str | None = Field(default=None)
    password: str | None = Field(default=None)
    verify_certs: bool = Field(
        default=True,
        description="Verify TLS certificates",
    )
    request_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=600.0,
        description="Per-request timeout for index calls",
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts when checking the cluster connection",
    )


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/tendersync.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Connection pool size",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/tendersync.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )


# =============================================================================
# Scheduler Configuration
# =============================================================================


class SchedulerConfig(BaseModel):
    """Periodic sync settings."""

    enabled: bool = Field(
        default=True,
        description="Enable the periodic sync job",
    )
    interval_minutes: int = Field(
        default=60,
        ge=1,
        le=24 * 60,
        description="Minutes between sync runs",
    )
    jitter_minutes: int = Field(
        default=0,
        ge=0,
        le=60,
        description="Random delay added to each run",
    )
    lock_ttl_minutes: int = Field(
        default=30,
        ge=1,
        description="Run lock expiry, in case a holder dies",
    )
    timeout_seconds: float | None = Field(
        default=300.0,
        description="Deadline for one scheduled sync run",
    )
    settings: SyncSettings = Field(
        default_factory=SyncSettings,
        description="Sync settings used by scheduled runs",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    data_dir: Path = Field(
        default=Path("data"),
        description="Data storage directory",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    elasticsearch: ElasticsearchConfig = Field(default_factory=ElasticsearchConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
