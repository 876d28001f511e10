"""Server configuration — reads settings from environment variables.

All settings have defaults suitable for local development.
"""

import os
from dataclasses import dataclass, field

# Read at import time so FastAPI Query() defaults can reference them.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
DEFAULT_CLEANUP_DAYS = int(os.getenv("DEFAULT_CLEANUP_DAYS", "30"))

# Applied to submissions that omit these fields
DEFAULT_CARE_TARGET_STATUS = 4
DEFAULT_MEAL_TYPE = 1


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    host: str = "0.0.0.0"
    port: int = 8080

    # Comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Step catalog YAML (None → the bundled v1 catalog)
    catalog_path: str | None = None

    log_level: str = "INFO"

    # Server-side drafts untouched for this many days are purged by
    # care-assessment-cleanup.  0 disables the age filter.
    draft_ttl_days: int = DEFAULT_CLEANUP_DAYS

    # Shared secret expected in X-API-Key (None = no check)
    api_key: str | None = None


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_path=os.getenv("SERVER_CATALOG_PATH") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        draft_ttl_days=int(os.getenv("DRAFT_TTL_DAYS", str(DEFAULT_CLEANUP_DAYS))),
        api_key=os.getenv("SERVER_API_KEY") or None,
    )
