"""Environment-driven settings for sequelorm.

``OrmSettings`` reads ``SEQUELORM_*`` environment variables (and a ``.env``
file) so the database URL and logging setup do not have to be hard-coded
by the application that embeds the mapping layer.

Examples:
    >>> import os
    >>> os.environ["SEQUELORM_DATABASE_URL"] = "sqlite:///inventory.db"
    >>> OrmSettings().database_url
    'sqlite:///inventory.db'

Tags:
    settings, configuration, pydantic, environment, sequelorm
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrmSettings(BaseSettings):
    """Settings for the mapping layer.

    Fields
    ──────
    database_url : ``memory``, ``sqlite:///path``, a bare file path, or ``mysql://...``
    log_level    : structlog log level
    log_json     : True for JSON logs, False for console, None to auto-detect
    service_name : Service name stamped on every log line
    """

    model_config = SettingsConfigDict(
        env_prefix="SEQUELORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = Field(
        default="memory",
        description="Connector URL passed to create_connector()",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "sequelorm"


__all__ = ["OrmSettings"]
