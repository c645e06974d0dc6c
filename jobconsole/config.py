"""Runtime configuration, env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
JOBCONSOLE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleConfig(BaseSettings):
    """jobconsole configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export JOBCONSOLE_LOG_LEVEL=DEBUG
        export JOBCONSOLE_STORAGE_PATH=/data/console.db
        export JOBCONSOLE_PROCESSING_STATE_NAME=Running
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="JOBCONSOLE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage
    storage_path: Path = Path(".jobconsole/console.db")

    # Polling protocol
    processing_state_name: str = "Processing"
    refresh_hz: float = 2.0

    # CLI
    max_listed_consoles: int = 10

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    @property
    def rich_tracebacks(self) -> bool:
        """Rich tracebacks (with locals) are only shown in debug, never in production."""
        return self.debug and not self.is_production


# Module-level singleton: `from jobconsole.config import config`
config = ConsoleConfig()
