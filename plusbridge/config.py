"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and PLUSBRIDGE_* environment variables.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeConfig(BaseSettings):
    """Adapter-layer configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PLUSBRIDGE_LOG_LEVEL=DEBUG
        export PLUSBRIDGE_HOST_MODULE=myapp.host_bridge
        export PLUSBRIDGE_DEFAULT_WAIT_TIMEOUT_MS=5000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLUSBRIDGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False
    debug: bool = False

    # Ambient bridge lookup: module imported when no bridge was installed
    host_module: str = "plus"

    # Adapter behaviour
    default_wait_timeout_ms: int = 30_000
    id_suffix_length: int = 6
    listener_errors_propagate: bool = False

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level instance: import as `from plusbridge.config import config`
config = BridgeConfig()
