"""Industrial IoT Monitor — Configuration Management.

Strictly-typed configuration system using pydantic-settings.
All settings are loaded from environment variables (or a local ``.env``
file) with validation, one prefix per section.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import get_logger

logger = get_logger(__name__)


class DatabaseSettings(BaseSettings):
    """Relational store configuration.

    Attributes:
        url: SQLAlchemy async connection URL.
        echo: Echo SQL statements to the log.
        seed_on_startup: Insert the default machine fleet when absent.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///industrial_iot.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    seed_on_startup: bool = Field(default=True, description="Seed the default fleet")

    @property
    def url_safe(self) -> str:
        """Connection URL with any password masked, safe for logging."""
        scheme, sep, rest = self.url.partition("://")
        if "@" not in rest:
            return self.url
        credentials, _, host = rest.rpartition("@")
        user = credentials.split(":", 1)[0]
        return f"{scheme}{sep}{user}:***@{host}"


class SimulationSettings(BaseSettings):
    """Telemetry simulation and fault injection configuration.

    Attributes:
        enabled: Run the broadcast loop with the service.
        interval_seconds: Fixed spacing between ticks.
        fault_probability: Per-tick probability of injecting one fault.
        seed: Optional random seed for reproducible runs.
        send_timeout_seconds: Longest a single push may take before the
            subscriber is dropped.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Run the broadcast loop")
    interval_seconds: float = Field(default=2.0, gt=0, le=3600, description="Tick interval (seconds)")
    fault_probability: float = Field(default=0.02, ge=0.0, le=1.0, description="Per-tick fault probability")
    seed: int | None = Field(default=None, description="Random seed (unset for entropy)")
    send_timeout_seconds: float = Field(default=1.0, gt=0, le=60, description="Per-subscriber send timeout (seconds)")


class ServerSettings(BaseSettings):
    """HTTP server configuration.

    Attributes:
        host: Bind address.
        port: Bind port.
        static_dir: Directory holding the built front-end bundle.
        cors_origins: Allowed CORS origins.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")
    static_dir: str = Field(default="dist", description="Front-end bundle directory")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class LogSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: Log output format (json for production, text for development).
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "text"] | None = Field(
        default=None,
        description="Log format (unset: text in development, json elsewhere)",
    )


class Settings(BaseSettings):
    """Root application settings aggregating all configuration sections.

    Use get_settings() to obtain a cached singleton instance.

    Example:
        >>> settings = get_settings()
        >>> settings.simulation.interval_seconds
        2.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Industrial IoT Monitor", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    debug: bool = Field(default=False, description="Debug mode (disable in production!)")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Enforce strict settings in production."""
        if self.environment == "production":
            if self.debug:
                raise ValueError("Debug mode must be disabled in production")
            if self.log.level == "DEBUG":
                raise ValueError("DEBUG log level is not allowed in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Raises:
        ValidationError: If settings are invalid. This causes immediate
            application startup failure.
    """
    return Settings()



def validate_startup() -> Settings:
    """Validate all configuration at application startup.

    Call this first in the FastAPI lifespan so a misconfigured deployment
    never starts accepting connections.

    Raises:
        SystemExit: If configuration validation fails.
    """
    try:
        settings = get_settings()
    except Exception as e:
        logger.critical("Configuration validation failed", error=str(e))
        raise SystemExit(1) from e

    logger.info(
        "Configuration loaded",
        environment=settings.environment,
        database=settings.database.url_safe,
        log_level=settings.log.level,
        simulation_enabled=settings.simulation.enabled,
    )
    return settings
