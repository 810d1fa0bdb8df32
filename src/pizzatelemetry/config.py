"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into Pydantic models for the log and
  metrics collectors.

Collector URL and API key are optional: a section without them is valid but
unconfigured, and the matching transport turns every send into a no-op.
"""

import os

import dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_SOURCE = "jwt-pizza-service"
DEFAULT_FLUSH_INTERVAL = 10.0


def _get_env(name: str, default: str = "") -> str:
    """Read an env var, treating blank values as unset."""
    value = os.getenv(name, "").strip()
    return value or default


def _get_env_float(name: str, default: float) -> float:
    """Read a float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a float. Got: {raw!r}") from exc


class LoggingConfig(BaseModel):
    """Settings for the log collector (Loki push endpoint)."""

    url: str = Field(default="", description="Loki push URL")
    api_key: str = Field(default="", description="Collector API key")
    user_id: str = Field(default="", description="Collector user id")
    source: str = Field(default=DEFAULT_SOURCE, description="component label")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)


class MetricsConfig(BaseModel):
    """Settings for the metrics collector (OTLP/HTTP endpoint)."""

    url: str = Field(default="", description="OTLP metrics URL")
    api_key: str = Field(default="", description="Collector API key")
    source: str = Field(default=DEFAULT_SOURCE, description="source attribute")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)


class TelemetryConfig(BaseModel):
    """Top-level telemetry configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    flush_interval_seconds: float = Field(
        default=DEFAULT_FLUSH_INTERVAL, description="Metrics flush period"
    )

    @field_validator("flush_interval_seconds")
    @classmethod
    def validate_flush_interval(cls, v: float) -> float:
        """Reject zero and negative periods."""
        if v <= 0:
            raise ValueError("METRICS_FLUSH_INTERVAL must be positive.")
        return v


def load_config(env_file: str | None = None) -> TelemetryConfig:
    """Load telemetry configuration from the environment.

    Args:
        env_file: Optional path to a dotenv file. Existing environment
            variables take precedence over values in the file.

    Returns:
        Validated TelemetryConfig.
    """
    dotenv.load_dotenv(env_file, override=False)
    return TelemetryConfig(
        logging=LoggingConfig(
            url=_get_env("LOGGING_URL"),
            api_key=_get_env("LOGGING_API_KEY"),
            user_id=_get_env("LOGGING_USER_ID"),
            source=_get_env("LOGGING_SOURCE", DEFAULT_SOURCE),
        ),
        metrics=MetricsConfig(
            url=_get_env("METRICS_URL"),
            api_key=_get_env("METRICS_API_KEY"),
            source=_get_env("METRICS_SOURCE", DEFAULT_SOURCE),
        ),
        flush_interval_seconds=_get_env_float(
            "METRICS_FLUSH_INTERVAL", DEFAULT_FLUSH_INTERVAL
        ),
    )
