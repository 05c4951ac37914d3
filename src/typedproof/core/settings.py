"""
Configuration models for typedproof using Pydantic v2 Settings.

Values are read from ``TYPEDPROOF_``-prefixed environment variables with
``__`` as the nesting delimiter, e.g. ``TYPEDPROOF_CORE__POSW_ITERATIONS``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

LATEST_CONFIG_SCHEMA_VERSION = "1.0"


class CoreSettings(BaseModel):
    """Chain construction and verification settings."""

    posw_iterations: int = Field(
        default=1000,
        ge=1,
        description=(
            "Sequential hash iterations per event; recorded in every proof "
            "so verification replays the same count"
        ),
    )
    worker_queue_size: int = Field(
        default=1024,
        ge=1,
        description="Maximum queued PoSW requests before backpressure applies",
    )
    worker_request_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description=(
            "How long a caller waits for one PoSW request; "
            "the computation itself is not interrupted"
        ),
    )
    sample_count: int = Field(
        default=3,
        ge=1,
        description="Checkpoint segments replayed by sampled verification",
    )
    # Structured internal diagnostics for non-fatal errors (worker/session)
    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/INFO/WARN diagnostics to stderr",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )
    device_label: str = Field(
        default="typedproof",
        description="User agent string written into exported proofs",
    )

    @field_validator("device_label")
    @classmethod
    def _ensure_label_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("device_label must not be empty")
        return value


class RegistrySettings(BaseModel):
    """Bounds for the typed-content recency registry."""

    max_entries: int = Field(default=10_000, ge=1)
    segment_size: int = Field(default=50, ge=1)
    segment_step: int = Field(default=25, ge=1)


class Settings(BaseSettings):
    """Top-level configuration model with versioning."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)

    model_config = SettingsConfigDict(
        env_prefix="TYPEDPROOF_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_json(self) -> str:
        import json

        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )
