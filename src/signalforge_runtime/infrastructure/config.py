"""Configuration management for the runtime control engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DaemonConfig(BaseModel):
    """Container daemon access configuration."""

    base_url: str | None = Field(
        default=None, description="Daemon URL; None uses DOCKER_HOST or the local socket"
    )
    managed_prefix: str = Field(
        default="signalforge-", min_length=1, description="Name prefix of managed containers"
    )
    stop_timeout_seconds: int = Field(default=10, ge=0, description="Grace period before kill")
    default_log_tail: int = Field(default=100, ge=0, description="Log lines when no tail is given")
    stats_one_shot: bool = Field(
        default=False, description="Skip the daemon's second CPU sample (CPU% then reads 0)"
    )
    dev_mode: bool = Field(default=False, description="Use the in-memory mock daemon")


class TopologyConfig(BaseModel):
    """Topology inference configuration."""

    include_load: bool = Field(
        default=False, description="Fetch real stats per running node for cpu/mem fields"
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    metrics_port: int = Field(default=8003, ge=1, le=65535, description="Prometheus metrics port")
    enable_metrics_server: bool = Field(default=False, description="Start the metrics exporter")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    otel_endpoint: str | None = Field(default=None)
    otel_service_name: str = Field(default="signalforge_runtime")


class Config(BaseSettings):
    """Main configuration for the runtime control engine."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNALFORGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    daemon: DaemonConfig = Field(default_factory=DaemonConfig)
    topology: TopologyConfig = Field(default_factory=TopologyConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
