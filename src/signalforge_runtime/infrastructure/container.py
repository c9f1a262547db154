"""Dependency injection container for the runtime control engine."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import ClassVar

import structlog
from opentelemetry import trace

from signalforge_runtime.adapters.inbound.control_service import RuntimeControlService
from signalforge_runtime.adapters.outbound.docker_daemon import DockerDaemonAdapter
from signalforge_runtime.adapters.outbound.mock_daemon import MockDaemon
from signalforge_runtime.domain.services.registry_view import ContainerRegistryView
from signalforge_runtime.domain.services.runtime_connection import RuntimeConnection
from signalforge_runtime.infrastructure.config import Config, get_config
from signalforge_runtime.infrastructure.logging import bind_daemon_context, setup_logging
from signalforge_runtime.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from signalforge_runtime.infrastructure.tracing import setup_tracing
from signalforge_runtime.ports.outbound import DaemonConnector


def build_connector(config: Config) -> DaemonConnector:
    """Pick the daemon connector for the configured mode."""
    if config.daemon.dev_mode:
        return MockDaemon
    return partial(DockerDaemonAdapter.connect, config.daemon.base_url)


def build_service(
    config: Config,
    connector: DaemonConnector | None = None,
    metrics: MetricsRegistry | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> RuntimeControlService:
    """Wire connection, registry view and control service from config."""
    connection = RuntimeConnection(connector or build_connector(config))
    registry = ContainerRegistryView(
        connection,
        managed_prefix=config.daemon.managed_prefix,
        stop_timeout_seconds=config.daemon.stop_timeout_seconds,
        default_log_tail=config.daemon.default_log_tail,
        stats_one_shot=config.daemon.stats_one_shot,
    )
    return RuntimeControlService(
        connection,
        registry,
        metrics=metrics,
        logger=logger,
        include_load=config.topology.include_load,
    )


@dataclass
class Container:
    """Dependency injection container for runtime control components."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    service: RuntimeControlService

    _instance: ClassVar["Container | None"] = None

    @classmethod
    def create(cls) -> "Container":
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = get_config()
        observability = config.observability
        logger = setup_logging(observability.log_level, observability.log_format)
        bind_daemon_context(config.daemon.base_url, config.daemon.managed_prefix)
        tracer = setup_tracing(
            observability.otel_service_name,
            observability.otel_endpoint,
            daemon_url=config.daemon.base_url,
        )
        if config.server.enable_metrics_server:
            metrics = setup_metrics(config.server.metrics_port)
        else:
            metrics = get_metrics()

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            service=build_service(config, metrics=metrics, logger=logger),
        )

        logger.info(
            "runtime_container_initialized",
            managed_prefix=config.daemon.managed_prefix,
            dev_mode=config.daemon.dev_mode,
        )

        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
