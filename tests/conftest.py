"""Pytest configuration and fixtures for signalforge_runtime tests."""

from __future__ import annotations

from typing import Any, Optional

import pytest
from prometheus_client import CollectorRegistry

from signalforge_runtime.adapters.inbound.control_service import RuntimeControlService
from signalforge_runtime.adapters.outbound.mock_daemon import MockDaemon
from signalforge_runtime.domain.services.registry_view import ContainerRegistryView
from signalforge_runtime.domain.services.runtime_connection import RuntimeConnection
from signalforge_runtime.infrastructure.metrics import MetricsRegistry


def make_stats_payload(
    total_usage: int = 0,
    pre_total_usage: int = 0,
    system_usage: int = 0,
    pre_system_usage: int = 0,
    online_cpus: Optional[int] = None,
    memory_usage: Optional[int] = None,
    memory_limit: Optional[int] = None,
    networks: Optional[dict[str, tuple[int, int]]] = None,
) -> dict[str, Any]:
    """Build a daemon stats document in the engine's JSON shape."""
    cpu_stats: dict[str, Any] = {
        "cpu_usage": {"total_usage": total_usage},
        "system_cpu_usage": system_usage,
    }
    if online_cpus is not None:
        cpu_stats["online_cpus"] = online_cpus
    memory_stats: dict[str, Any] = {}
    if memory_usage is not None:
        memory_stats["usage"] = memory_usage
    if memory_limit is not None:
        memory_stats["limit"] = memory_limit
    payload: dict[str, Any] = {
        "cpu_stats": cpu_stats,
        "precpu_stats": {
            "cpu_usage": {"total_usage": pre_total_usage},
            "system_cpu_usage": pre_system_usage,
        },
        "memory_stats": memory_stats,
    }
    if networks is not None:
        payload["networks"] = {
            name: {"rx_bytes": rx, "tx_bytes": tx} for name, (rx, tx) in networks.items()
        }
    return payload


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry."""
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def mock_daemon() -> MockDaemon:
    """Provide an empty mock daemon."""
    return MockDaemon()


@pytest.fixture
def connection(mock_daemon: MockDaemon) -> RuntimeConnection:
    """Provide an unconnected runtime connection to the mock daemon."""
    return RuntimeConnection(lambda: mock_daemon)


@pytest.fixture
def registry(connection: RuntimeConnection) -> ContainerRegistryView:
    """Provide a registry view with the default managed prefix."""
    return ContainerRegistryView(connection, managed_prefix="signalforge-")


@pytest.fixture
def service(
    connection: RuntimeConnection,
    registry: ContainerRegistryView,
    metrics_registry: MetricsRegistry,
) -> RuntimeControlService:
    """Provide an unconnected control service over the mock daemon."""
    return RuntimeControlService(connection, registry, metrics=metrics_registry)


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
