"""Prometheus metrics for the runtime control engine."""

from __future__ import annotations

from typing import Iterable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)

from signalforge_runtime.domain.entities.container import ContainerRecord
from signalforge_runtime.domain.entities.stats import StatsSample
from signalforge_runtime.domain.entities.topology import NetworkTopology


class MetricsRegistry:
    """Registry of all runtime control metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "signalforge_operations_total",
            "Total control operations",
            ["operation", "status"],  # list_containers/stop_container/..., success/<error kind>
            registry=self._registry,
        )

        self.operation_seconds = Histogram(
            "signalforge_operation_seconds",
            "Control operation latency in seconds",
            ["operation"],
            buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0),
            registry=self._registry,
        )

        # Container metrics
        self.managed_containers = Gauge(
            "signalforge_managed_containers",
            "Number of managed containers by state",
            ["state"],  # running, exited, paused, created
            registry=self._registry,
        )

        self.container_cpu_percent = Gauge(
            "signalforge_container_cpu_percent",
            "CPU usage percentage per container",
            ["container_id"],
            registry=self._registry,
        )

        self.container_memory_bytes = Gauge(
            "signalforge_container_memory_bytes",
            "Memory usage in bytes per container",
            ["container_id"],
            registry=self._registry,
        )

        # Topology metrics
        self.topology_nodes = Gauge(
            "signalforge_topology_nodes",
            "Nodes in the last inferred topology",
            registry=self._registry,
        )

        self.topology_edges = Gauge(
            "signalforge_topology_edges",
            "Edges in the last inferred topology",
            registry=self._registry,
        )

        # Connection state
        self.connected = Gauge(
            "signalforge_daemon_connected",
            "1 if a daemon connection exists",
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "signalforge_runtime",
            "Runtime control engine information",
            registry=self._registry,
        )

    def observe_containers(self, records: Iterable[ContainerRecord]) -> None:
        """Refresh the per-state container gauge from a listing."""
        counts: dict[str, int] = {}
        for record in records:
            counts[record.state] = counts.get(record.state, 0) + 1
        self.managed_containers.clear()
        for state, count in counts.items():
            self.managed_containers.labels(state=state).set(count)

    def observe_stats(self, container_id: str, sample: StatsSample) -> None:
        self.container_cpu_percent.labels(container_id=container_id).set(sample.cpu_percent)
        self.container_memory_bytes.labels(container_id=container_id).set(sample.memory_usage)

    def observe_topology(self, topology: NetworkTopology) -> None:
        self.topology_nodes.set(topology.node_count)
        self.topology_edges.set(topology.edge_count)


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8003, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Set up Prometheus metrics server."""
    global _metrics
    _metrics = MetricsRegistry(registry)

    from signalforge_runtime import __version__
    _metrics.info.info({"version": __version__})

    start_http_server(port, registry=registry or REGISTRY)
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
