"""Runtime control service - the operations exposed to the command layer.

Implements RuntimeControlPort on top of the registry view and the pure
stats/topology services. Each operation runs in a trace span, is counted
and timed in Prometheus, and logs one structured event.

Usage:
    from signalforge_runtime.infrastructure.container import get_container

    service = get_container().service
    await service.connect()
    topology = await service.get_network_topology()
    payload = topology.to_dict()  # {"nodes": [...], "edges": [...]}
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
)
from signalforge_runtime.domain.entities.stats import StatsSample
from signalforge_runtime.domain.entities.topology import NetworkTopology
from signalforge_runtime.domain.errors import (
    DaemonOperationError,
    NoStatsError,
    PartialTopologyError,
    RuntimeControlError,
)
from signalforge_runtime.domain.services.registry_view import ContainerRegistryView
from signalforge_runtime.domain.services.runtime_connection import RuntimeConnection
from signalforge_runtime.domain.services.stats_derivation import derive_stats
from signalforge_runtime.domain.services.topology_inference import build_topology
from signalforge_runtime.domain.value_objects.identifiers import short_id
from signalforge_runtime.infrastructure.logging import get_logger
from signalforge_runtime.infrastructure.metrics import MetricsRegistry, get_metrics
from signalforge_runtime.infrastructure.tracing import trace_span


class RuntimeControlService:
    """Exposed runtime control operations.

    Every daemon failure reaches the caller as a RuntimeControlError with a
    closed ErrorKind. Nothing is retried and no partial result is returned.
    """

    def __init__(
        self,
        connection: RuntimeConnection,
        registry: ContainerRegistryView,
        metrics: MetricsRegistry | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
        include_load: bool = False,
    ) -> None:
        """Initialize the control service.

        Args:
            connection: Shared runtime connection.
            registry: Registry view over that connection.
            metrics: Metrics registry; the global one if omitted.
            logger: Structured logger; a component logger if omitted.
            include_load: Default for filling topology cpu/mem from real stats.
        """
        self._connection = connection
        self._registry = registry
        self._metrics = metrics or get_metrics()
        self._logger = logger or get_logger(__name__, component="runtime_control")
        self._include_load = include_load

    async def check_connection(self) -> bool:
        """Report whether a connection object exists."""
        return self._connection.is_connected()

    async def connect(self) -> bool:
        """Connect to the daemon, replacing any previous handle."""
        with self._observe("connect"):
            await self._connection.connect()
        self._metrics.connected.set(1)
        return True

    async def disconnect(self) -> None:
        """Drop the daemon handle."""
        await self._connection.close()
        self._metrics.connected.set(0)
        self._logger.info("disconnected")

    async def list_containers(self) -> list[ContainerRecord]:
        """List managed containers in daemon order."""
        with self._observe("list_containers") as fields:
            records = await self._registry.list()
            fields["count"] = len(records)
        self._metrics.observe_containers(records)
        return records

    async def start_container(self, container_id: str) -> None:
        with self._observe("start_container", container_id=short_id(container_id)):
            await self._registry.start(container_id)

    async def stop_container(self, container_id: str) -> None:
        with self._observe("stop_container", container_id=short_id(container_id)):
            await self._registry.stop(container_id)

    async def restart_container(self, container_id: str) -> None:
        with self._observe("restart_container", container_id=short_id(container_id)):
            await self._registry.restart(container_id)

    async def get_container_stats(self, container_id: str) -> StatsSample:
        """Derive stats for one container from a single daemon sample.

        Raises:
            NoStatsError: If the daemon had no sample for the container.
        """
        with self._observe("get_container_stats", container_id=short_id(container_id)):
            pair = await self._registry.stats(container_id)
            if pair is None:
                raise NoStatsError()
            sample = derive_stats(*pair)
        self._metrics.observe_stats(container_id, sample)
        return sample

    async def get_container_logs(self, container_id: str, tail: Optional[int] = None) -> list[str]:
        with self._observe("get_container_logs", container_id=short_id(container_id), tail=tail) as fields:
            lines = await self._registry.logs(container_id, tail)
            fields["lines"] = len(lines)
        return lines

    async def get_daemon_info(self) -> DaemonSummary:
        with self._observe("get_daemon_info"):
            return await self._registry.daemon_info()

    async def get_network_topology(self, include_load: Optional[bool] = None) -> NetworkTopology:
        """Infer the topology of all managed containers.

        The gate is reacquired for every daemon call, so other requests may
        run between two inspections; the result is a snapshot, not a frozen
        point-in-time view.

        Args:
            include_load: Fill node cpu/mem from real stats of running
                containers. Uses the service default if None.

        Raises:
            PartialTopologyError: On the first failed inspection.
        """
        with_load = self._include_load if include_load is None else include_load
        with self._observe("get_network_topology", include_load=with_load) as fields:
            records = await self._registry.list()
            inspections = [await self._inspect_for_topology(record) for record in records]
            loads = await self._collect_loads(inspections) if with_load else None
            topology = build_topology(inspections, loads)
            fields["nodes"] = topology.node_count
            fields["edges"] = topology.edge_count
        self._metrics.observe_topology(topology)
        return topology

    async def collect_running_stats(self) -> dict[str, StatsSample]:
        """Stats for every running managed container.

        Containers whose sample is unavailable are left out; daemon failures
        propagate.
        """
        with self._observe("collect_running_stats") as fields:
            records = await self._registry.list()
            samples: dict[str, StatsSample] = {}
            for record in records:
                if not record.is_running():
                    continue
                pair = await self._registry.stats(record.id)
                if pair is not None:
                    samples[record.id] = derive_stats(*pair)
            fields["sampled"] = len(samples)
        for container_id, sample in samples.items():
            self._metrics.observe_stats(container_id, sample)
        return samples

    async def _inspect_for_topology(self, record: ContainerRecord) -> ContainerInspection:
        try:
            return await self._registry.inspect(record.id)
        except DaemonOperationError as e:
            raise PartialTopologyError(record.id, e.__cause__ or e) from e

    async def _collect_loads(self, inspections: list[ContainerInspection]) -> dict[str, StatsSample]:
        loads: dict[str, StatsSample] = {}
        for item in inspections:
            if not item.running:
                continue
            pair = await self._registry.stats(item.id)
            if pair is not None:
                loads[item.id] = derive_stats(*pair)
        return loads

    @contextmanager
    def _observe(self, operation: str, **attributes: Any) -> Iterator[dict[str, Any]]:
        """Trace, time, count and log one operation.

        Yields a dict the operation can add result fields to; they are
        included in the success log event.
        """
        fields: dict[str, Any] = {}
        started = time.perf_counter()
        with trace_span(f"runtime.{operation}", attributes):
            try:
                yield fields
            except RuntimeControlError as e:
                self._metrics.operations_total.labels(operation=operation, status=e.kind.value).inc()
                self._logger.warning(
                    f"{operation}_failed", kind=e.kind.value, error=e.detail, **attributes
                )
                raise
            else:
                self._metrics.operations_total.labels(operation=operation, status="success").inc()
                self._logger.info(operation, **attributes, **fields)
            finally:
                self._metrics.operation_seconds.labels(operation=operation).observe(
                    time.perf_counter() - started
                )
