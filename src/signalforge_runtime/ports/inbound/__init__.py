"""Inbound ports - Operations exposed to the command layer.

Every operation except ``check_connection`` and ``connect`` raises
``NotConnectedError`` when called before a successful ``connect``.
All failures are ``RuntimeControlError`` subclasses carrying an ``ErrorKind``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol

from signalforge_runtime.domain.entities.container import ContainerRecord, DaemonSummary
from signalforge_runtime.domain.entities.stats import StatsSample
from signalforge_runtime.domain.entities.topology import NetworkTopology


class RuntimeControlPort(Protocol):
    """Protocol for the runtime control surface.

    Example:
        await control.connect()
        for record in await control.list_containers():
            if record.is_running():
                stats = await control.get_container_stats(record.id)
    """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Report whether a connection object exists (no daemon round-trip)."""
        ...

    @abstractmethod
    async def connect(self) -> bool:
        """Connect, replacing any previous handle.

        Raises:
            DaemonConnectionError: ``connection failed: <cause>``.
        """
        ...

    @abstractmethod
    async def list_containers(self) -> list[ContainerRecord]:
        """List managed containers in daemon order."""
        ...

    @abstractmethod
    async def start_container(self, container_id: str) -> None:
        ...

    @abstractmethod
    async def stop_container(self, container_id: str) -> None:
        ...

    @abstractmethod
    async def restart_container(self, container_id: str) -> None:
        ...

    @abstractmethod
    async def get_container_stats(self, container_id: str) -> StatsSample:
        """Derive stats from one daemon sample.

        Raises:
            NoStatsError: ``no stats available``.
        """
        ...

    @abstractmethod
    async def get_container_logs(
        self, container_id: str, tail: Optional[int] = None
    ) -> list[str]:
        ...

    @abstractmethod
    async def get_daemon_info(self) -> DaemonSummary:
        ...

    @abstractmethod
    async def get_network_topology(self) -> NetworkTopology:
        """Infer the topology of all managed containers.

        Raises:
            PartialTopologyError: If any container inspection fails.
        """
        ...

    @abstractmethod
    async def collect_running_stats(self) -> dict[str, StatsSample]:
        """Stats for every running managed container that has a sample."""
        ...


__all__ = ["RuntimeControlPort"]
