"""Container registry view service."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
)
from signalforge_runtime.domain.entities.stats import CounterSnapshot
from signalforge_runtime.domain.errors import DaemonOperationError
from signalforge_runtime.domain.services.runtime_connection import RuntimeConnection
from signalforge_runtime.domain.services.stats_derivation import parse_stats_payload
from signalforge_runtime.domain.value_objects.identifiers import (
    DEFAULT_MANAGED_PREFIX,
    is_managed_name,
)
from signalforge_runtime.ports.outbound import DaemonError, DaemonPort

T = TypeVar("T")

DEFAULT_STOP_TIMEOUT_SECONDS = 10
DEFAULT_LOG_TAIL = 100


class ContainerRegistryView:
    """Live view of the managed containers.

    Handles:
    - Listing and namespace filtering
    - Lifecycle operations (start/stop/restart)
    - Logs, stats samples, inspection and daemon info

    Nothing is cached; every call goes to the daemon. Failures are wrapped
    once with the name of the failed operation and never retried.
    """

    def __init__(
        self,
        connection: RuntimeConnection,
        managed_prefix: str = DEFAULT_MANAGED_PREFIX,
        stop_timeout_seconds: int = DEFAULT_STOP_TIMEOUT_SECONDS,
        default_log_tail: int = DEFAULT_LOG_TAIL,
        stats_one_shot: bool = False,
    ):
        """Initialize registry view.

        Args:
            connection: Shared runtime connection.
            managed_prefix: Name prefix of containers this system may see.
            stop_timeout_seconds: Grace period before the daemon kills.
            default_log_tail: Log lines requested when no tail is given.
            stats_one_shot: Ask the daemon not to wait for a second CPU cycle.
        """
        self._connection = connection
        self._prefix = managed_prefix
        self._stop_timeout = stop_timeout_seconds
        self._default_tail = default_log_tail
        self._one_shot = stats_one_shot

    @property
    def managed_prefix(self) -> str:
        return self._prefix

    async def list(self) -> list[ContainerRecord]:
        """List managed containers, including stopped ones.

        Returns:
            Records whose name carries the managed prefix, in daemon order.
        """
        records = await self._call("list containers", lambda d: d.list_containers())
        return [record for record in records if is_managed_name(record.name, self._prefix)]

    async def start(self, container_id: str) -> None:
        """Start a container.

        Args:
            container_id: Container ID.
        """
        await self._call("start container", lambda d: d.start_container(container_id))

    async def stop(self, container_id: str) -> None:
        """Stop a container with the configured grace period.

        Args:
            container_id: Container ID.
        """
        timeout = self._stop_timeout
        await self._call("stop container", lambda d: d.stop_container(container_id, timeout))

    async def restart(self, container_id: str) -> None:
        """Restart a container with the configured grace period.

        Args:
            container_id: Container ID.
        """
        timeout = self._stop_timeout
        await self._call("restart container", lambda d: d.restart_container(container_id, timeout))

    async def logs(self, container_id: str, tail: Optional[int] = None) -> list[str]:
        """Fetch timestamped stdout/stderr lines.

        Args:
            container_id: Container ID.
            tail: Number of trailing lines; the configured default if None.

        Returns:
            Log lines in daemon order.
        """
        lines = tail if tail is not None else self._default_tail
        return await self._call("get container logs", lambda d: d.container_logs(container_id, lines))

    async def daemon_info(self) -> DaemonSummary:
        """Get daemon-wide counters."""
        return await self._call("get daemon info", lambda d: d.daemon_info())

    async def inspect(self, container_id: str) -> ContainerInspection:
        """Inspect one container.

        Args:
            container_id: Container ID.
        """
        return await self._call("inspect container", lambda d: d.inspect_container(container_id))

    async def stats(self, container_id: str) -> Optional[tuple[CounterSnapshot, CounterSnapshot]]:
        """Take one non-streaming stats sample.

        Args:
            container_id: Container ID.

        Returns:
            (current, previous) counter snapshots, or None if the daemon
            had no sample.
        """
        one_shot = self._one_shot
        payload = await self._call(
            "get stats",
            lambda d: d.container_stats(container_id, one_shot),
        )
        return parse_stats_payload(payload)

    async def _call(self, operation: str, request: Callable[[DaemonPort], T]) -> T:
        """Run a daemon request, wrapping daemon failures.

        Raises:
            NotConnectedError: If not connected.
            DaemonOperationError: If the daemon failed the request.
        """
        try:
            return await self._connection.call(request)
        except DaemonError as e:
            raise DaemonOperationError(operation, e) from e
