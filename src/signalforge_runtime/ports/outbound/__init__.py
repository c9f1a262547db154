"""Outbound ports - Container daemon interface.

The daemon port is the only way the runtime core reaches the container
daemon. Implementations are blocking; callers serialize access and run
them off the event loop.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Callable, Optional, Protocol

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
)


class DaemonPort(Protocol):
    """Protocol for container daemon operations.

    Thread Safety:
        Implementations need not be thread-safe. The runtime connection
        guarantees at most one call is in flight at a time.

    References:
        - https://docs.docker.com/engine/api/
    """

    @abstractmethod
    def ping(self) -> None:
        """Check that the daemon answers.

        Raises:
            DaemonError: If the daemon is unreachable.
        """
        ...

    @abstractmethod
    def list_containers(self) -> list[ContainerRecord]:
        """List all containers, including stopped ones, in daemon order.

        Returns:
            Every container the daemon knows about, unfiltered.

        Raises:
            DaemonError: If listing fails.
        """
        ...

    @abstractmethod
    def inspect_container(self, container_id: str) -> ContainerInspection:
        """Inspect one container.

        Args:
            container_id: Container ID or name.

        Returns:
            Inspection data used for topology inference.

        Raises:
            DaemonError: If the container is gone or inspection fails.
        """
        ...

    @abstractmethod
    def start_container(self, container_id: str) -> None:
        """Start a container.

        Raises:
            DaemonError: If start fails.
        """
        ...

    @abstractmethod
    def stop_container(self, container_id: str, timeout_seconds: int) -> None:
        """Stop a container.

        The daemon sends SIGTERM, waits ``timeout_seconds``, then kills.

        Raises:
            DaemonError: If stop fails.
        """
        ...

    @abstractmethod
    def restart_container(self, container_id: str, timeout_seconds: int) -> None:
        """Restart a container with the same grace period as stop.

        Raises:
            DaemonError: If restart fails.
        """
        ...

    @abstractmethod
    def container_logs(self, container_id: str, tail: int) -> list[str]:
        """Fetch the last ``tail`` lines of stdout and stderr, timestamped.

        Raises:
            DaemonError: If fetching logs fails.
        """
        ...

    @abstractmethod
    def container_stats(self, container_id: str, one_shot: bool) -> Optional[dict[str, Any]]:
        """Take one non-streaming stats sample.

        Args:
            container_id: Container ID.
            one_shot: Skip waiting for a second CPU cycle (``precpu_stats``
                will then be empty).

        Returns:
            Decoded stats document, or None if the daemon returned nothing.

        Raises:
            DaemonError: If the stats query fails.
        """
        ...

    @abstractmethod
    def daemon_info(self) -> DaemonSummary:
        """Get daemon-wide counters and host facts.

        Raises:
            DaemonError: If the info query fails.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying transport."""
        ...


# Builds a fresh, verified daemon handle
DaemonConnector = Callable[[], DaemonPort]


class DaemonError(Exception):
    """Raised when a daemon operation fails."""

    pass


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "DaemonPort",
    "DaemonConnector",
    "DaemonError",
]
