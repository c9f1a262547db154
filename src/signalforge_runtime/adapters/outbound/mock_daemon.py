"""Mock container daemon for testing and development.

This adapter provides an in-memory implementation of the DaemonPort
protocol for use in tests and on machines without a container daemon.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
    PortMapping,
)
from signalforge_runtime.ports.outbound import DaemonError


logger = logging.getLogger(__name__)


@dataclass
class MockContainerState:
    """State for a mock container."""

    id: str
    name: str
    image: str
    state: str = "running"
    created: int = field(default_factory=lambda: int(time.time()))
    ports: list[PortMapping] = field(default_factory=list)
    networks: dict[str, str] = field(default_factory=dict)  # name -> IP
    health_status: Optional[str] = None
    stats: Optional[dict[str, Any]] = None  # Raw stats document
    logs: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.state == "running":
            return "Up"
        if self.state == "exited":
            return "Exited (0)"
        return self.state.capitalize()


class MockDaemon:
    """Mock implementation of DaemonPort for testing.

    Simulates daemon behavior in memory. Failures can be injected per
    operation, and an optional per-call latency makes overlapping calls
    observable: ``max_concurrent_calls`` records the highest number of
    calls that were ever in flight at once.

    Example:
        daemon = MockDaemon()
        daemon.add_container("c1", "signalforge-nginx", "nginx:latest", networks={"net1": "172.18.0.2"})
        daemon.fail("inspect_container", DaemonError("No such container: c1"))
    """

    def __init__(self, latency_seconds: float = 0.0, version: str = "27.4.0"):
        """Initialize mock daemon.

        Args:
            latency_seconds: Simulated round-trip time of every call.
            version: Reported daemon version.
        """
        self._containers: dict[str, MockContainerState] = {}
        self._failures: dict[str, DaemonError] = {}
        self._latency = latency_seconds
        self._version = version
        self._active = 0
        self._counter_lock = threading.Lock()
        self.max_concurrent_calls = 0
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.images = 0
        self.closed = False

    def add_container(
        self,
        container_id: str,
        name: str,
        image: str,
        state: str = "running",
        **kwargs: Any,
    ) -> MockContainerState:
        """Register a container with the mock daemon."""
        container = MockContainerState(id=container_id, name=name, image=image, state=state, **kwargs)
        self._containers[container_id] = container
        return container

    def remove_container(self, container_id: str) -> None:
        """Make a container disappear, as if removed by another client."""
        self._containers.pop(container_id, None)

    def fail(self, operation: str, error: DaemonError) -> None:
        """Make every call of ``operation`` raise ``error``."""
        self._failures[operation] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    def get(self, container_id: str) -> Optional[MockContainerState]:
        return self._containers.get(container_id)

    # DaemonPort

    def ping(self) -> None:
        self._enter("ping")
        self._leave()

    def list_containers(self) -> list[ContainerRecord]:
        self._enter("list_containers")
        try:
            return [
                ContainerRecord(
                    id=c.id,
                    name=c.name,
                    image=c.image,
                    status=c.status,
                    state=c.state,
                    created=c.created,
                    ports=tuple(c.ports),
                )
                for c in self._containers.values()
            ]
        finally:
            self._leave()

    def inspect_container(self, container_id: str) -> ContainerInspection:
        self._enter("inspect_container", container_id)
        try:
            c = self._require(container_id)
            return ContainerInspection(
                id=c.id,
                name=c.name,
                image=c.image,
                running=c.state == "running",
                health_status=c.health_status,
                networks=dict(c.networks),
                exposed_ports=tuple(sorted({p.private_port for p in c.ports})),
            )
        finally:
            self._leave()

    def start_container(self, container_id: str) -> None:
        self._enter("start_container", container_id)
        try:
            self._require(container_id).state = "running"
            logger.debug(f"Started mock container: {container_id}")
        finally:
            self._leave()

    def stop_container(self, container_id: str, timeout_seconds: int) -> None:
        self._enter("stop_container", container_id, timeout_seconds)
        try:
            self._require(container_id).state = "exited"
            logger.debug(f"Stopped mock container: {container_id}")
        finally:
            self._leave()

    def restart_container(self, container_id: str, timeout_seconds: int) -> None:
        self._enter("restart_container", container_id, timeout_seconds)
        try:
            self._require(container_id).state = "running"
        finally:
            self._leave()

    def container_logs(self, container_id: str, tail: int) -> list[str]:
        self._enter("container_logs", container_id, tail)
        try:
            lines = self._require(container_id).logs
            return list(lines[-tail:]) if tail > 0 else []
        finally:
            self._leave()

    def container_stats(self, container_id: str, one_shot: bool) -> Optional[dict[str, Any]]:
        self._enter("container_stats", container_id, one_shot)
        try:
            stats = self._require(container_id).stats
            return dict(stats) if stats else None
        finally:
            self._leave()

    def daemon_info(self) -> DaemonSummary:
        self._enter("daemon_info")
        try:
            states = [c.state for c in self._containers.values()]
            return DaemonSummary(
                containers_running=states.count("running"),
                containers_paused=states.count("paused"),
                containers_stopped=len(states) - states.count("running") - states.count("paused"),
                images=self.images,
                docker_version=self._version,
                os_type="linux",
                architecture="x86_64",
            )
        finally:
            self._leave()

    def close(self) -> None:
        self.closed = True

    # Helpers

    def _require(self, container_id: str) -> MockContainerState:
        container = self._containers.get(container_id)
        if container is None:
            raise DaemonError(f"No such container: {container_id}")
        return container

    def _enter(self, operation: str, *args: Any) -> None:
        with self._counter_lock:
            self.calls.append((operation, args))
            self._active += 1
            self.max_concurrent_calls = max(self.max_concurrent_calls, self._active)
        if self._latency:
            time.sleep(self._latency)
        failure = self._failures.get(operation)
        if failure is not None:
            self._leave()
            raise failure

    def _leave(self) -> None:
        with self._counter_lock:
            self._active -= 1
