"""Outbound adapters - Implementations of the daemon port.

Provides the Docker SDK adapter and an in-memory mock for testing and
development without a container daemon.
"""

from signalforge_runtime.adapters.outbound.docker_daemon import DockerDaemonAdapter
from signalforge_runtime.adapters.outbound.mock_daemon import (
    MockContainerState,
    MockDaemon,
)

__all__ = [
    "DockerDaemonAdapter",
    "MockContainerState",
    "MockDaemon",
]
