"""Container view entities.

These are fresh, immutable snapshots of daemon state. Nothing here is cached:
every query re-fetches from the daemon and builds new objects.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class PortMapping:
    """One published or exposed container port."""
    private_port: int
    public_port: Optional[int] = None  # None when not published on the host
    port_type: str = "tcp"  # tcp, udp, sctp


@dataclass(frozen=True)
class ContainerRecord:
    """Identity and lifecycle view of one managed container."""
    id: str
    name: str  # Always carries the managed prefix
    image: str
    status: str  # Free-text daemon status, e.g. "Up 2 hours"
    state: str  # created, running, paused, restarting, exited, dead
    created: int = 0  # Seconds since epoch
    ports: tuple[PortMapping, ...] = ()

    def is_running(self) -> bool:
        """Check if the daemon reports the container as running."""
        return self.state == "running"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stable wire shape."""
        data = asdict(self)
        data["ports"] = [asdict(port) for port in self.ports]
        return data


@dataclass(frozen=True)
class DaemonSummary:
    """Daemon-wide counters and host facts."""
    containers_running: int = 0
    containers_paused: int = 0
    containers_stopped: int = 0
    images: int = 0
    docker_version: str = ""
    os_type: str = ""
    architecture: str = ""
    memory_total: int = 0  # Bytes
    cpus: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ContainerInspection:
    """The part of a daemon inspect result that topology inference needs."""
    id: str
    name: str
    image: str
    running: bool
    health_status: Optional[str] = None  # None when no health check is configured
    # Network name -> IP address, in daemon-reported order
    networks: dict[str, str] = field(default_factory=dict)
    exposed_ports: tuple[int, ...] = ()
