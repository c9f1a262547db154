"""Domain entities."""

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
    PortMapping,
)
from signalforge_runtime.domain.entities.stats import (
    CounterSnapshot,
    InterfaceCounters,
    StatsSample,
)
from signalforge_runtime.domain.entities.topology import (
    NO_PORTS,
    UNAVAILABLE_IP,
    HealthStatus,
    NetworkTopology,
    NodeRole,
    TopologyEdge,
    TopologyNode,
)

__all__ = [
    "ContainerInspection",
    "ContainerRecord",
    "DaemonSummary",
    "PortMapping",
    "CounterSnapshot",
    "InterfaceCounters",
    "StatsSample",
    "NO_PORTS",
    "UNAVAILABLE_IP",
    "HealthStatus",
    "NetworkTopology",
    "NodeRole",
    "TopologyEdge",
    "TopologyNode",
]
