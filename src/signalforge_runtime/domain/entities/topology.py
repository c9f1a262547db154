"""Network topology entities.

The topology is a best-effort view inferred from static container metadata:
roles come from image names and edges from shared virtual networks. No
traffic is observed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

UNAVAILABLE_IP = "N/A"
NO_PORTS = "none"


class NodeRole(Enum):
    """Coarse functional role of a container in the stack."""
    GATEWAY = "gateway"
    APP = "app"
    DATABASE = "database"
    CACHE = "cache"
    OTHER = "other"


class HealthStatus(Enum):
    """Container health as shown on the graph."""
    HEALTHY = "healthy"
    STARTING = "starting"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TopologyNode:
    """One managed container as a graph vertex."""
    id: str
    name: str
    role: NodeRole
    networks: tuple[str, ...]
    ip: str = UNAVAILABLE_IP
    ports: str = NO_PORTS
    health: HealthStatus = HealthStatus.UNKNOWN
    # Real derived load when requested, otherwise None
    cpu: Optional[float] = None
    mem: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "networks": list(self.networks),
            "ip": self.ip,
            "ports": self.ports,
            "health": self.health.value,
            "cpu": self.cpu,
            "mem": self.mem,
        }


@dataclass(frozen=True)
class TopologyEdge:
    """Directed inferred relationship between two nodes."""
    source: str  # Node id
    target: str  # Node id
    protocol: str
    network: str  # Shared network that justified the edge

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "protocol": self.protocol,
            "network": self.network,
        }


@dataclass(frozen=True)
class NetworkTopology:
    """Nodes and inferred edges of the managed stack."""
    nodes: tuple[TopologyNode, ...] = ()
    edges: tuple[TopologyEdge, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def get_node(self, node_id: str) -> Optional[TopologyNode]:
        """Find a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_on(self, network: str) -> list[TopologyEdge]:
        """Get all edges inferred from one network."""
        return [edge for edge in self.edges if edge.network == network]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
