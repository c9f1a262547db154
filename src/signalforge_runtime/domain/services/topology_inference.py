"""Topology inference over container metadata.

Builds the connectivity graph of the managed stack without looking at any
traffic. Each container is classified into a role from its image name, and
edges are synthesized between roles that share a virtual network:

    gateway -> app       FastCGI
    app     -> database  MySQL / PostgreSQL / Database
    app     -> cache     Redis

Pairs are enumerated as a full cross product per network, so two gateways and
three apps on one network produce six gateway->app edges. A pair sharing two
networks gets one edge per network.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from signalforge_runtime.domain.entities.container import ContainerInspection
from signalforge_runtime.domain.entities.stats import StatsSample
from signalforge_runtime.domain.entities.topology import (
    NO_PORTS,
    UNAVAILABLE_IP,
    HealthStatus,
    NetworkTopology,
    NodeRole,
    TopologyEdge,
    TopologyNode,
)
from signalforge_runtime.domain.value_objects.identifiers import ContainerId, NetworkName

# Checked in order; first match wins
_ROLE_PATTERNS: tuple[tuple[NodeRole, tuple[str, ...]], ...] = (
    (NodeRole.GATEWAY, ("nginx",)),
    (NodeRole.APP, ("php",)),
    (NodeRole.DATABASE, ("mysql", "postgres", "mariadb")),
    (NodeRole.CACHE, ("redis", "memcache")),
)

_REPORTED_HEALTH = {
    "healthy": HealthStatus.HEALTHY,
    "starting": HealthStatus.STARTING,
    "unhealthy": HealthStatus.UNHEALTHY,
}

FASTCGI_PROTOCOL = "FastCGI"
CACHE_PROTOCOL = "Redis"


def classify_role(image: str) -> NodeRole:
    """Classify a container by case-insensitive substring match on its image."""
    lowered = image.lower()
    for role, needles in _ROLE_PATTERNS:
        if any(needle in lowered for needle in needles):
            return role
    return NodeRole.OTHER


def classify_health(running: bool, health_status: Optional[str]) -> HealthStatus:
    """Classify container health.

    Args:
        running: Whether the daemon reports the container as running.
        health_status: Health-check status, or None if no check is configured.

    Returns:
        Reported status mapped directly; without a health check, HEALTHY for
        running containers and STOPPED otherwise.
    """
    if health_status is not None:
        return _REPORTED_HEALTH.get(health_status.lower(), HealthStatus.UNKNOWN)
    return HealthStatus.HEALTHY if running else HealthStatus.STOPPED


def database_protocol(image: str) -> str:
    """Label an app->database edge from the database image name."""
    lowered = image.lower()
    if "mysql" in lowered or "mariadb" in lowered:
        return "MySQL"
    if "postgres" in lowered:
        return "PostgreSQL"
    return "Database"


def build_node(
    inspection: ContainerInspection,
    load: Optional[StatsSample] = None,
) -> TopologyNode:
    """Turn one container inspection into a graph vertex."""
    ip = next((addr for addr in inspection.networks.values() if addr), UNAVAILABLE_IP)
    ports = (
        ", ".join(str(port) for port in inspection.exposed_ports)
        if inspection.exposed_ports
        else NO_PORTS
    )
    return TopologyNode(
        id=inspection.id,
        name=inspection.name,
        role=classify_role(inspection.image),
        networks=tuple(inspection.networks),
        ip=ip,
        ports=ports,
        health=classify_health(inspection.running, inspection.health_status),
        cpu=load.cpu_percent if load else None,
        mem=load.memory_percent if load else None,
    )


def group_by_network(nodes: Iterable[TopologyNode]) -> dict[NetworkName, list[ContainerId]]:
    """Map each virtual network to the ids of nodes attached to it.

    Networks and ids keep first-seen order.
    """
    groups: dict[NetworkName, list[ContainerId]] = {}
    for node in nodes:
        for network in node.networks:
            members = groups.setdefault(NetworkName(network), [])
            if node.id not in members:
                members.append(ContainerId(node.id))
    return groups


def synthesize_edges(
    nodes: Sequence[TopologyNode],
    images: Mapping[str, str],
) -> list[TopologyEdge]:
    """Synthesize role-to-role edges per shared network.

    Args:
        nodes: Graph vertices.
        images: Node id -> image name, used to label database edges.

    Returns:
        Edges in network order, then gateway->app, app->database, app->cache.
    """
    by_id = {node.id: node for node in nodes}
    edges: list[TopologyEdge] = []

    for network, member_ids in group_by_network(nodes).items():
        members = [by_id[node_id] for node_id in member_ids]
        gateways = [n for n in members if n.role is NodeRole.GATEWAY]
        apps = [n for n in members if n.role is NodeRole.APP]
        databases = [n for n in members if n.role is NodeRole.DATABASE]
        caches = [n for n in members if n.role is NodeRole.CACHE]

        for gateway in gateways:
            for app in apps:
                edges.append(TopologyEdge(gateway.id, app.id, FASTCGI_PROTOCOL, network))
        for app in apps:
            for database in databases:
                protocol = database_protocol(images.get(database.id, ""))
                edges.append(TopologyEdge(app.id, database.id, protocol, network))
        for app in apps:
            for cache in caches:
                edges.append(TopologyEdge(app.id, cache.id, CACHE_PROTOCOL, network))

    return edges


def build_topology(
    inspections: Sequence[ContainerInspection],
    loads: Optional[Mapping[str, StatsSample]] = None,
) -> NetworkTopology:
    """Build the full topology from inspected containers.

    Args:
        inspections: One inspection per managed container, in listing order.
        loads: Optional container id -> derived stats for node load fields.

    Returns:
        Network topology.
    """
    loads = loads or {}
    nodes = [build_node(item, loads.get(item.id)) for item in inspections]
    images = {item.id: item.image for item in inspections}
    edges = synthesize_edges(nodes, images)
    return NetworkTopology(nodes=tuple(nodes), edges=tuple(edges))
