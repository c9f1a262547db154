"""Domain services."""

from signalforge_runtime.domain.services.concurrency_guard import SerialGate
from signalforge_runtime.domain.services.registry_view import ContainerRegistryView
from signalforge_runtime.domain.services.runtime_connection import RuntimeConnection
from signalforge_runtime.domain.services.stats_derivation import (
    derive_stats,
    parse_stats_payload,
)
from signalforge_runtime.domain.services.topology_inference import (
    build_topology,
    classify_health,
    classify_role,
    synthesize_edges,
)

__all__ = [
    "SerialGate",
    "ContainerRegistryView",
    "RuntimeConnection",
    "derive_stats",
    "parse_stats_payload",
    "build_topology",
    "classify_health",
    "classify_role",
    "synthesize_edges",
]
