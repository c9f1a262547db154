"""Value objects for the runtime domain.

Exports:
    Identifiers:
        - ContainerId: Type-safe container identifier
        - NetworkName: Type-safe virtual network name
        - DEFAULT_MANAGED_PREFIX: Namespace prefix of managed containers
"""

from signalforge_runtime.domain.value_objects.identifiers import (
    DEFAULT_MANAGED_PREFIX,
    ContainerId,
    NetworkName,
    is_managed_name,
    normalize_container_name,
    short_id,
)

__all__ = [
    "DEFAULT_MANAGED_PREFIX",
    "ContainerId",
    "NetworkName",
    "is_managed_name",
    "normalize_container_name",
    "short_id",
]
