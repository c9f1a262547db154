"""Runtime value objects."""

from typing import NewType

# Type-safe identifiers
ContainerId = NewType('ContainerId', str)
NetworkName = NewType('NetworkName', str)

DEFAULT_MANAGED_PREFIX = "signalforge-"


def normalize_container_name(raw_name: str) -> str:
    """Strip the leading slash the daemon puts on container names.
    
    Args:
        raw_name: Name as reported by the daemon (e.g. "/signalforge-php").
        
    Returns:
        Bare container name.
    """
    return raw_name.lstrip("/")


def is_managed_name(name: str, prefix: str = DEFAULT_MANAGED_PREFIX) -> bool:
    """Check whether a container name belongs to the managed namespace.
    
    Args:
        name: Container name, with or without the leading slash.
        prefix: Managed namespace prefix.
        
    Returns:
        True if the container is visible to this system.
    """
    return normalize_container_name(name).startswith(prefix)


def short_id(container_id: str, length: int = 12) -> str:
    """Shorten a container ID for logs and labels."""
    return container_id[:length]
