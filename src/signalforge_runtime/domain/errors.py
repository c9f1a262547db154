"""Error taxonomy for runtime control operations.

Every failure surfaced to callers is a ``RuntimeControlError`` carrying a
closed ``ErrorKind`` so callers can branch on the kind instead of matching
message text. The message is the human-readable detail.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds."""
    CONNECTION = "connection"
    NOT_CONNECTED = "not_connected"
    RUNTIME = "runtime"
    NO_STATS = "no_stats"
    PARTIAL_TOPOLOGY = "partial_topology"


class RuntimeControlError(Exception):
    """Base class for all runtime control failures."""

    kind: ErrorKind = ErrorKind.RUNTIME

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, str]:
        return {"error": self.detail, "kind": self.kind.value}


class DaemonConnectionError(RuntimeControlError):
    """Daemon unreachable at connect time."""

    kind = ErrorKind.CONNECTION

    def __init__(self, cause: object) -> None:
        super().__init__(f"connection failed: {cause}")


class NotConnectedError(RuntimeControlError):
    """Operation attempted before a successful connect."""

    kind = ErrorKind.NOT_CONNECTED

    def __init__(self) -> None:
        super().__init__("runtime not connected")


class DaemonOperationError(RuntimeControlError):
    """Daemon rejected or failed an operation."""

    kind = ErrorKind.RUNTIME

    def __init__(self, operation: str, cause: object) -> None:
        super().__init__(f"failed to {operation}: {cause}")
        self.operation = operation


class NoStatsError(RuntimeControlError):
    """Stats query returned no sample."""

    kind = ErrorKind.NO_STATS

    def __init__(self) -> None:
        super().__init__("no stats available")


class PartialTopologyError(RuntimeControlError):
    """One container's inspection failed mid-computation."""

    kind = ErrorKind.PARTIAL_TOPOLOGY

    def __init__(self, container_id: str, cause: object) -> None:
        super().__init__(f"failed to inspect container {container_id}: {cause}")
        self.container_id = container_id
