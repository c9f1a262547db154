"""Resource statistics entities."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class InterfaceCounters:
    """Cumulative byte counters of one virtual interface."""
    rx_bytes: int = 0
    tx_bytes: int = 0


@dataclass(frozen=True)
class CounterSnapshot:
    """Raw cumulative counters from one daemon stats observation.
    
    Optional fields are None when the daemon did not report them.
    """
    total_cpu_usage: int = 0  # Nanoseconds of CPU time used by the container
    system_cpu_usage: int = 0  # Nanoseconds of host CPU time
    online_cpus: Optional[int] = None
    memory_usage: Optional[int] = None  # Bytes
    memory_limit: Optional[int] = None  # Bytes
    networks: Optional[dict[str, InterfaceCounters]] = field(default=None)


@dataclass(frozen=True)
class StatsSample:
    """Derived point-in-time resource figures for one container."""
    cpu_percent: float = 0.0
    memory_usage: int = 0
    memory_limit: int = 0
    memory_percent: float = 0.0
    network_rx: int = 0  # Cumulative since container start, all interfaces
    network_tx: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
