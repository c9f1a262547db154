"""Stats derivation from raw daemon counters.

The daemon reports cumulative counters. A non-streaming stats query returns
the current observation together with the previous one (``precpu_stats``),
so CPU usage can be derived from a single call without keeping a rolling
window on our side.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from signalforge_runtime.domain.entities.stats import (
    CounterSnapshot,
    InterfaceCounters,
    StatsSample,
)


def derive_stats(current: CounterSnapshot, previous: CounterSnapshot) -> StatsSample:
    """Derive a stats sample from a current/previous counter pair.

    Args:
        current: Most recent counter snapshot.
        previous: Snapshot the daemon took before ``current``.

    Returns:
        Derived stats sample.
    """
    memory_usage = current.memory_usage or 0
    # Unreported limit counts as 1 byte so the percentage stays finite
    memory_limit = current.memory_limit if current.memory_limit is not None else 1
    network_rx, network_tx = sum_network_counters(current.networks)

    return StatsSample(
        cpu_percent=cpu_percent(current, previous),
        memory_usage=memory_usage,
        memory_limit=memory_limit,
        memory_percent=memory_percent(memory_usage, memory_limit),
        network_rx=network_rx,
        network_tx=network_tx,
    )


def cpu_percent(current: CounterSnapshot, previous: CounterSnapshot) -> float:
    """Compute CPU usage percentage between two snapshots.

    Returns:
        ``(cpu_delta / system_delta) * online_cpus * 100`` when both deltas
        are strictly positive, else 0.0.
    """
    cpu_delta = current.total_cpu_usage - previous.total_cpu_usage
    system_delta = current.system_cpu_usage - previous.system_cpu_usage
    cpu_count = current.online_cpus or 1

    if cpu_delta > 0 and system_delta > 0:
        return (cpu_delta / system_delta) * cpu_count * 100.0
    return 0.0


def memory_percent(usage: int, limit: int) -> float:
    """Compute memory usage as a percentage of the limit."""
    if limit <= 0:
        return 0.0
    return 100.0 * usage / limit


def sum_network_counters(
    networks: Optional[Mapping[str, InterfaceCounters]],
) -> tuple[int, int]:
    """Sum rx/tx bytes across every virtual interface.

    Returns:
        (rx_bytes, tx_bytes), both zero when no network info was reported.
    """
    if not networks:
        return 0, 0
    rx = sum(iface.rx_bytes for iface in networks.values())
    tx = sum(iface.tx_bytes for iface in networks.values())
    return rx, tx


def parse_stats_payload(
    payload: Optional[Mapping[str, Any]],
) -> Optional[tuple[CounterSnapshot, CounterSnapshot]]:
    """Convert a daemon stats document into a (current, previous) pair.

    Args:
        payload: Decoded JSON of a non-streaming stats query.

    Returns:
        Snapshot pair, or None if the daemon returned no sample.
    """
    if not payload:
        return None
    if "cpu_stats" not in payload and "memory_stats" not in payload:
        return None

    memory = payload.get("memory_stats") or {}
    networks = _parse_networks(payload.get("networks"))

    current = _parse_cpu(
        payload.get("cpu_stats"),
        memory_usage=memory.get("usage"),
        memory_limit=memory.get("limit"),
        networks=networks,
    )
    previous = _parse_cpu(payload.get("precpu_stats"))
    return current, previous


def _parse_cpu(
    cpu_stats: Optional[Mapping[str, Any]],
    memory_usage: Optional[int] = None,
    memory_limit: Optional[int] = None,
    networks: Optional[dict[str, InterfaceCounters]] = None,
) -> CounterSnapshot:
    cpu_stats = cpu_stats or {}
    cpu_usage = cpu_stats.get("cpu_usage") or {}
    return CounterSnapshot(
        total_cpu_usage=int(cpu_usage.get("total_usage") or 0),
        system_cpu_usage=int(cpu_stats.get("system_cpu_usage") or 0),
        online_cpus=cpu_stats.get("online_cpus"),
        memory_usage=memory_usage,
        memory_limit=memory_limit,
        networks=networks,
    )


def _parse_networks(
    raw: Optional[Mapping[str, Mapping[str, Any]]],
) -> Optional[dict[str, InterfaceCounters]]:
    if raw is None:
        return None
    return {
        name: InterfaceCounters(
            rx_bytes=int(counters.get("rx_bytes") or 0),
            tx_bytes=int(counters.get("tx_bytes") or 0),
        )
        for name, counters in raw.items()
    }
