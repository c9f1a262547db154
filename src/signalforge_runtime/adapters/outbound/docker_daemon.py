"""Docker Engine adapter for the daemon port.

Uses the low-level ``docker.APIClient`` of the Docker SDK so the raw
engine documents (list summaries, inspect, stats, info) can be mapped
directly into domain view objects.

References:
    - https://docker-py.readthedocs.io/en/stable/api.html
    - https://docs.docker.com/engine/api/
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

import docker
from docker.errors import DockerException

from signalforge_runtime.domain.entities.container import (
    ContainerInspection,
    ContainerRecord,
    DaemonSummary,
    PortMapping,
)
from signalforge_runtime.domain.value_objects.identifiers import normalize_container_name
from signalforge_runtime.ports.outbound import DaemonError

logger = logging.getLogger(__name__)


@contextmanager
def _daemon_errors(action: str) -> Iterator[None]:
    """Translate SDK and transport failures into DaemonError."""
    try:
        yield
    except (DockerException, OSError) as e:
        # requests' transport errors are OSError subclasses
        raise DaemonError(str(e) or f"{action} failed") from e


def record_from_summary(summary: Mapping[str, Any]) -> ContainerRecord:
    """Map one entry of ``GET /containers/json`` to a ContainerRecord."""
    names = summary.get("Names") or []
    name = normalize_container_name(names[0]) if names else "unknown"
    ports = tuple(
        PortMapping(
            private_port=int(port.get("PrivatePort") or 0),
            public_port=port.get("PublicPort"),
            port_type=port.get("Type") or "",
        )
        for port in summary.get("Ports") or []
    )
    return ContainerRecord(
        id=summary.get("Id") or "",
        name=name,
        image=summary.get("Image") or "",
        status=summary.get("Status") or "",
        state=summary.get("State") or "",
        created=int(summary.get("Created") or 0),
        ports=ports,
    )


def inspection_from_document(document: Mapping[str, Any]) -> ContainerInspection:
    """Map a ``GET /containers/{id}/json`` document to a ContainerInspection."""
    config = document.get("Config") or {}
    state = document.get("State") or {}
    health = state.get("Health")
    settings = document.get("NetworkSettings") or {}
    networks = {
        name: (endpoint or {}).get("IPAddress") or ""
        for name, endpoint in (settings.get("Networks") or {}).items()
    }
    return ContainerInspection(
        id=document.get("Id") or "",
        name=normalize_container_name(document.get("Name") or ""),
        image=config.get("Image") or document.get("Image") or "",
        running=bool(state.get("Running")),
        health_status=health.get("Status") if health else None,
        networks=networks,
        exposed_ports=_parse_exposed_ports(config.get("ExposedPorts")),
    )


def summary_from_info(info: Mapping[str, Any]) -> DaemonSummary:
    """Map ``GET /info`` to a DaemonSummary, zero-defaulting missing fields."""
    return DaemonSummary(
        containers_running=int(info.get("ContainersRunning") or 0),
        containers_paused=int(info.get("ContainersPaused") or 0),
        containers_stopped=int(info.get("ContainersStopped") or 0),
        images=int(info.get("Images") or 0),
        docker_version=info.get("ServerVersion") or "",
        os_type=info.get("OSType") or "",
        architecture=info.get("Architecture") or "",
        memory_total=int(info.get("MemTotal") or 0),
        cpus=int(info.get("NCPU") or 0),
    )


def _parse_exposed_ports(exposed: Optional[Mapping[str, Any]]) -> tuple[int, ...]:
    """Turn {"80/tcp": {}, "443/tcp": {}} into (80, 443)."""
    ports: set[int] = set()
    for key in exposed or {}:
        number = key.split("/", 1)[0]
        if number.isdigit():
            ports.add(int(number))
    return tuple(sorted(ports))


class DockerDaemonAdapter:
    """DaemonPort implementation backed by the Docker SDK.

    Example:
        daemon = DockerDaemonAdapter.connect()
        for record in daemon.list_containers():
            print(record.name, record.state)
    """

    def __init__(self, api: docker.APIClient):
        """Wrap an existing low-level API client.

        Args:
            api: Docker low-level API client.
        """
        self._api = api

    @classmethod
    def connect(cls, base_url: Optional[str] = None) -> "DockerDaemonAdapter":
        """Create a client and verify the daemon answers.

        Args:
            base_url: Daemon URL. None uses platform-default discovery
                (DOCKER_HOST or the local socket).

        Raises:
            DaemonError: If the daemon cannot be reached.
        """
        with _daemon_errors("connect"):
            if base_url:
                client = docker.DockerClient(base_url=base_url)
            else:
                client = docker.from_env()
        adapter = cls(client.api)
        try:
            adapter.ping()
        except DaemonError:
            client.close()
            raise
        logger.debug(f"Connected to container daemon at {client.api.base_url}")
        return adapter

    def ping(self) -> None:
        with _daemon_errors("ping"):
            self._api.ping()

    def list_containers(self) -> list[ContainerRecord]:
        with _daemon_errors("list"):
            summaries = self._api.containers(all=True)
        return [record_from_summary(summary) for summary in summaries]

    def inspect_container(self, container_id: str) -> ContainerInspection:
        with _daemon_errors("inspect"):
            document = self._api.inspect_container(container_id)
        return inspection_from_document(document)

    def start_container(self, container_id: str) -> None:
        with _daemon_errors("start"):
            self._api.start(container_id)

    def stop_container(self, container_id: str, timeout_seconds: int) -> None:
        with _daemon_errors("stop"):
            self._api.stop(container_id, timeout=timeout_seconds)

    def restart_container(self, container_id: str, timeout_seconds: int) -> None:
        with _daemon_errors("restart"):
            self._api.restart(container_id, timeout=timeout_seconds)

    def container_logs(self, container_id: str, tail: int) -> list[str]:
        with _daemon_errors("logs"):
            raw = self._api.logs(
                container_id,
                stdout=True,
                stderr=True,
                timestamps=True,
                tail=tail,
            )
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
        return [line for line in text.splitlines() if line]

    def container_stats(self, container_id: str, one_shot: bool) -> Optional[dict[str, Any]]:
        with _daemon_errors("stats"):
            if one_shot:
                payload = self._api.stats(container_id, stream=False, one_shot=True)
            else:
                payload = self._api.stats(container_id, stream=False)
        return payload or None

    def daemon_info(self) -> DaemonSummary:
        with _daemon_errors("info"):
            info = self._api.info()
        return summary_from_info(info)

    def close(self) -> None:
        with _daemon_errors("close"):
            self._api.close()
