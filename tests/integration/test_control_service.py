"""Integration tests for the exposed runtime control operations."""

import asyncio

import pytest

from signalforge_runtime.adapters.outbound.mock_daemon import MockDaemon
from signalforge_runtime.domain.entities.container import PortMapping
from signalforge_runtime.domain.entities.topology import HealthStatus, NodeRole
from signalforge_runtime.domain.errors import (
    DaemonConnectionError,
    ErrorKind,
    NoStatsError,
    NotConnectedError,
    PartialTopologyError,
    RuntimeControlError,
)
from signalforge_runtime.infrastructure.config import Config, DaemonConfig
from signalforge_runtime.infrastructure.container import build_service
from signalforge_runtime.ports.outbound import DaemonError
from tests.conftest import make_stats_payload


def add_stack(daemon: MockDaemon) -> None:
    """Register a typical local stack on one network."""
    daemon.add_container(
        "n1", "signalforge-nginx", "nginx:latest",
        networks={"net1": "172.20.0.2"}, ports=[PortMapping(80, 80, "tcp")],
    )
    daemon.add_container(
        "p1", "signalforge-php", "php:8.4-fpm",
        networks={"net1": "172.20.0.3"}, ports=[PortMapping(9000, None, "tcp")],
    )
    daemon.add_container(
        "d1", "signalforge-mysql", "mysql:8.0",
        networks={"net1": "172.20.0.4"}, health_status="healthy",
    )
    daemon.add_container(
        "r1", "signalforge-redis", "redis:7-alpine",
        networks={"net1": "172.20.0.5"}, state="exited",
    )
    daemon.add_container("x1", "myapp-nginx", "nginx:latest", networks={"net1": "172.20.0.9"})


@pytest.mark.integration
class TestNotConnected:
    """All operations fail before connect."""

    @pytest.mark.asyncio
    async def test_check_connection(self, service):
        assert await service.check_connection() is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.list_containers(),
            lambda s: s.start_container("a"),
            lambda s: s.stop_container("a"),
            lambda s: s.restart_container("a"),
            lambda s: s.get_container_stats("a"),
            lambda s: s.get_container_logs("a"),
            lambda s: s.get_daemon_info(),
            lambda s: s.get_network_topology(),
            lambda s: s.collect_running_stats(),
        ],
    )
    async def test_operations_require_connection(self, service, call):
        with pytest.raises(NotConnectedError) as exc_info:
            await call(service)
        assert exc_info.value.to_dict() == {"error": "runtime not connected", "kind": "not_connected"}


@pytest.mark.integration
class TestConnect:
    """Connection establishment through the service."""

    @pytest.mark.asyncio
    async def test_connect(self, service, metrics_registry):
        assert await service.connect() is True
        assert await service.check_connection() is True
        assert metrics_registry.connected._value.get() == 1

    @pytest.mark.asyncio
    async def test_connect_failure(self, metrics_registry):
        def unreachable():
            raise DaemonError("Error while fetching server API version")

        service = build_service(Config(), connector=unreachable, metrics=metrics_registry)
        with pytest.raises(DaemonConnectionError) as exc_info:
            await service.connect()
        assert exc_info.value.detail == "connection failed: Error while fetching server API version"
        assert await service.check_connection() is False

    @pytest.mark.asyncio
    async def test_disconnect(self, service, mock_daemon):
        await service.connect()
        await service.disconnect()
        assert await service.check_connection() is False
        assert mock_daemon.closed


@pytest.mark.integration
class TestScenarios:
    """End-to-end scenarios over the mock daemon."""

    @pytest.mark.asyncio
    async def test_unprefixed_container_is_invisible(self, service, mock_daemon):
        mock_daemon.add_container("x1", "myapp-nginx", "nginx:latest")
        await service.connect()
        assert await service.list_containers() == []

    @pytest.mark.asyncio
    async def test_gateway_app_topology(self, service, mock_daemon):
        mock_daemon.add_container("n1", "signalforge-nginx", "nginx:latest", networks={"net1": "172.20.0.2"})
        mock_daemon.add_container("p1", "signalforge-php", "php:8.4-fpm", networks={"net1": "172.20.0.3"})
        await service.connect()

        topology = await service.get_network_topology()

        roles = sorted(node.role.value for node in topology.nodes)
        assert roles == ["app", "gateway"]
        assert [e.to_dict() for e in topology.edges] == [
            {"from": "n1", "to": "p1", "protocol": "FastCGI", "network": "net1"}
        ]

    @pytest.mark.asyncio
    async def test_no_stats_available(self, service, mock_daemon):
        mock_daemon.add_container("s1", "signalforge-php", "php:8.4-fpm")
        await service.connect()
        with pytest.raises(NoStatsError) as exc_info:
            await service.get_container_stats("s1")
        assert str(exc_info.value) == "no stats available"
        assert exc_info.value.kind is ErrorKind.NO_STATS

    @pytest.mark.asyncio
    async def test_memory_percent(self, service, mock_daemon):
        mock_daemon.add_container(
            "s1", "signalforge-mysql", "mysql:8.0",
            stats=make_stats_payload(memory_usage=512_000_000, memory_limit=1_024_000_000),
        )
        await service.connect()
        sample = await service.get_container_stats("s1")
        assert sample.memory_percent == 50.0


@pytest.mark.integration
class TestFullStack:
    """Operations over a realistic stack."""

    @pytest.mark.asyncio
    async def test_list_containers(self, service, mock_daemon, metrics_registry):
        add_stack(mock_daemon)
        await service.connect()
        records = await service.list_containers()
        assert [r.name for r in records] == [
            "signalforge-nginx",
            "signalforge-php",
            "signalforge-mysql",
            "signalforge-redis",
        ]
        assert metrics_registry.managed_containers.labels(state="running")._value.get() == 3
        assert metrics_registry.managed_containers.labels(state="exited")._value.get() == 1

    @pytest.mark.asyncio
    async def test_topology(self, service, mock_daemon, metrics_registry):
        add_stack(mock_daemon)
        await service.connect()

        topology = await service.get_network_topology()

        assert topology.node_count == 4
        assert [(e.source, e.target, e.protocol) for e in topology.edges] == [
            ("n1", "p1", "FastCGI"),
            ("p1", "d1", "MySQL"),
            ("p1", "r1", "Redis"),
        ]
        nginx = topology.get_node("n1")
        assert nginx.role is NodeRole.GATEWAY
        assert nginx.ip == "172.20.0.2"
        assert nginx.ports == "80"
        assert nginx.cpu is None
        assert topology.get_node("r1").health is HealthStatus.STOPPED
        assert topology.get_node("d1").health is HealthStatus.HEALTHY
        assert metrics_registry.topology_edges._value.get() == 3

    @pytest.mark.asyncio
    async def test_topology_with_load(self, service, mock_daemon):
        add_stack(mock_daemon)
        mock_daemon.get("p1").stats = make_stats_payload(
            total_usage=300, pre_total_usage=100, system_usage=2_000, pre_system_usage=1_000,
            online_cpus=2, memory_usage=256, memory_limit=1_024,
        )
        await service.connect()

        topology = await service.get_network_topology(include_load=True)

        php = topology.get_node("p1")
        assert php.cpu == (200 / 1_000) * 2 * 100
        assert php.mem == 25.0
        assert topology.get_node("n1").cpu is None  # running, but no sample
        assert ("container_stats", ("r1", False)) not in mock_daemon.calls

    @pytest.mark.asyncio
    async def test_topology_aborts_on_inspect_failure(self, service, mock_daemon):
        add_stack(mock_daemon)
        mock_daemon.fail("inspect_container", DaemonError("No such container: n1"))
        await service.connect()

        with pytest.raises(PartialTopologyError) as exc_info:
            await service.get_network_topology()

        assert exc_info.value.kind is ErrorKind.PARTIAL_TOPOLOGY
        assert exc_info.value.container_id == "n1"
        assert str(exc_info.value) == "failed to inspect container n1: No such container: n1"

    @pytest.mark.asyncio
    async def test_lifecycle_and_logs(self, service, mock_daemon):
        add_stack(mock_daemon)
        mock_daemon.get("n1").logs = ["2024-01-15T10:30:00.000Z [INFO] Container started"]
        await service.connect()

        await service.stop_container("n1")
        assert mock_daemon.get("n1").state == "exited"
        await service.start_container("n1")
        await service.restart_container("n1")
        assert mock_daemon.get("n1").state == "running"
        assert await service.get_container_logs("n1") == [
            "2024-01-15T10:30:00.000Z [INFO] Container started"
        ]
        assert ("container_logs", ("n1", 100)) in mock_daemon.calls

    @pytest.mark.asyncio
    async def test_failure_surface(self, service, mock_daemon, metrics_registry):
        add_stack(mock_daemon)
        mock_daemon.fail("restart_container", DaemonError("conflict"))
        await service.connect()

        with pytest.raises(RuntimeControlError) as exc_info:
            await service.restart_container("n1")

        assert exc_info.value.kind is ErrorKind.RUNTIME
        assert exc_info.value.detail == "failed to restart container: conflict"
        counter = metrics_registry.operations_total.labels(operation="restart_container", status="runtime")
        assert counter._value.get() == 1

    @pytest.mark.asyncio
    async def test_daemon_info(self, service, mock_daemon):
        add_stack(mock_daemon)
        mock_daemon.images = 24
        await service.connect()
        info = await service.get_daemon_info()
        assert info.images == 24
        assert info.docker_version == "27.4.0"
        assert info.containers_running == 4  # daemon-wide, unfiltered

    @pytest.mark.asyncio
    async def test_collect_running_stats(self, service, mock_daemon):
        add_stack(mock_daemon)
        for container_id in ("n1", "p1"):
            mock_daemon.get(container_id).stats = make_stats_payload(memory_usage=10, memory_limit=100)
        mock_daemon.get("r1").stats = make_stats_payload(memory_usage=10, memory_limit=100)
        await service.connect()

        samples = await service.collect_running_stats()

        # d1 is running without a sample, r1 is stopped, x1 is unmanaged
        assert set(samples) == {"n1", "p1"}
        assert samples["n1"].memory_percent == 10.0

    @pytest.mark.asyncio
    async def test_concurrent_operations_are_serialized(self, metrics_registry):
        daemon = MockDaemon(latency_seconds=0.01)
        add_stack(daemon)
        service = build_service(Config(), connector=lambda: daemon, metrics=metrics_registry)
        await service.connect()

        await asyncio.gather(
            service.get_network_topology(),
            service.stop_container("p1"),
            service.list_containers(),
            service.get_daemon_info(),
        )

        assert daemon.max_concurrent_calls == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_build_service_uses_config(metrics_registry):
    daemon = MockDaemon()
    daemon.add_container("a", "devstack-php", "php:8.4-fpm")
    daemon.add_container("b", "signalforge-php", "php:8.4-fpm")
    config = Config(daemon=DaemonConfig(managed_prefix="devstack-", stop_timeout_seconds=5))
    service = build_service(config, connector=lambda: daemon, metrics=metrics_registry)
    await service.connect()

    assert [r.id for r in await service.list_containers()] == ["a"]
    await service.stop_container("a")
    assert daemon.calls[-1] == ("stop_container", ("a", 5))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_requests_interleave_between_topology_inspections(metrics_registry):
    """Test topology takes the gate per daemon call, not for the whole walk."""
    daemon = MockDaemon(latency_seconds=0.05)
    add_stack(daemon)
    service = build_service(Config(), connector=lambda: daemon, metrics=metrics_registry)
    await service.connect()

    topology_task = asyncio.create_task(service.get_network_topology())
    while not any(name == "inspect_container" for name, _ in daemon.calls):
        await asyncio.sleep(0.005)
    await service.stop_container("r1")
    topology = await topology_task

    names = [name for name, _ in daemon.calls]
    stop_index = names.index("stop_container")
    inspect_indexes = [i for i, name in enumerate(names) if name == "inspect_container"]
    assert inspect_indexes[0] < stop_index < inspect_indexes[-1]
    assert len(inspect_indexes) == 4
    assert topology.node_count == 4
    assert daemon.max_concurrent_calls == 1
