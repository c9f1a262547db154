"""Unit tests for topology inference."""

import pytest

from signalforge_runtime.domain.entities.container import ContainerInspection
from signalforge_runtime.domain.entities.stats import StatsSample
from signalforge_runtime.domain.entities.topology import (
    NO_PORTS,
    UNAVAILABLE_IP,
    HealthStatus,
    NodeRole,
)
from signalforge_runtime.domain.services.topology_inference import (
    build_node,
    build_topology,
    classify_health,
    classify_role,
    database_protocol,
    group_by_network,
)


def inspection(
    container_id: str,
    image: str,
    networks: dict[str, str] | None = None,
    running: bool = True,
    **kwargs,
) -> ContainerInspection:
    return ContainerInspection(
        id=container_id,
        name=f"signalforge-{container_id}",
        image=image,
        running=running,
        networks=networks if networks is not None else {"net1": ""},
        **kwargs,
    )


@pytest.mark.unit
class TestClassifyRole:
    """Tests for role classification by image name."""

    @pytest.mark.parametrize(
        "image,role",
        [
            ("nginx:latest", NodeRole.GATEWAY),
            ("NGINX:1.27-alpine", NodeRole.GATEWAY),
            ("php:8.4-fpm", NodeRole.APP),
            ("mysql:8.0", NodeRole.DATABASE),
            ("postgres:17-alpine", NodeRole.DATABASE),
            ("mariadb:11", NodeRole.DATABASE),
            ("redis:7-alpine", NodeRole.CACHE),
            ("memcached:1.6", NodeRole.CACHE),
            ("dnsmasq:latest", NodeRole.OTHER),
            ("", NodeRole.OTHER),
        ],
    )
    def test_roles(self, image, role):
        assert classify_role(image) is role

    def test_precedence(self):
        """Test the first matching rule wins."""
        assert classify_role("custom/nginx-php") is NodeRole.GATEWAY
        assert classify_role("php-redis-worker") is NodeRole.APP
        assert classify_role("mysql-redis-bundle") is NodeRole.DATABASE

    def test_deterministic(self):
        assert classify_role("php:8.4-fpm") is classify_role("php:8.4-fpm")


@pytest.mark.unit
class TestClassifyHealth:
    """Tests for health classification."""

    @pytest.mark.parametrize(
        "status,health",
        [
            ("healthy", HealthStatus.HEALTHY),
            ("starting", HealthStatus.STARTING),
            ("unhealthy", HealthStatus.UNHEALTHY),
            ("none", HealthStatus.UNKNOWN),
            ("weird", HealthStatus.UNKNOWN),
        ],
    )
    def test_reported_status(self, status, health):
        assert classify_health(True, status) is health

    def test_reported_status_wins_over_state(self):
        assert classify_health(False, "healthy") is HealthStatus.HEALTHY

    def test_no_health_check(self):
        assert classify_health(True, None) is HealthStatus.HEALTHY
        assert classify_health(False, None) is HealthStatus.STOPPED


@pytest.mark.unit
class TestDatabaseProtocol:
    """Tests for database edge labels."""

    def test_labels(self):
        assert database_protocol("mysql:8.0") == "MySQL"
        assert database_protocol("mariadb:11") == "MySQL"
        assert database_protocol("postgres:17") == "PostgreSQL"
        assert database_protocol("") == "Database"


@pytest.mark.unit
class TestBuildNode:
    """Tests for node construction."""

    def test_first_address_and_ports(self):
        node = build_node(
            inspection(
                "web",
                "nginx:latest",
                networks={"bridge": "", "net1": "172.18.0.2", "net2": "172.19.0.2"},
                exposed_ports=(80, 443),
            )
        )
        assert node.ip == "172.18.0.2"
        assert node.ports == "80, 443"
        assert node.networks == ("bridge", "net1", "net2")
        assert node.role is NodeRole.GATEWAY
        assert node.health is HealthStatus.HEALTHY

    def test_sentinels(self):
        node = build_node(inspection("x", "busybox", networks={}, running=False))
        assert node.ip == UNAVAILABLE_IP
        assert node.ports == NO_PORTS
        assert node.health is HealthStatus.STOPPED

    def test_load_is_none_without_stats(self):
        node = build_node(inspection("php", "php:8.4-fpm"))
        assert node.cpu is None
        assert node.mem is None

    def test_load_from_real_stats(self):
        load = StatsSample(cpu_percent=12.5, memory_percent=40.0)
        node = build_node(inspection("php", "php:8.4-fpm"), load)
        assert node.cpu == 12.5
        assert node.mem == 40.0


@pytest.mark.unit
class TestGroupByNetwork:
    """Tests for network grouping."""

    def test_groups_in_first_seen_order(self):
        nodes = [
            build_node(inspection("a", "nginx", networks={"front": "", "back": ""})),
            build_node(inspection("b", "php", networks={"back": ""})),
            build_node(inspection("c", "redis", networks={"cache": ""})),
        ]
        assert group_by_network(nodes) == {
            "front": ["a"],
            "back": ["a", "b"],
            "cache": ["c"],
        }


@pytest.mark.unit
class TestBuildTopology:
    """Tests for edge synthesis."""

    def test_gateway_to_app(self):
        """Test one gateway and one app on one network give one FastCGI edge."""
        topology = build_topology(
            [inspection("nginx", "nginx:latest"), inspection("php", "php:8.4-fpm")]
        )
        assert topology.node_count == 2
        assert [e.to_dict() for e in topology.edges] == [
            {"from": "nginx", "to": "php", "protocol": "FastCGI", "network": "net1"}
        ]

    @pytest.mark.parametrize("gateways,apps,databases,caches", [(1, 1, 1, 1), (2, 3, 1, 2), (0, 2, 2, 0), (3, 0, 2, 2)])
    def test_edge_count_is_cross_product(self, gateways, apps, databases, caches):
        """Test edge count equals G*A + A*D + A*C on one network."""
        items = (
            [inspection(f"g{i}", "nginx") for i in range(gateways)]
            + [inspection(f"a{i}", "php") for i in range(apps)]
            + [inspection(f"d{i}", "postgres") for i in range(databases)]
            + [inspection(f"c{i}", "redis") for i in range(caches)]
            + [inspection("o0", "dnsmasq")]
        )
        topology = build_topology(items)
        assert topology.edge_count == gateways * apps + apps * databases + apps * caches

    def test_no_edge_without_shared_network(self):
        topology = build_topology(
            [
                inspection("nginx", "nginx", networks={"front": ""}),
                inspection("php", "php", networks={"back": ""}),
                inspection("db", "mysql", networks={"back": ""}),
            ]
        )
        assert [(e.source, e.target) for e in topology.edges] == [("php", "db")]
        for edge in topology.edges:
            source = topology.get_node(edge.source)
            target = topology.get_node(edge.target)
            assert edge.network in source.networks
            assert edge.network in target.networks

    def test_parallel_edges_over_two_networks(self):
        topology = build_topology(
            [
                inspection("php", "php", networks={"a": "", "b": ""}),
                inspection("cache", "redis", networks={"a": "", "b": ""}),
            ]
        )
        assert [(e.protocol, e.network) for e in topology.edges] == [("Redis", "a"), ("Redis", "b")]

    def test_database_labels(self):
        topology = build_topology(
            [
                inspection("php", "php"),
                inspection("my", "mysql:8"),
                inspection("pg", "postgres:17"),
                inspection("maria", "mariadb:11"),
            ]
        )
        labels = {e.target: e.protocol for e in topology.edges}
        assert labels == {"my": "MySQL", "pg": "PostgreSQL", "maria": "MySQL"}

    def test_other_nodes_have_no_edges(self):
        topology = build_topology(
            [inspection("dns", "dnsmasq"), inspection("php", "php"), inspection("mail", "mailhog")]
        )
        assert topology.edge_count == 0
        assert topology.node_count == 3

    def test_to_dict_shape(self):
        topology = build_topology([inspection("nginx", "nginx"), inspection("php", "php")])
        data = topology.to_dict()
        assert set(data) == {"nodes", "edges"}
        assert data["nodes"][0]["role"] == "gateway"
        assert data["nodes"][0]["health"] == "healthy"
        assert data["nodes"][0]["networks"] == ["net1"]

    def test_edges_on_network(self):
        topology = build_topology(
            [
                inspection("nginx", "nginx", networks={"front": ""}),
                inspection("php", "php", networks={"front": "", "back": ""}),
                inspection("db", "postgres", networks={"back": ""}),
            ]
        )
        assert [e.protocol for e in topology.edges_on("front")] == ["FastCGI"]
        assert [e.protocol for e in topology.edges_on("back")] == ["PostgreSQL"]
        assert topology.edges_on("bridge") == []
