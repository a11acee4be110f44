"""Tests for the network flow service and the DI container."""

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from helpers import line
from streetflow.adapters.graph import DijkstraRouteSolver
from streetflow.config import AppConfig, GraphConfig, RoutingConfig, reset_config
from streetflow.container import Container, get_container, reset_container
from streetflow.domain.errors import (
    NoRouteFoundError,
    RenderingError,
    StreetFlowError,
    UnknownProfileError,
)
from streetflow.flows.aggregate import FlowAggregator
from streetflow.graph.builder import GraphBuilder
from streetflow.ports.rendering import FlowRendererPort
from streetflow.services import NetworkFlowService

FEATURES = [
    line((0, 0), (1, 0), highway="residential"),
    line((1, 0), (1, 1), highway="residential"),
    line((1, 1), (0, 1), highway="motorway"),
    line((0, 1), (0, 0), highway="footway"),
    line((7, 7)),
]


@pytest.fixture
def service():
    return NetworkFlowService(
        builder=GraphBuilder(config=GraphConfig(reference="planar")),
        route_solver=DijkstraRouteSolver(),
        aggregator=FlowAggregator(max_workers=2, batch_size=1),
        renderer=MagicMock(spec=FlowRendererPort),
    )


class TestNetworkFlowService:
    def test_load_features_reports_skipped(self, service):
        report = service.load_features(FEATURES)
        assert report.features_skipped == 1
        assert service.ingest_report is report

    def test_graph_requires_features(self, service):
        with pytest.raises(StreetFlowError):
            service.graph("foot")

    def test_graph_is_cached_per_profile(self, service):
        service.load_features(FEATURES)
        foot = service.graph("foot")
        assert service.graph("foot") is foot
        assert service.graph("car") is not foot
        assert service.build_report("foot").profile_excluded == 1
        assert service.build_report("car").profile_excluded == 1

    def test_reloading_features_drops_cached_graphs(self, service):
        service.load_features(FEATURES)
        first = service.graph("foot")
        service.load_features(FEATURES[:2])
        assert service.graph("foot") is not first
        assert service.graph("foot").num_vertices == 3

    def test_default_profile_comes_from_config(self, service, monkeypatch):
        monkeypatch.setenv("SF_ROUTING_DEFAULT_PROFILE", "car")
        reset_config()
        service.load_features(FEATURES)
        assert service.graph().profile == "car"

    def test_unknown_profile(self, service):
        service.load_features(FEATURES)
        with pytest.raises(UnknownProfileError):
            service.graph("teleport")

    def test_route_by_profile(self, service):
        service.load_features(FEATURES)
        # foot cannot use the motorway side, so (0,0) -> (1,1) goes through (1,0)
        result = service.route(0, 2, profile="foot")
        assert result.vertices == (0, 1, 2)

    def test_unreachable_route_raises(self, service):
        service.load_features([FEATURES[0], line((5, 5), (6, 5), highway="residential")])
        with pytest.raises(NoRouteFoundError):
            service.route(0, 2, profile="car")

    def test_route_coordinates_snaps_to_vertices(self, service):
        service.load_features(FEATURES)
        result = service.route_coordinates((0.01, -0.02), (0.98, 1.03), profile="foot")
        assert result.cost > 0
        assert result.source == 0
        assert result.target == 2

    def test_flows_end_to_end(self, service):
        service.load_features(FEATURES)
        network = service.flows([0, 2], [0, 2], [[0, 3], [1, 0]], profile="foot")

        assert network.result.unreachable_pairs == 0
        assert network.total_flow == pytest.approx(8.0)
        assert sum(e.flow for e in network.exported) == pytest.approx(8.0)
        assert network.to_geojson()["type"] == "FeatureCollection"
        assert all(e.attributes["highway"] in {"residential", "footway"} for e in network.exported)

    def test_flows_cancelled(self, service):
        service.load_features(FEATURES)
        event = threading.Event()
        event.set()
        network = service.flows([0], [2], [[1.0]], profile="foot", cancel_event=event)
        assert network.result.cancelled
        assert network.total_flow == 0.0

    def test_render_delegates_to_renderer(self, service, tmp_path):
        service.load_features(FEATURES)
        network = service.flows([0], [2], [[1.0]], profile="foot")
        output = tmp_path / "map.html"
        service.renderer.render.return_value = output

        assert service.render(network, output) == output
        service.renderer.render.assert_called_once_with(network.exported, output)

    def test_render_without_renderer(self, service):
        service.renderer = None
        service.load_features(FEATURES)
        network = service.flows([0], [2], [[1.0]], profile="foot")
        with pytest.raises(RenderingError):
            service.render(network, Path("unused.html"))


class TestContainer:
    def test_default_bindings(self):
        config = AppConfig(
            graph=GraphConfig(reference="planar"),
            routing=RoutingConfig(max_workers=1),
        )
        container = Container.create_default(config)

        service = container.resolve(NetworkFlowService)
        assert isinstance(service, NetworkFlowService)
        assert service.builder is container.resolve(GraphBuilder)
        assert service.aggregator.max_workers == 1
        assert container.resolve(NetworkFlowService) is not service

        service.load_features(FEATURES)
        assert service.route(0, 2, profile="bicycle").cost > 0

    def test_profiles_file_is_loaded(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text('{"scooter": {"default_factor": 1.0}}', encoding="utf-8")
        config = AppConfig(
            graph=GraphConfig(reference="planar"),
            routing=RoutingConfig(profiles_file=path),
        )
        service = Container.create_default(config).resolve(NetworkFlowService)
        service.load_features(FEATURES)
        assert service.build_report("scooter").profile_excluded == 0

    def test_register_override(self):
        container = Container.create_default()
        fake = MagicMock(spec=FlowRendererPort)
        container.register(FlowRendererPort, lambda: fake)
        assert container.resolve(FlowRendererPort) is fake

    def test_unregistered_type(self):
        with pytest.raises(KeyError):
            Container().resolve(NetworkFlowService)

    def test_global_container_reset(self):
        reset_container()
        first = get_container()
        assert get_container() is first
        reset_container()
        assert get_container() is not first
        reset_container()
