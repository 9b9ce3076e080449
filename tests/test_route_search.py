"""대체 경로 탐색 / RouteService 테스트"""

import logging
from datetime import datetime

import pytest

from subway_route.config import settings
from subway_route.exceptions import CatalogError
from subway_route.models import RouteKind, RouteSearchOptions
from subway_route.services import route_search
from subway_route.services.catalog import load_catalog
from subway_route.services.congestion import CongestionLookup, NeutralCongestionProvider
from subway_route.services.graph_builder import GraphBuilder, GraphProvider
from subway_route.services.route_search import (
    AlternativeRouteSearch,
    RouteService,
    build_congestion_lookup,
    edges_between,
    masked_edges,
)

MORNING = datetime(2026, 3, 2, 8, 0)


class TestMaskedEdges:
    """엣지 마스킹 테스트"""

    def test_restored_after_block(self, diamond_graph):
        mask = set()
        blocked = edges_between(diamond_graph, "S", "M1")
        with masked_edges(mask, blocked):
            assert set(blocked) <= mask
        assert mask == set()

    def test_restored_on_error(self, diamond_graph):
        mask = set()
        with pytest.raises(RuntimeError):
            with masked_edges(mask, edges_between(diamond_graph, "S", "M1")):
                raise RuntimeError("search failed")
        assert mask == set()

    def test_keeps_previous_entries(self, diamond_graph):
        existing = edges_between(diamond_graph, "S", "M2")[0]
        mask = {existing}
        with masked_edges(mask, [existing] + edges_between(diamond_graph, "S", "M1")):
            pass
        assert mask == {existing}

    def test_edges_between_is_directed(self, diamond_graph):
        assert [(e.from_id, e.to_id) for e in edges_between(diamond_graph, "S", "M1")] == [("S", "M1")]
        assert edges_between(diamond_graph, "S", "T") == []


class TestAlternativeRouteSearch:
    """AlternativeRouteSearch 테스트"""

    def test_order_fastest_then_least_transfer(self, detour_graph):
        routes = AlternativeRouteSearch().find_routes(detour_graph, "A1", "A4", MORNING, k=3)

        assert [r.kind for r in routes] == [RouteKind.FASTEST, RouteKind.LEAST_TRANSFER]
        assert routes[0].station_ids == ("A1", "B1", "B2", "A4")
        assert routes[1].station_ids == ("A1", "A2", "A3", "A4")

    def test_alternative_found_by_masking(self, diamond_graph):
        routes = AlternativeRouteSearch().find_routes(diamond_graph, "S", "T", MORNING, k=2)

        assert len(routes) == 2
        assert routes[0].station_ids == ("S", "M1", "T")
        assert routes[1].station_ids == ("S", "M2", "T")
        assert routes[1].is_alternative
        assert routes[1].kind == RouteKind.FASTEST

    def test_graph_not_mutated(self, diamond_graph):
        edges_before = diamond_graph.edges
        neighbors_before = {sid: node.neighbors for sid, node in diamond_graph.nodes.items()}

        AlternativeRouteSearch().find_routes(diamond_graph, "S", "T", MORNING, k=3)

        assert diamond_graph.edges == edges_before
        assert {sid: node.neighbors for sid, node in diamond_graph.nodes.items()} == neighbors_before

    @pytest.mark.parametrize("k", [1, 2, 3, 5])
    def test_at_most_k_unique(self, k):
        graph = GraphBuilder().build(load_catalog())
        routes = AlternativeRouteSearch().find_routes(graph, "0150", "0206", MORNING, k=k)

        assert 1 <= len(routes) <= k
        signatures = [r.station_ids for r in routes]
        assert len(signatures) == len(set(signatures))
        for route in routes:
            assert len(route.station_ids) == len(set(route.station_ids))

    def test_k_zero(self, diamond_graph):
        assert AlternativeRouteSearch().find_routes(diamond_graph, "S", "T", MORNING, k=0) == []

    def test_disconnected_returns_empty(self, disconnected_graph):
        assert AlternativeRouteSearch().find_routes(disconnected_graph, "X1", "Y1", MORNING) == []

    def test_missing_station_returns_empty(self, diamond_graph, caplog):
        with caplog.at_level(logging.WARNING, logger="subway_route"):
            routes = AlternativeRouteSearch().find_routes(diamond_graph, "S", "NOPE", MORNING)

        assert routes == []
        assert any("NOPE" in r.getMessage() for r in caplog.records)

    def test_shared_departure_time(self, detour_graph):
        routes = AlternativeRouteSearch().find_routes(detour_graph, "A1", "A4", MORNING)
        assert {r.departure_time for r in routes} == {MORNING}

    def test_max_transfers_applies_to_all(self, detour_graph):
        routes = AlternativeRouteSearch().find_routes(detour_graph, "A1", "A4", MORNING, max_transfers=0)
        assert [r.station_ids for r in routes] == [("A1", "A2", "A3", "A4")]


class TestRouteService:
    """RouteService 테스트"""

    def _service(self, catalog):
        return RouteService(GraphProvider(lambda: catalog))

    def test_find_routes(self, transfer_catalog):
        routes = self._service(transfer_catalog).find_routes("S1", "S5", MORNING)

        assert len(routes) == 1
        assert routes[0].transfers == 1
        assert routes[0].stations[0] == "일역"

    def test_same_station(self, transfer_catalog):
        assert self._service(transfer_catalog).find_routes("S1", "S1") == []

    def test_unknown_station(self, transfer_catalog):
        assert self._service(transfer_catalog).find_routes("S1", "ZZ") == []

    def test_options(self):
        service = RouteService(GraphProvider(load_catalog))
        routes = service.find_routes("0150", "0206", MORNING, RouteSearchOptions(max_routes=1))
        assert len(routes) == 1
        assert routes[0].kind == RouteKind.FASTEST

    def test_max_transfers_option(self, transfer_catalog):
        routes = self._service(transfer_catalog).find_routes(
            "S1", "S5", MORNING, RouteSearchOptions(max_transfers=0)
        )
        assert routes == []

    def test_invalid_options(self):
        with pytest.raises(ValueError):
            RouteSearchOptions(max_routes=0)
        with pytest.raises(ValueError):
            RouteSearchOptions(max_transfers=-1)

    def test_is_available(self, transfer_catalog):
        assert self._service(transfer_catalog).is_available()

    def test_unavailable_on_catalog_error(self):
        def loader():
            raise CatalogError("missing")

        assert not RouteService(GraphProvider(loader)).is_available()

    def test_stats(self, transfer_catalog):
        service = self._service(transfer_catalog)
        assert service.get_stats()["stations"] == 0

        service.find_routes("S1", "S3")
        stats = service.get_stats()
        assert stats["stations"] == 6
        assert stats["transfer_edges"] == 2

    def test_reload(self, transfer_catalog):
        service = self._service(transfer_catalog)
        assert service.reload()["stations"] == 6

    def test_reload_closes_previous_congestion_lookup(self, monkeypatch, transfer_catalog):
        providers = []

        class ClosingProvider(NeutralCongestionProvider):
            closed = False

            def close(self):
                self.closed = True

        def build(graph):
            providers.append(ClosingProvider())
            return CongestionLookup(providers[-1])

        monkeypatch.setattr(route_search, "build_congestion_lookup", build)
        service = self._service(transfer_catalog)

        service.find_routes("S1", "S5", MORNING)
        service.find_routes("S1", "S3", MORNING)
        service.reload()
        service.find_routes("S1", "S5", MORNING)

        assert [p.closed for p in providers] == [True, False]

    def test_injected_search(self, transfer_catalog):
        class StubSearch:
            def __init__(self):
                self.calls = []

            def find_routes(self, graph, start_id, end_id, departure_time=None, k=None, max_transfers=None):
                self.calls.append((start_id, end_id, k, max_transfers))
                return []

        stub = StubSearch()
        service = RouteService(GraphProvider(lambda: transfer_catalog), search=stub)
        service.find_routes("S1", "S5", options=RouteSearchOptions(max_routes=2, max_transfers=1))
        assert stub.calls == [("S1", "S5", 2, 1)]


class TestCongestionSettings:
    """혼잡도 설정 테스트"""

    def test_disabled_by_default(self, monkeypatch, diamond_graph):
        monkeypatch.setattr(settings, "CONGESTION_AWARE_ROUTING", False)
        assert build_congestion_lookup(diamond_graph) is None

    def test_neutral_without_api_key(self, monkeypatch, diamond_graph):
        monkeypatch.setattr(settings, "CONGESTION_AWARE_ROUTING", True)
        monkeypatch.setattr(settings, "SEOUL_API_KEY", "")

        lookup = build_congestion_lookup(diamond_graph)
        assert isinstance(lookup.provider, NeutralCongestionProvider)
        assert lookup.level_for("M1", "A", 8) == 2
