"""RouteResult 생성 / 요금 테스트"""

import math
from datetime import datetime

import pytest

from subway_route.models import GraphEdge, RouteKind, SearchState
from subway_route.services.congestion import CongestionLookup, StaticCongestionProvider
from subway_route.services.graph_builder import GraphBuilder
from subway_route.services.path_finder import PathFinder
from subway_route.services.route_builder import FarePolicy, RouteResultBuilder, calculate_fare

MORNING = datetime(2026, 3, 2, 8, 0)


def _walk(graph, path):
    """역 ID 순서대로 이동한 SearchState"""
    state = SearchState.origin(path[0])
    for next_id in path[1:]:
        edge = next(e for e in graph.neighbors(state.station_id) if e.to_id == next_id)
        state = state.extend(edge, edge_cost=edge.travel_minutes, edge_minutes=edge.travel_minutes)
    return state


class TestFare:
    """요금 계산 테스트"""

    @pytest.mark.parametrize("hops,fare", [
        (0, 1400),
        (8, 1400),    # 9.6km
        (9, 1500),    # 10.8km
        (12, 1500),   # 14.4km
        (13, 1600),   # 15.6km
        (50, 2000),   # 상한
    ])
    def test_calculate_fare(self, hops, fare):
        assert calculate_fare(hops) == fare

    def test_band_boundaries(self):
        policy = FarePolicy()
        assert policy.fare_for_distance(10.0) == 1400
        assert policy.fare_for_distance(15.0) == 1500
        assert policy.fare_for_distance(15.1) == 1600
        assert policy.fare_for_distance(20.0) == 1600

    def test_negative_hops(self):
        assert calculate_fare(-3) == 1400


class TestRouteResultBuilder:
    """RouteResultBuilder 테스트"""

    def test_uniform_line_route(self, uniform_line_graph):
        state = PathFinder().fastest(uniform_line_graph, "S1", "S4").state
        result = RouteResultBuilder().build(state, uniform_line_graph, MORNING, RouteKind.FASTEST)

        assert result.stations == ("S1", "S2", "S3", "S4")
        assert result.station_ids == ("S1", "S2", "S3", "S4")
        assert result.total_travel_minutes == 6
        assert result.transfers == 0
        assert result.lines_used == ("A",)
        assert [s.duration_minutes for s in result.segments] == [2, 2, 2]
        assert result.departure_time == MORNING
        assert not result.is_alternative

    def test_single_transfer_segment(self, transfer_catalog):
        graph = GraphBuilder().build(transfer_catalog)
        state = PathFinder().fastest(graph, "S1", "S5").state
        result = RouteResultBuilder().build(state, graph, MORNING, RouteKind.FASTEST)

        transfer_segments = [s for s in result.segments if s.is_transfer]
        assert len(transfer_segments) == 1
        assert transfer_segments[0].duration_minutes == 4
        assert transfer_segments[0].from_name == transfer_segments[0].to_name == "환승역"
        assert result.transfers == 1
        assert result.stations == ("일역", "환승역", "환승역", "사역", "오역")

    def test_fare_counts_transfer_hops(self, transfer_catalog):
        graph = GraphBuilder().build(transfer_catalog)
        state = PathFinder().fastest(graph, "S1", "S5").state
        result = RouteResultBuilder().build(state, graph, MORNING, RouteKind.FASTEST)
        assert result.fare_amount == calculate_fare(4)

    def test_transfer_hop_crosses_fare_band(self, graph_factory):
        # 승차 8구간(9.6km)만 세면 기본요금, 환승 포함 9구간(10.8km)은 한 구간 추가
        specs = [(f"a{i}", f"a{i + 1}", "1", 2.0, False) for i in range(4)]
        specs.append(("a4", "b0", "2", 4.0, True))
        specs += [(f"b{i}", f"b{i + 1}", "2", 2.0, False) for i in range(4)]
        graph = graph_factory(specs)
        path = [f"a{i}" for i in range(5)] + [f"b{i}" for i in range(5)]

        result = RouteResultBuilder().build(_walk(graph, path), graph, MORNING, RouteKind.FASTEST)

        assert result.transfers == 1
        assert result.fare_amount == 1500

    def test_invalid_durations_defaulted(self, graph_factory):
        graph = graph_factory([
            ("a", "b", "1", 0, False),
            ("b", "c", "1", math.nan, True),
        ])
        state = _walk(graph, ["a", "b", "c"])
        result = RouteResultBuilder().build(state, graph, MORNING, RouteKind.FASTEST)

        assert [s.duration_minutes for s in result.segments] == [2, 4]
        assert all(s.duration_minutes > 0 for s in result.segments)

    def test_invalid_search_time_recomputed(self, uniform_line_graph):
        state = _walk(uniform_line_graph, ["S1", "S2", "S3"])
        broken = SearchState(
            station_id=state.station_id,
            cost=state.cost,
            time=math.nan,
            transfers=state.transfers,
            path=state.path,
            edges=state.edges,
            lines=state.lines,
        )
        result = RouteResultBuilder().build(broken, uniform_line_graph, MORNING, RouteKind.FASTEST)
        assert result.total_travel_minutes == 4

    def test_neutral_congestion_score(self, uniform_line_graph):
        state = _walk(uniform_line_graph, ["S1", "S2"])
        result = RouteResultBuilder().build(state, uniform_line_graph, MORNING, RouteKind.FASTEST)

        assert result.segments[0].congestion_level == 2
        assert result.congestion_score == 33

    def test_congestion_score_from_lookup(self, uniform_line_graph):
        provider = StaticCongestionProvider(levels={("S2", "A"): 1, ("S3", "A"): 4})
        builder = RouteResultBuilder(congestion=CongestionLookup(provider, ttl_seconds=300))
        state = _walk(uniform_line_graph, ["S1", "S2", "S3"])

        result = builder.build(state, uniform_line_graph, MORNING, RouteKind.LEAST_CROWDED)
        assert [s.congestion_level for s in result.segments] == [1, 4]
        assert result.congestion_score == 50

    def test_empty_route(self, uniform_line_graph):
        state = SearchState.origin("S1")
        result = RouteResultBuilder().build(state, uniform_line_graph, MORNING, RouteKind.FASTEST)

        assert result.segments == ()
        assert result.congestion_score == 50
        assert result.total_travel_minutes == 0
        assert result.fare_amount == 1400

    def test_default_departure_time(self, uniform_line_graph):
        state = _walk(uniform_line_graph, ["S1", "S2"])
        result = RouteResultBuilder().build(state, uniform_line_graph, None, RouteKind.FASTEST)
        assert isinstance(result.departure_time, datetime)

    def test_to_dict(self, uniform_line_graph):
        state = _walk(uniform_line_graph, ["S1", "S2"])
        data = RouteResultBuilder().build(state, uniform_line_graph, MORNING, RouteKind.FASTEST).to_dict()

        assert data["kind"] == "fastest"
        assert data["departure_time"] == "2026-03-02T08:00:00"
        assert data["segments"][0]["from"] == "S1"
        assert data["segments"][0]["is_transfer"] is False


def test_transfer_edge_reported_with_destination_line(transfer_catalog):
    graph = GraphBuilder().build(transfer_catalog)
    edge = next(e for e in graph.neighbors("S2'") if e.is_transfer)
    assert isinstance(edge, GraphEdge)
    assert edge.line == "A"
