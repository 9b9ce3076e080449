"""
pytest fixtures for route engine tests
"""
from typing import Dict, List, Optional, Tuple

import pytest

from subway_route.models import GraphEdge, GraphNode, StationCatalog, SubwayGraph
from subway_route.services.catalog import parse_catalog

# (from_id, to_id, line, minutes, is_transfer)
EdgeSpec = Tuple[str, str, str, float, bool]


def make_graph(specs: List[EdgeSpec], names: Optional[Dict[str, str]] = None) -> SubwayGraph:
    """엣지 명세로 양방향 그래프 생성 (역명 기본값은 ID)"""
    names = names or {}
    adjacency: Dict[str, List[GraphEdge]] = {}
    lines: Dict[str, List[str]] = {}
    edges: List[GraphEdge] = []

    for from_id, to_id, line, minutes, is_transfer in specs:
        for src, dst in ((from_id, to_id), (to_id, from_id)):
            edge = GraphEdge(
                src, dst, line, minutes,
                is_transfer=is_transfer,
                transfer_minutes=minutes if is_transfer else None,
            )
            edges.append(edge)
            adjacency.setdefault(src, []).append(edge)
            adjacency.setdefault(dst, [])
            if not is_transfer and line not in lines.setdefault(src, []):
                lines[src].append(line)

    nodes = {
        sid: GraphNode(
            station_id=sid,
            name=names.get(sid, sid),
            lines=tuple(lines.get(sid, ())),
            is_transfer=any(e.is_transfer for e in neighbors),
            neighbors=tuple(neighbors),
        )
        for sid, neighbors in adjacency.items()
    }
    return SubwayGraph(nodes, edges)


@pytest.fixture
def graph_factory():
    return make_graph


@pytest.fixture
def uniform_line_graph():
    """S1-S2-S3-S4, 2분 간격 단일 노선"""
    return make_graph([
        ("S1", "S2", "A", 2.0, False),
        ("S2", "S3", "A", 2.0, False),
        ("S3", "S4", "A", 2.0, False),
    ])


@pytest.fixture
def detour_graph():
    """
    A1-A2-A3-A4 (A선, 10분 간격, 환승 없음 30분)
    A1 ⇄ B1 - B2 ⇄ A4 (환승 2회, 11분)
    """
    return make_graph([
        ("A1", "A2", "A", 10.0, False),
        ("A2", "A3", "A", 10.0, False),
        ("A3", "A4", "A", 10.0, False),
        ("A1", "B1", "B", 4.0, True),
        ("B1", "B2", "B", 3.0, False),
        ("B2", "A4", "A", 4.0, True),
    ])


@pytest.fixture
def diamond_graph():
    """S → M1 → T (4분), S → M2 → T (6분), 모두 A선"""
    return make_graph([
        ("S", "M1", "A", 2.0, False),
        ("M1", "T", "A", 2.0, False),
        ("S", "M2", "A", 3.0, False),
        ("M2", "T", "A", 3.0, False),
    ])


@pytest.fixture
def disconnected_graph():
    """서로 연결되지 않은 두 구간"""
    return make_graph([
        ("X1", "X2", "X", 2.0, False),
        ("Y1", "Y2", "Y", 2.0, False),
    ])


@pytest.fixture
def transfer_catalog_data() -> dict:
    """
    A선: S1 - S2 - S3
    B선: S2' - S4 - S5
    S2 / S2'는 같은 역명 (2개 노선 → 환승 4분)
    """
    return {
        "stations": [
            {"id": "S1", "name": "일역", "lines": ["A"]},
            {"id": "S2", "name": "환승역", "lines": ["A"], "is_transfer": True},
            {"id": "S3", "name": "삼역", "lines": ["A"]},
            {"id": "S2'", "name": "환승역", "lines": ["B"], "is_transfer": True},
            {"id": "S4", "name": "사역", "lines": ["B"]},
            {"id": "S5", "name": "오역", "lines": ["B"]},
        ],
        "lines": [
            {"id": "A", "name": "A선", "station_ids": ["S1", "S2", "S3"]},
            {"id": "B", "name": "B선", "station_ids": ["S2'", "S4", "S5"]},
        ],
    }


@pytest.fixture
def transfer_catalog(transfer_catalog_data) -> StationCatalog:
    return parse_catalog(transfer_catalog_data)
