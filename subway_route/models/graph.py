"""
지하철 그래프 자료구조

노드는 노선별 역 인스턴스, 엣지는 역간 주행 구간과 환승 연결입니다.
한 번 구축된 그래프는 읽기 전용으로만 사용합니다.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from subway_route.exceptions import GraphDataError


@dataclass(frozen=True)
class GraphEdge:
    """방향 엣지 (양방향 이동은 엣지 2개로 표현)"""
    from_id: str
    to_id: str
    line: str
    travel_minutes: float
    is_transfer: bool = False
    transfer_minutes: Optional[float] = None


@dataclass(frozen=True)
class GraphNode:
    """그래프 노드 (역)"""
    station_id: str
    name: str
    lines: Tuple[str, ...]
    is_transfer: bool
    neighbors: Tuple[GraphEdge, ...] = ()


class SubwayGraph:
    """읽기 전용 지하철 그래프"""

    def __init__(self, nodes: Mapping[str, GraphNode], edges: Iterable[GraphEdge]):
        self._nodes: Mapping[str, GraphNode] = MappingProxyType(dict(nodes))
        self._edges: Tuple[GraphEdge, ...] = tuple(edges)

        # 끊어진 엣지 참조는 데이터 손상으로 간주
        for edge in self._edges:
            if edge.from_id not in self._nodes or edge.to_id not in self._nodes:
                raise GraphDataError(
                    f"존재하지 않는 역을 가리키는 엣지: {edge.from_id} -> {edge.to_id}"
                )
        for node in self._nodes.values():
            for edge in node.neighbors:
                if edge.from_id != node.station_id or edge.to_id not in self._nodes:
                    raise GraphDataError(
                        f"잘못된 인접 엣지: {node.station_id} ({edge.from_id} -> {edge.to_id})"
                    )

    @property
    def nodes(self) -> Mapping[str, GraphNode]:
        return self._nodes

    @property
    def edges(self) -> Tuple[GraphEdge, ...]:
        return self._edges

    def __contains__(self, station_id: object) -> bool:
        return station_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, station_id: str) -> Optional[GraphNode]:
        return self._nodes.get(station_id)

    def neighbors(self, station_id: str) -> Tuple[GraphEdge, ...]:
        node = self._nodes.get(station_id)
        return node.neighbors if node else ()

    def station_name(self, station_id: str) -> str:
        """역명 조회 (없으면 ID 그대로)"""
        node = self._nodes.get(station_id)
        return node.name if node else station_id

    def get_stats(self) -> Dict[str, int]:
        """통계 정보"""
        lines = {line for node in self._nodes.values() for line in node.lines}
        return {
            "stations": len(self._nodes),
            "edges": len(self._edges),
            "transfer_edges": sum(1 for e in self._edges if e.is_transfer),
            "lines": len(lines),
        }
