"""
지하철 그래프 구축 모듈

카탈로그(역/노선/지선)에서 읽기 전용 SubwayGraph를 만듭니다:
- 노선별 인접 역을 양방향 주행 엣지로 연결 (Haversine 거리 기반 소요시간)
- 같은 이름의 역끼리 양방향 환승 엣지로 연결 (환승역 규모별 환승시간)
"""

import logging
import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from subway_route.config import RouteConfig
from subway_route.models.catalog import Line, Station, StationCatalog
from subway_route.models.graph import GraphEdge, GraphNode, SubwayGraph
from subway_route.utils.geo import haversine_km

logger = logging.getLogger(__name__)


def calculate_travel_time(station1: Station, station2: Station) -> float:
    """
    역간 주행 시간 계산 (분, 소수점 1자리)

    거리 / 평균 속도(0.58km/분) + 정차 시간(0.5분).
    좌표가 없으면 평균 역간 거리(1.2km)를 사용합니다.
    """
    coord1 = station1.coordinates
    coord2 = station2.coordinates

    distance = RouteConfig.DEFAULT_STATION_DISTANCE_KM
    if coord1 and coord2:
        distance = haversine_km(coord1[0], coord1[1], coord2[0], coord2[1])

    minutes = distance / RouteConfig.AVG_SPEED_KM_PER_MIN + RouteConfig.DWELL_MINUTES
    return max(RouteConfig.MIN_TRAVEL_MINUTES, round(minutes, 1))


def calculate_transfer_time(line_count: int) -> int:
    """환승역 규모(운행 노선 수)별 환승 시간 (분)"""
    if line_count >= 3:
        return RouteConfig.LARGE_TRANSFER_MINUTES
    if line_count == 2:
        return RouteConfig.MEDIUM_TRANSFER_MINUTES
    return RouteConfig.SMALL_TRANSFER_MINUTES


class GraphBuilder:
    """카탈로그 → SubwayGraph 변환기 (같은 입력이면 같은 그래프)"""

    def build(self, catalog: StationCatalog) -> SubwayGraph:
        """
        그래프 구축

        Args:
            catalog: 검증된 역/노선 카탈로그

        Returns:
            읽기 전용 SubwayGraph
        """
        stations = catalog.station_map()
        adjacency: Dict[str, List[GraphEdge]] = {s.id: [] for s in catalog.stations}
        edges: List[GraphEdge] = []
        connected: Set[Tuple[str, str, str]] = set()

        def add_pair(edge1: GraphEdge, edge2: GraphEdge) -> None:
            for edge in (edge1, edge2):
                edges.append(edge)
                adjacency[edge.from_id].append(edge)
                connected.add((edge.from_id, edge.to_id, edge.line))

        # 1. 노선(본선 + 지선) 인접 역 연결
        missing_count = 0
        for line in catalog.lines:
            for section_name, station_ids in line.sequences():
                missing_count += self._warn_missing(line, section_name, station_ids, stations)
                for current_id, next_id in zip(station_ids, station_ids[1:]):
                    current = stations.get(current_id)
                    nxt = stations.get(next_id)
                    if current is None or nxt is None or current_id == next_id:
                        continue

                    line_id = self._edge_line(line, current, nxt)
                    if line_id is None:
                        logger.debug(f"공통 노선 없음, 연결 생략: {current_id} - {next_id}")
                        continue
                    if (current_id, next_id, line_id) in connected:
                        continue

                    minutes = calculate_travel_time(current, nxt)
                    add_pair(
                        GraphEdge(current_id, next_id, line_id, minutes),
                        GraphEdge(next_id, current_id, line_id, minutes),
                    )

        # 2. 같은 이름의 역끼리 환승 연결
        for name, group in catalog.stations_by_name().items():
            if len(group) < 2:
                continue

            group_lines = {line for s in group for line in s.lines}
            transfer_minutes = calculate_transfer_time(len(group_lines))

            for i in range(len(group)):
                for j in range(i + 1, len(group)):
                    s1, s2 = group[i], group[j]
                    add_pair(
                        self._transfer_edge(s1, s2, transfer_minutes),
                        self._transfer_edge(s2, s1, transfer_minutes),
                    )

        # 3. 노드 확정 (환승 엣지가 있거나 여러 노선을 지나면 환승역)
        transfer_ids = {e.from_id for e in edges if e.is_transfer}
        nodes: Dict[str, GraphNode] = {}
        for station in catalog.stations:
            nodes[station.id] = GraphNode(
                station_id=station.id,
                name=station.name,
                lines=tuple(station.lines),
                is_transfer=station.is_transfer or station.id in transfer_ids or len(station.lines) > 1,
                neighbors=tuple(adjacency[station.id]),
            )

        graph = SubwayGraph(nodes, edges)
        stats = graph.get_stats()
        logger.info(
            f"지하철 그래프 구축 완료: 역 {stats['stations']}개, "
            f"엣지 {stats['edges']}개 (환승 {stats['transfer_edges']}개)"
            + (f", 누락 역 참조 {missing_count}건" if missing_count else "")
        )
        return graph

    @staticmethod
    def _warn_missing(
        line: Line,
        section_name: str,
        station_ids: List[str],
        stations: Dict[str, Station],
    ) -> int:
        missing = [sid for sid in station_ids if sid not in stations]
        if missing:
            logger.warning(
                f"{line.id}호선 {section_name}: 카탈로그에 없는 역 {len(missing)}개 건너뜀 {missing[:5]}"
            )
        return len(missing)

    @staticmethod
    def _edge_line(line: Line, current: Station, nxt: Station) -> Optional[str]:
        if line.id in current.lines and line.id in nxt.lines:
            return line.id
        for candidate in current.lines:
            if candidate in nxt.lines:
                return candidate
        return None

    @staticmethod
    def _transfer_edge(src: Station, dst: Station, minutes: int) -> GraphEdge:
        # 환승 엣지의 노선은 도착 역의 첫 번째 노선
        line = dst.lines[0] if dst.lines else ""
        return GraphEdge(
            from_id=src.id,
            to_id=dst.id,
            line=line,
            travel_minutes=float(minutes),
            is_transfer=True,
            transfer_minutes=float(minutes),
        )


# ========== 연결성 검증 ==========

@dataclass
class ConnectivityReport:
    """그래프 연결성 검증 결과"""
    connected: int
    total: int
    disconnected_sample: List[str] = field(default_factory=list)
    stations_per_line: Dict[str, int] = field(default_factory=dict)

    @property
    def coverage(self) -> float:
        """연결된 역 비율 (%)"""
        if self.total == 0:
            return 0.0
        return self.connected / self.total * 100

    def is_healthy(self, threshold: float = 90.0) -> bool:
        return self.coverage > threshold


def check_connectivity(graph: SubwayGraph) -> ConnectivityReport:
    """BFS로 첫 번째 역에서 도달 가능한 역 비율 확인"""
    per_line = Counter(line for node in graph.nodes.values() for line in node.lines)

    if len(graph) == 0:
        logger.warning("그래프에 역이 없습니다")
        return ConnectivityReport(connected=0, total=0)

    start = next(iter(graph.nodes))
    visited = {start}
    queue = deque([start])

    while queue:
        station_id = queue.popleft()
        for edge in graph.neighbors(station_id):
            if edge.to_id not in visited:
                visited.add(edge.to_id)
                queue.append(edge.to_id)

    disconnected = [sid for sid in graph.nodes if sid not in visited]
    report = ConnectivityReport(
        connected=len(visited),
        total=len(graph),
        disconnected_sample=disconnected[:5],
        stations_per_line=dict(sorted(per_line.items())),
    )
    logger.info(f"연결된 역: {report.connected}/{report.total} ({report.coverage:.1f}%)")
    return report


# ========== 그래프 제공자 ==========

class GraphProvider:
    """
    그래프 지연 초기화 + 명시적 재구축

    get()은 최초 호출 시 한 번만 구축하고, 재구축은 reload()로만 일어납니다.
    """

    def __init__(
        self,
        catalog_loader: Callable[[], StationCatalog],
        builder: Optional[GraphBuilder] = None,
    ):
        self._catalog_loader = catalog_loader
        self._builder = builder or GraphBuilder()
        self._graph: Optional[SubwayGraph] = None
        self._lock = threading.Lock()

    def is_initialized(self) -> bool:
        """그래프 초기화 여부"""
        return self._graph is not None and len(self._graph) > 0

    def get(self) -> SubwayGraph:
        """그래프 반환 (없으면 구축)"""
        graph = self._graph
        if graph is not None:
            return graph
        with self._lock:
            if self._graph is None:
                self._graph = self._builder.build(self._catalog_loader())
            return self._graph

    def reload(self) -> SubwayGraph:
        """카탈로그를 다시 읽어 그래프 재구축 (기존 참조는 그대로 유효)"""
        graph = self._builder.build(self._catalog_loader())
        with self._lock:
            self._graph = graph
        logger.info("그래프 재구축 완료")
        return graph
