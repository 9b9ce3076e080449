"""
다중 기준 경로 탐색 서비스

최단 시간 / 최소 환승 / 혼잡도 낮은 경로를 차례로 구하고,
부족하면 기존 경로의 중간 역 주변 엣지를 막고 다시 탐색해 대체 경로를 보충합니다.
(Yen 알고리즘의 제한된 근사 - 최적성은 보장하지 않음)
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from subway_route.config import settings
from subway_route.exceptions import RouteEngineError
from subway_route.logging_config import log_route_summary, log_timing
from subway_route.models.graph import GraphEdge, SubwayGraph
from subway_route.models.route import RouteResult
from subway_route.models.schemas import RouteSearchOptions
from subway_route.services.catalog import load_catalog
from subway_route.services.congestion import (
    CongestionLookup,
    NeutralCongestionProvider,
    SeoulCongestionProvider,
)
from subway_route.services.edge_cost import EdgeCostModel
from subway_route.services.graph_builder import GraphProvider
from subway_route.services.path_finder import (
    FastestVariant,
    LeastCrowdedVariant,
    LeastTransferVariant,
    PathFinder,
    SearchVariant,
)
from subway_route.services.route_builder import RouteResultBuilder

logger = logging.getLogger(__name__)


@contextmanager
def masked_edges(mask: Set[GraphEdge], edges: Iterable[GraphEdge]):
    """
    탐색 한 번 동안 엣지를 마스크 집합에 추가 (종료 시 반드시 복원)

    그래프는 건드리지 않고 호출별 마스크 집합만 바꿉니다.
    """
    added = [edge for edge in edges if edge not in mask]
    mask.update(added)
    try:
        yield mask
    finally:
        mask.difference_update(added)


def edges_between(graph: SubwayGraph, from_id: str, to_id: str) -> List[GraphEdge]:
    """from_id → to_id 방향 엣지 (노선별로 여러 개일 수 있음)"""
    return [edge for edge in graph.neighbors(from_id) if edge.to_id == to_id]


class AlternativeRouteSearch:
    """세 가지 탐색 + 엣지 마스킹 대체 경로"""

    def __init__(
        self,
        path_finder: Optional[PathFinder] = None,
        result_builder: Optional[RouteResultBuilder] = None,
        congestion: Optional[CongestionLookup] = None,
        transfer_penalty: Optional[float] = None,
    ):
        self.path_finder = path_finder or PathFinder()
        self.congestion = congestion
        cost_model = self.path_finder.cost_model
        self.result_builder = result_builder or RouteResultBuilder(cost_model, congestion=congestion)

        self.fastest = FastestVariant(cost_model)
        self.variants: List[SearchVariant] = [
            self.fastest,
            LeastTransferVariant(cost_model, transfer_penalty=transfer_penalty),
            LeastCrowdedVariant(cost_model, congestion=congestion),
        ]

    def find_routes(
        self,
        graph: SubwayGraph,
        start_id: str,
        end_id: str,
        departure_time: Optional[datetime] = None,
        k: Optional[int] = None,
        max_transfers: Optional[int] = None,
    ) -> List[RouteResult]:
        """
        경로 탐색

        Args:
            graph: 지하철 그래프
            start_id: 출발역 ID
            end_id: 도착역 ID
            departure_time: 출발 시각 (None이면 현재 시각)
            k: 최대 경로 수 (None이면 settings.MAX_ROUTES)
            max_transfers: 최대 환승 횟수 (None이면 settings.MAX_TRANSFERS)

        Returns:
            최단 시간, 최소 환승, 혼잡도 낮은 경로, 대체 경로 순 (최대 k개, 경로 중복 없음)
        """
        k = k if k is not None else settings.MAX_ROUTES
        if k <= 0:
            return []

        if start_id not in graph or end_id not in graph:
            missing = start_id if start_id not in graph else end_id
            logger.warning(f"그래프에 없는 역: {missing} ({start_id} -> {end_id})")
            return []

        departure_time = departure_time or datetime.now()
        results: List[RouteResult] = []
        seen: Set[str] = set()

        def accept(result: RouteResult) -> bool:
            if result.signature in seen:
                return False
            seen.add(result.signature)
            results.append(result)
            return True

        # 1. 기준별 탐색
        for variant in self.variants:
            if len(results) >= k:
                break
            outcome = self.path_finder.search(
                graph, start_id, end_id, variant,
                departure_time=departure_time,
                max_transfers=max_transfers,
            )
            if outcome.found:
                accept(self.result_builder.build(outcome.state, graph, departure_time, variant.kind))

        # 2. 대체 경로 (찾은 경로 목록이 늘어나면 새 경로도 순회)
        mask: Set[GraphEdge] = set()
        index = 0
        while index < len(results) and len(results) < k:
            station_ids = results[index].station_ids
            index += 1

            for i in range(1, len(station_ids) - 1):
                if len(results) >= k:
                    break

                blocked = (
                    edges_between(graph, station_ids[i - 1], station_ids[i])
                    + edges_between(graph, station_ids[i], station_ids[i + 1])
                )
                with masked_edges(mask, blocked):
                    outcome = self.path_finder.search(
                        graph, start_id, end_id, self.fastest,
                        departure_time=departure_time,
                        max_transfers=max_transfers,
                        excluded_edges=mask,
                        log_failures=False,
                    )

                if outcome.found:
                    result = self.result_builder.build(
                        outcome.state, graph, departure_time,
                        self.fastest.kind, is_alternative=True,
                    )
                    if accept(result):
                        logger.debug(f"대체 경로 추가: {station_ids[i]} 우회 ({result.total_travel_minutes}분)")

        if not results:
            logger.warning(f"모든 탐색 실패: {start_id} -> {end_id}")

        return results[:k]


# 그래프 제공자 (지연 초기화, 재구축은 reload()로만)
graph_provider = GraphProvider(load_catalog)


def build_congestion_lookup(graph: SubwayGraph) -> Optional[CongestionLookup]:
    """
    설정에 따른 혼잡도 조회기

    Returns:
        CONGESTION_AWARE_ROUTING이 꺼져 있으면 None (중립 fast path)
    """
    if not settings.CONGESTION_AWARE_ROUTING:
        return None

    if settings.SEOUL_API_KEY:
        names = {sid: node.name for sid, node in graph.nodes.items()}
        return CongestionLookup(SeoulCongestionProvider(names))

    logger.info("SEOUL_API_KEY 미설정 - 중립 혼잡도 사용")
    return CongestionLookup(NeutralCongestionProvider())


class RouteService:
    """경로 탐색 진입점"""

    def __init__(
        self,
        provider: Optional[GraphProvider] = None,
        search: Optional[AlternativeRouteSearch] = None,
    ):
        self._provider = provider or graph_provider
        self._search = search
        self._default_search: Optional[AlternativeRouteSearch] = None
        self._search_graph: Optional[SubwayGraph] = None

    def _get_search(self, graph: SubwayGraph) -> AlternativeRouteSearch:
        if self._search is not None:
            return self._search

        # 역명 기반 혼잡도 조회기는 그래프가 바뀌면 다시 만듦 (이전 조회기는 닫음)
        if self._default_search is None or self._search_graph is not graph:
            if self._default_search is not None and self._default_search.congestion is not None:
                self._default_search.congestion.close()
            congestion = build_congestion_lookup(graph)
            self._default_search = AlternativeRouteSearch(
                PathFinder(EdgeCostModel()),
                congestion=congestion,
            )
            self._search_graph = graph
        return self._default_search

    def find_routes(
        self,
        start_station_id: str,
        end_station_id: str,
        departure_time: Optional[datetime] = None,
        options: Optional[RouteSearchOptions] = None,
    ) -> List[RouteResult]:
        """
        출발역 → 도착역 경로 목록

        Args:
            start_station_id: 출발역 ID (역명 → ID 변환은 호출자 책임)
            end_station_id: 도착역 ID
            departure_time: 출발 시각 (None이면 현재 시각)
            options: 최대 환승 / 최대 경로 수

        Returns:
            RouteResult 리스트 (경로가 없으면 빈 리스트)
        """
        if start_station_id == end_station_id:
            logger.info(f"출발역과 도착역이 같음: {start_station_id}")
            return []

        options = options or RouteSearchOptions()
        graph = self._provider.get()

        with log_timing(f"경로 탐색 {start_station_id} -> {end_station_id}", logger):
            routes = self._get_search(graph).find_routes(
                graph,
                start_station_id,
                end_station_id,
                departure_time=departure_time,
                k=options.max_routes,
                max_transfers=options.max_transfers,
            )

        log_route_summary(logger, start_station_id, end_station_id, [r.total_travel_minutes for r in routes])
        return routes

    def is_available(self) -> bool:
        """서비스 사용 가능 여부 (필요하면 그래프 구축)"""
        try:
            return len(self._provider.get()) > 0
        except RouteEngineError as e:
            logger.error(f"RouteService 초기화 실패: {e}")
            return False

    def reload(self) -> Dict[str, int]:
        """카탈로그를 다시 읽어 그래프 재구축"""
        graph = self._provider.reload()
        return graph.get_stats()

    def get_stats(self) -> Dict[str, int]:
        """통계 정보"""
        if self._provider.is_initialized():
            return self._provider.get().get_stats()
        return {"stations": 0, "edges": 0, "transfer_edges": 0, "lines": 0}


# 싱글톤 인스턴스
route_service = RouteService()


def find_routes(
    start_station_id: str,
    end_station_id: str,
    departure_time: Optional[datetime] = None,
    options: Optional[RouteSearchOptions] = None,
) -> List[RouteResult]:
    """기본 서비스로 경로 탐색"""
    return route_service.find_routes(start_station_id, end_station_id, departure_time, options)


def check_route_service() -> bool:
    """서비스 상태 확인"""
    return route_service.is_available()
