"""
최단 경로 탐색 (Dijkstra 변형)

세 가지 탐색 변형이 하나의 확장 골격을 공유합니다:
- FastestVariant: 누적 시간 비용 최소
- LeastTransferVariant: 누적 비용 + 환승 횟수 × 페널티 (환승 우선, 시간 보조)
- LeastCrowdedVariant: 혼잡도 가중 비용 (기본은 중립 가중치 fast path)

골격:
    최소 힙에서 상태를 꺼내 → 환승 한도 초과면 버림 → 도착역이면 성공
    → 더 좋은 방문 기록이 있으면 버림 → 이웃 확장 (경로 내 역/마스킹 엣지 제외)
    → 같거나 더 좋은 방문 기록이 있는 후보는 버리고 나머지는 힙에 추가

방문 기록은 역마다 상태 목록이며, 비용과 환승 횟수 모두에서
같거나 좋은 다른 상태가 있는 상태는 목록에 남지 않습니다.
"""

import heapq
import itertools
import logging
from datetime import datetime, timedelta
from typing import AbstractSet, Dict, List, Optional, Tuple

from subway_route.config import settings
from subway_route.models.graph import GraphEdge, SubwayGraph
from subway_route.models.route import RouteKind, SearchFailure, SearchOutcome, SearchState
from subway_route.services.congestion import CongestionLookup
from subway_route.services.edge_cost import EdgeCostModel

logger = logging.getLogger(__name__)


# ========== 탐색 변형 ==========

class SearchVariant:
    """탐색 변형 기본형 - 우선순위, 우위 판정, 엣지 비용만 다름"""

    kind = RouteKind.FASTEST

    def __init__(self, cost_model: Optional[EdgeCostModel] = None):
        self.cost_model = cost_model or EdgeCostModel()

    def edge_cost(self, state: SearchState, edge: GraphEdge, departure_time: datetime) -> float:
        return self.cost_model.fast_cost(edge)

    def priority(self, state: SearchState) -> float:
        return state.cost

    def dominates(self, known: SearchState, other: SearchState) -> bool:
        """known이 비용과 환승 횟수 모두 other보다 같거나 좋으면 True"""
        return known.cost <= other.cost and known.transfers <= other.transfers


class FastestVariant(SearchVariant):
    """최단 시간"""

    kind = RouteKind.FASTEST


class LeastTransferVariant(SearchVariant):
    """최소 환승 (환승 1회당 큰 페널티 - 엄격한 사전식 순서를 보장하지는 않음)"""

    kind = RouteKind.LEAST_TRANSFER

    def __init__(
        self,
        cost_model: Optional[EdgeCostModel] = None,
        transfer_penalty: Optional[float] = None,
    ):
        super().__init__(cost_model)
        self.transfer_penalty = (
            transfer_penalty if transfer_penalty is not None else settings.TRANSFER_PENALTY
        )

    def priority(self, state: SearchState) -> float:
        return state.cost + state.transfers * self.transfer_penalty


class LeastCrowdedVariant(SearchVariant):
    """
    혼잡도 낮은 경로

    congestion이 없으면 배수 1.0 fast path (외부 조회 없음).
    있으면 열차가 엣지 도착역에 닿는 시각의 혼잡도로 비용을 가중합니다.
    """

    kind = RouteKind.LEAST_CROWDED

    def __init__(
        self,
        cost_model: Optional[EdgeCostModel] = None,
        congestion: Optional[CongestionLookup] = None,
    ):
        super().__init__(cost_model)
        self.congestion = congestion

    def edge_cost(self, state: SearchState, edge: GraphEdge, departure_time: datetime) -> float:
        if self.congestion is None:
            return self.cost_model.fast_cost(edge)

        minutes = self.cost_model.base_minutes(edge)
        arrival = departure_time + timedelta(minutes=state.time + minutes)
        level = self.congestion.level_for(edge.to_id, edge.line, arrival.hour)
        return self.cost_model.cost(edge, level)


def _strictly_dominates(variant: SearchVariant, known: SearchState, other: SearchState) -> bool:
    return variant.dominates(known, other) and not variant.dominates(other, known)


# ========== 탐색 골격 ==========

class PathFinder:
    """Dijkstra 기반 경로 탐색기"""

    def __init__(
        self,
        cost_model: Optional[EdgeCostModel] = None,
        max_iterations: Optional[int] = None,
        max_transfers: Optional[int] = None,
    ):
        self.cost_model = cost_model or EdgeCostModel()
        self.max_iterations = max_iterations if max_iterations is not None else settings.MAX_SEARCH_ITERATIONS
        self.max_transfers = max_transfers if max_transfers is not None else settings.MAX_TRANSFERS

    def search(
        self,
        graph: SubwayGraph,
        start_id: str,
        end_id: str,
        variant: SearchVariant,
        departure_time: Optional[datetime] = None,
        max_transfers: Optional[int] = None,
        excluded_edges: AbstractSet[GraphEdge] = frozenset(),
        log_failures: bool = True,
    ) -> SearchOutcome:
        """
        경로 탐색

        Args:
            graph: 지하철 그래프
            start_id: 출발역 ID
            end_id: 도착역 ID
            variant: 탐색 변형
            departure_time: 출발 시각 (혼잡도 가중 시 사용, 없으면 현재 시각)
            max_transfers: 최대 환승 횟수 (None이면 기본값)
            excluded_edges: 이번 탐색에서 제외할 엣지 (대체 경로 탐색용)
            log_failures: False면 탐색 실패를 DEBUG로만 기록

        Returns:
            SearchOutcome (성공 시 state, 실패 시 failure 사유)
        """
        kind = variant.kind

        if start_id not in graph:
            logger.warning(f"[{kind.value}] 시작 역이 그래프에 없음: {start_id}")
            return SearchOutcome(kind=kind, failure=SearchFailure.NOT_FOUND)
        if end_id not in graph:
            logger.warning(f"[{kind.value}] 도착 역이 그래프에 없음: {end_id}")
            return SearchOutcome(kind=kind, failure=SearchFailure.NOT_FOUND)

        limit = max_transfers if max_transfers is not None else self.max_transfers
        departure_time = departure_time or datetime.now()

        counter = itertools.count()
        origin = SearchState.origin(start_id)
        queue: List[Tuple[float, int, SearchState]] = [(variant.priority(origin), next(counter), origin)]
        visited: Dict[str, List[SearchState]] = {}
        iterations = 0

        while queue and iterations < self.max_iterations:
            iterations += 1
            _, _, current = heapq.heappop(queue)

            # 환승 한도 초과 상태는 꺼낼 때 버림
            if current.transfers > limit:
                continue

            if current.station_id == end_id:
                logger.debug(
                    f"[{kind.value}] 경로 찾음: {len(current.path)}개 역, "
                    f"{current.time:.1f}분, 환승 {current.transfers}회 (반복 {iterations})"
                )
                return SearchOutcome(
                    kind=kind,
                    state=current,
                    iterations=iterations,
                    visited_count=len(visited),
                )

            labels = visited.setdefault(current.station_id, [])
            if any(_strictly_dominates(variant, known, current) for known in labels):
                continue
            labels[:] = [known for known in labels if not variant.dominates(current, known)]
            labels.append(current)

            neighbors = graph.neighbors(current.station_id)
            if not neighbors:
                logger.debug(f"[{kind.value}] 이웃 없는 역: {current.station_id}")
                continue

            for edge in neighbors:
                if edge.to_id in current.path or edge in excluded_edges:
                    continue

                candidate = current.extend(
                    edge,
                    edge_cost=variant.edge_cost(current, edge, departure_time),
                    edge_minutes=self.cost_model.base_minutes(edge),
                )

                if any(variant.dominates(known, candidate) for known in visited.get(edge.to_id, ())):
                    continue

                heapq.heappush(queue, (variant.priority(candidate), next(counter), candidate))

        log_level = logging.WARNING if log_failures else logging.DEBUG
        if queue and iterations >= self.max_iterations:
            failure = SearchFailure.ITERATION_CAP_EXCEEDED
            logger.log(
                log_level,
                f"[{kind.value}] 경로 탐색 최대 반복 횟수 도달: {start_id} -> {end_id} "
                f"(반복 {iterations}, 방문 {len(visited)}개, 큐 {len(queue)}개)"
            )
        else:
            failure = SearchFailure.NO_PATH_FOUND
            logger.log(
                log_level,
                f"[{kind.value}] 경로를 찾을 수 없음: {start_id} -> {end_id} "
                f"(방문 {len(visited)}개, 반복 {iterations}, "
                f"출발역 이웃 {len(graph.neighbors(start_id))}개, 큐 {len(queue)}개)"
            )

        return SearchOutcome(
            kind=kind,
            failure=failure,
            iterations=iterations,
            visited_count=len(visited),
        )

    # ========== 변형별 편의 메서드 ==========

    def fastest(self, graph: SubwayGraph, start_id: str, end_id: str, **kwargs) -> SearchOutcome:
        return self.search(graph, start_id, end_id, FastestVariant(self.cost_model), **kwargs)

    def least_transfer(
        self,
        graph: SubwayGraph,
        start_id: str,
        end_id: str,
        transfer_penalty: Optional[float] = None,
        **kwargs
    ) -> SearchOutcome:
        variant = LeastTransferVariant(self.cost_model, transfer_penalty=transfer_penalty)
        return self.search(graph, start_id, end_id, variant, **kwargs)

    def least_crowded(
        self,
        graph: SubwayGraph,
        start_id: str,
        end_id: str,
        congestion: Optional[CongestionLookup] = None,
        **kwargs
    ) -> SearchOutcome:
        variant = LeastCrowdedVariant(self.cost_model, congestion=congestion)
        return self.search(graph, start_id, end_id, variant, **kwargs)
