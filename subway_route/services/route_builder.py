"""
탐색 결과 → RouteResult 변환

- 구간(Segment): 엣지별 역명, 정수 소요시간(최소 1분), 혼잡도 레벨
- 혼잡도 점수: 구간 레벨 평균을 0~100으로 환산
- 요금: 거리 구간제 (기본 1,400원 / 10km, 5km마다 100원, 최대 2,000원)
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional

from subway_route.config import RouteConfig
from subway_route.models.graph import SubwayGraph
from subway_route.models.route import RouteKind, RouteResult, SearchState, Segment
from subway_route.services.congestion import CongestionLookup
from subway_route.services.edge_cost import EdgeCostModel, congestion_level_to_score
from subway_route.utils.normalize import as_finite_number, whole_minutes

logger = logging.getLogger(__name__)


class FarePolicy:
    """거리 구간제 요금"""

    def __init__(
        self,
        base_fare: int = RouteConfig.BASE_FARE,
        base_distance_km: float = RouteConfig.BASE_FARE_DISTANCE_KM,
        band_km: float = RouteConfig.EXTRA_FARE_BAND_KM,
        fare_per_band: int = RouteConfig.EXTRA_FARE_PER_BAND,
        max_fare: int = RouteConfig.MAX_FARE,
        km_per_hop: float = RouteConfig.DEFAULT_STATION_DISTANCE_KM,
    ):
        self.base_fare = base_fare
        self.base_distance_km = base_distance_km
        self.band_km = band_km
        self.fare_per_band = fare_per_band
        self.max_fare = max_fare
        self.km_per_hop = km_per_hop

    def fare_for_distance(self, distance_km: float) -> int:
        if distance_km <= self.base_distance_km:
            return self.base_fare

        # 부동소수 오차로 구간이 하나 더 잡히지 않도록 반올림 후 올림
        extra = round(distance_km - self.base_distance_km, 6)
        bands = math.ceil(extra / self.band_km)
        return min(self.base_fare + bands * self.fare_per_band, self.max_fare)

    def fare_for_hops(self, hop_count: int) -> int:
        """역 수(환승 제외) × 평균 역간 거리로 요금 계산"""
        return self.fare_for_distance(max(hop_count, 0) * self.km_per_hop)


_default_fare_policy = FarePolicy()


def calculate_fare(hop_count: int) -> int:
    """
    요금 계산

    Args:
        hop_count: 이동 구간 수 (환승 구간 포함)

    Returns:
        요금 (원)
    """
    return _default_fare_policy.fare_for_hops(hop_count)


class RouteResultBuilder:
    """탐색 종료 상태를 호출자용 RouteResult로 변환"""

    def __init__(
        self,
        cost_model: Optional[EdgeCostModel] = None,
        congestion: Optional[CongestionLookup] = None,
        fare_policy: Optional[FarePolicy] = None,
    ):
        self.cost_model = cost_model or EdgeCostModel()
        self.congestion = congestion
        self.fare_policy = fare_policy or _default_fare_policy

    def build(
        self,
        state: SearchState,
        graph: SubwayGraph,
        departure_time: Optional[datetime],
        kind: RouteKind,
        is_alternative: bool = False,
    ) -> RouteResult:
        """
        RouteResult 생성

        Args:
            state: 도착역에 도달한 탐색 상태
            graph: 역명 조회용 그래프
            departure_time: 출발 시각 (None이면 현재 시각)
            kind: 경로 종류
            is_alternative: 대체 경로 여부

        Returns:
            RouteResult
        """
        departure_time = departure_time or datetime.now()

        segments: List[Segment] = []
        elapsed = 0.0
        for edge in state.edges:
            minutes = self.cost_model.base_minutes(edge)
            reached = departure_time + timedelta(minutes=elapsed)
            segments.append(Segment(
                from_id=edge.from_id,
                to_id=edge.to_id,
                from_name=graph.station_name(edge.from_id),
                to_name=graph.station_name(edge.to_id),
                line=edge.line,
                duration_minutes=whole_minutes(minutes, is_transfer=edge.is_transfer),
                congestion_level=self._congestion_level(edge.to_id, edge.line, reached.hour),
                is_transfer=edge.is_transfer,
            ))
            elapsed += minutes

        return RouteResult(
            kind=kind,
            stations=tuple(graph.station_name(sid) for sid in state.path),
            station_ids=tuple(state.path),
            total_travel_minutes=self._total_minutes(state.time, segments),
            transfers=state.transfers,
            congestion_score=self._congestion_score(segments),
            fare_amount=self.fare_policy.fare_for_hops(len(state.path) - 1),
            lines_used=tuple(state.lines),
            segments=tuple(segments),
            departure_time=departure_time,
            is_alternative=is_alternative,
        )

    def _congestion_level(self, station_id: str, line: str, hour: int) -> int:
        if self.congestion is None:
            return RouteConfig.NEUTRAL_CONGESTION_LEVEL
        return self.congestion.level_for(station_id, line, hour)

    @staticmethod
    def _congestion_score(segments: List[Segment]) -> int:
        if not segments:
            return RouteConfig.EMPTY_ROUTE_CONGESTION_SCORE
        scores = [congestion_level_to_score(s.congestion_level) for s in segments]
        return int(round(sum(scores) / len(scores)))

    @staticmethod
    def _total_minutes(search_time: float, segments: List[Segment]) -> int:
        minutes = as_finite_number(search_time)
        if minutes is not None and minutes >= 0:
            return int(round(minutes))

        logger.debug(f"누적 시간 이상값({search_time}), 구간 합계로 재계산")
        return sum(s.duration_minutes for s in segments)
