"""
엣지 비용 모델

엣지 + 혼잡도 레벨 → 통과 비용(분 단위 가중치).
fast_cost()는 혼잡도 조회 없이 배수 1.0을 쓰는 지연시간 우선 경로입니다.
"""

from typing import Dict, Optional

from subway_route.config import RouteConfig
from subway_route.models.graph import GraphEdge
from subway_route.utils.normalize import default_minutes, minutes_or_default, safe_minutes


class EdgeCostModel:
    """엣지 통과 비용 계산기"""

    def __init__(self, multipliers: Optional[Dict[int, float]] = None):
        self.multipliers = dict(multipliers or RouteConfig.CONGESTION_MULTIPLIERS)

    def base_minutes(self, edge: GraphEdge) -> float:
        """
        엣지 기본 소요 시간 (분)

        환승 엣지는 transfer_minutes → travel_minutes 순으로 사용하고,
        둘 다 잘못된 값이면 환승 4분 / 일반 2분.
        """
        if edge.is_transfer:
            minutes = safe_minutes(edge.transfer_minutes)
            if minutes is None:
                minutes = safe_minutes(edge.travel_minutes)
            return minutes if minutes is not None else float(default_minutes(is_transfer=True))
        return minutes_or_default(edge.travel_minutes, is_transfer=False)

    def multiplier(self, congestion_level: Optional[int]) -> float:
        """혼잡도 레벨(1~4) → 비용 배수 (알 수 없는 레벨은 1.0)"""
        if congestion_level is None:
            return 1.0
        return self.multipliers.get(congestion_level, 1.0)

    def cost(self, edge: GraphEdge, congestion_level: Optional[int]) -> float:
        """혼잡도 가중 비용"""
        return self.base_minutes(edge) * self.multiplier(congestion_level)

    def fast_cost(self, edge: GraphEdge) -> float:
        """혼잡도 조회 생략 (배수 1.0)"""
        return self.base_minutes(edge)


def congestion_level_to_score(level: int) -> float:
    """혼잡도 레벨 1~4를 0~100으로 선형 변환 (1→0, 4→100)"""
    clamped = min(max(level, 1), 4)
    return (clamped - 1) * 100 / 3
