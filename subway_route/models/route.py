"""경로 탐색 상태 및 결과 타입"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from subway_route.models.graph import GraphEdge


class RouteKind(str, Enum):
    """경로 종류"""
    FASTEST = "fastest"
    LEAST_TRANSFER = "least_transfer"
    LEAST_CROWDED = "least_crowded"


class SearchFailure(str, Enum):
    """탐색 실패 사유"""
    NOT_FOUND = "not_found"  # 출발/도착역이 그래프에 없음
    NO_PATH_FOUND = "no_path_found"  # 큐 소진
    ITERATION_CAP_EXCEEDED = "iteration_cap_exceeded"  # 최대 반복 횟수 도달


@dataclass(frozen=True)
class SearchState:
    """탐색 중간 상태 (한 번의 탐색 호출 안에서만 존재)

    Attributes:
        station_id: 현재 역 ID
        cost: 누적 비용 (변형별 엣지 비용 합)
        time: 누적 소요 시간 (분)
        transfers: 누적 환승 횟수
        path: 지나온 역 ID (path[0]은 출발역)
        edges: 사용한 엣지
        lines: 사용한 노선 (처음 사용한 순서)
    """
    station_id: str
    cost: float = 0.0
    time: float = 0.0
    transfers: int = 0
    path: Tuple[str, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    lines: Tuple[str, ...] = ()

    @classmethod
    def origin(cls, station_id: str) -> "SearchState":
        """출발역 초기 상태"""
        return cls(station_id=station_id, path=(station_id,))

    def extend(self, edge: GraphEdge, edge_cost: float, edge_minutes: float) -> "SearchState":
        """엣지 하나를 더 이동한 새 상태"""
        lines = self.lines if edge.line in self.lines else self.lines + (edge.line,)
        return SearchState(
            station_id=edge.to_id,
            cost=self.cost + edge_cost,
            time=self.time + edge_minutes,
            transfers=self.transfers + (1 if edge.is_transfer else 0),
            path=self.path + (edge.to_id,),
            edges=self.edges + (edge,),
            lines=lines,
        )


@dataclass(frozen=True)
class SearchOutcome:
    """탐색 결과 - 성공 시 state, 실패 시 failure 사유"""
    kind: RouteKind
    state: Optional[SearchState] = None
    failure: Optional[SearchFailure] = None
    iterations: int = 0
    visited_count: int = 0

    @property
    def found(self) -> bool:
        return self.state is not None


@dataclass(frozen=True)
class Segment:
    """경로 구간"""
    from_id: str
    to_id: str
    from_name: str
    to_name: str
    line: str
    duration_minutes: int
    congestion_level: int
    is_transfer: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_name,
            "to": self.to_name,
            "from_id": self.from_id,
            "to_id": self.to_id,
            "line": self.line,
            "duration_minutes": self.duration_minutes,
            "congestion_level": self.congestion_level,
            "is_transfer": self.is_transfer,
        }


@dataclass(frozen=True)
class RouteResult:
    """경로 탐색 결과 (호출자에게 반환되는 불변 값)"""
    kind: RouteKind
    stations: Tuple[str, ...]
    station_ids: Tuple[str, ...]
    total_travel_minutes: int
    transfers: int
    congestion_score: int
    fare_amount: int
    lines_used: Tuple[str, ...]
    segments: Tuple[Segment, ...] = ()
    departure_time: Optional[datetime] = None
    is_alternative: bool = False

    @property
    def signature(self) -> str:
        """중복 판정용 경로 서명 (역 ID 순서)"""
        return ",".join(self.station_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "stations": list(self.stations),
            "station_ids": list(self.station_ids),
            "total_travel_minutes": self.total_travel_minutes,
            "transfers": self.transfers,
            "congestion_score": self.congestion_score,
            "fare_amount": self.fare_amount,
            "lines_used": list(self.lines_used),
            "segments": [s.to_dict() for s in self.segments],
            "departure_time": self.departure_time.isoformat() if self.departure_time else None,
            "is_alternative": self.is_alternative,
        }
