"""
RouteResult → 화면 표시용 요약

연속된 같은 노선 구간은 하나의 구간("2호선 12분, 6개 역")으로 합치고
환승 구간은 "환승" 구간으로 따로 표시합니다.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from subway_route.models.route import RouteResult, Segment

TRANSFER_LABEL = "환승"


def line_label(line: str) -> str:
    """노선 ID → 표시명 ("2" → "2호선", 숫자가 아니면 그대로)"""
    digits = "".join(ch for ch in line if ch.isdigit())
    if digits and digits == line:
        return f"{digits}호선"
    return line or "지하철"


@dataclass
class RouteLeg:
    """요약 구간"""
    label: str
    minutes: int
    station_count: int = 0
    is_transfer: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "minutes": self.minutes,
            "station_count": self.station_count,
            "is_transfer": self.is_transfer,
        }


@dataclass
class RouteSummary:
    """경로 요약"""
    id: str
    is_best: bool
    kind: str
    total_minutes: int
    fare: int
    transfers: int
    congestion_score: int
    legs: List[RouteLeg] = field(default_factory=list)
    key_stations: List[str] = field(default_factory=list)
    is_alternative: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "is_best": self.is_best,
            "kind": self.kind,
            "total_minutes": self.total_minutes,
            "fare": self.fare,
            "transfers": self.transfers,
            "congestion_score": self.congestion_score,
            "legs": [leg.to_dict() for leg in self.legs],
            "key_stations": self.key_stations,
            "is_alternative": self.is_alternative,
        }


def _build_legs(segments: List[Segment]) -> List[RouteLeg]:
    legs: List[RouteLeg] = []
    for segment in segments:
        if segment.is_transfer:
            legs.append(RouteLeg(TRANSFER_LABEL, segment.duration_minutes, is_transfer=True))
            continue

        label = line_label(segment.line)
        last: Optional[RouteLeg] = legs[-1] if legs else None
        if last is not None and not last.is_transfer and last.label == label:
            last.minutes += segment.duration_minutes
            last.station_count += 1
        else:
            legs.append(RouteLeg(label, segment.duration_minutes, station_count=1))
    return legs


def _key_stations(result: RouteResult) -> List[str]:
    """출발역, 환승역, 도착역 (연속 중복 제거)"""
    if not result.stations:
        return []

    names = [result.stations[0]]
    for segment in result.segments:
        if segment.is_transfer:
            names.append(segment.from_name)
    names.append(result.stations[-1])

    deduped: List[str] = []
    for name in names:
        if not deduped or deduped[-1] != name:
            deduped.append(name)
    return deduped


def summarize_route(result: RouteResult, index: int) -> RouteSummary:
    """
    RouteResult를 요약으로 변환

    Args:
        result: 경로 탐색 결과
        index: 결과 목록 내 순서 (0이면 추천 경로)

    Returns:
        RouteSummary
    """
    return RouteSummary(
        id=f"graph-{index}",
        is_best=index == 0,
        kind=result.kind.value,
        total_minutes=result.total_travel_minutes,
        fare=result.fare_amount,
        transfers=result.transfers,
        congestion_score=result.congestion_score,
        legs=_build_legs(list(result.segments)),
        key_stations=_key_stations(result),
        is_alternative=result.is_alternative,
    )
