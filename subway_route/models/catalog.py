"""역/노선 카탈로그 스키마

원본 JSON 레코드는 여기서 한 번만 검증하고,
그래프 구축과 경로 탐색은 검증된 모델만 사용합니다.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Station(BaseModel):
    """역 (노선별 인스턴스)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="역 고유 ID")
    name: str = Field(..., min_length=1, description="역명")
    lines: List[str] = Field(default_factory=list, description="포함 노선")
    is_transfer: bool = Field(default=False, description="환승역 여부")
    lat: Optional[float] = Field(default=None, description="위도")
    lng: Optional[float] = Field(default=None, description="경도")

    @field_validator("id", "name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("lines", mode="before")
    @classmethod
    def _normalize_lines(cls, value):
        # 2 / "2" / "2호선" 모두 "2"로 통일
        if value is None:
            return []
        if isinstance(value, (str, int)):
            value = [value]
        return [str(line).replace("호선", "").strip() for line in value]

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(lat, lng) 또는 None (좌표 없음/0 좌표)"""
        if not self.lat or not self.lng:
            return None
        return (self.lat, self.lng)


class LineBranch(BaseModel):
    """지선"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    station_ids: List[str] = Field(default_factory=list)


class Line(BaseModel):
    """노선 (station_ids는 운행 순서대로 정렬)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="노선 ID")
    name: str = ""
    color: str = ""
    station_ids: List[str] = Field(default_factory=list)
    branches: List[LineBranch] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value):
        if value is None:
            return value
        return str(value).replace("호선", "").strip()

    def sequences(self) -> List[Tuple[str, List[str]]]:
        """(구간 이름, 역 ID 순서) 목록 - 본선 먼저, 이어서 지선"""
        result = [(self.name or self.id, list(self.station_ids))]
        for branch in self.branches:
            result.append((branch.name or branch.id, list(branch.station_ids)))
        return result


class StationCatalog(BaseModel):
    """역/노선 참조 데이터 전체"""
    model_config = ConfigDict(frozen=True)

    stations: List[Station] = Field(default_factory=list)
    lines: List[Line] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "StationCatalog":
        seen = set()
        for station in self.stations:
            if station.id in seen:
                raise ValueError(f"중복된 역 ID: {station.id}")
            seen.add(station.id)
        return self

    def station_map(self) -> Dict[str, Station]:
        """station_id → Station"""
        return {s.id: s for s in self.stations}

    def stations_by_name(self) -> Dict[str, List[Station]]:
        """역명 → 같은 이름의 Station 목록 (카탈로그 순서 유지)"""
        groups: Dict[str, List[Station]] = {}
        for station in self.stations:
            groups.setdefault(station.name, []).append(station)
        return groups
