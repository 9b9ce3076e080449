"""
혼잡도 조회 모듈

외부 혼잡도 제공자는 lookup(station_id, line, hour) -> 레벨(1~4) 인터페이스만 구현하면 됩니다.
CongestionLookup이 TTL 캐시와 기본값(2, 보통) 처리를 담당하므로
조회 실패가 경로 탐색 호출자에게 전달되는 일은 없습니다.
"""

import logging
import time
from typing import Callable, Dict, Mapping, Optional, Protocol, Tuple
from urllib.parse import quote

import httpx

from subway_route.config import RouteConfig, settings
from subway_route.exceptions import CongestionLookupError

logger = logging.getLogger(__name__)

NEUTRAL_LEVEL = RouteConfig.NEUTRAL_CONGESTION_LEVEL


class CongestionProvider(Protocol):
    """혼잡도 제공자 인터페이스"""

    def lookup(self, station_id: str, line: str, hour: int) -> Optional[int]:
        ...


def calculate_congestion_level(
    passenger_count: float,
    capacity: int = RouteConfig.STATION_CAPACITY
) -> int:
    """
    승차 인원 → 혼잡도 레벨

    Returns:
        1: 여유 (< 30%), 2: 보통 (< 60%), 3: 혼잡 (< 80%), 4: 매우 혼잡
    """
    ratio = passenger_count / capacity if capacity > 0 else 0

    if ratio < 0.3:
        return 1
    if ratio < 0.6:
        return 2
    if ratio < 0.8:
        return 3
    return 4


class NeutralCongestionProvider:
    """항상 보통(2)을 반환하는 제공자"""

    def lookup(self, station_id: str, line: str, hour: int) -> Optional[int]:
        return NEUTRAL_LEVEL


class StaticCongestionProvider:
    """
    고정 테이블 기반 제공자

    시간대별 값 (station_id, line, hour)을 먼저 찾고,
    없으면 시간 무관 값 (station_id, line)을 사용합니다.
    """

    def __init__(
        self,
        levels: Optional[Mapping[Tuple[str, str], int]] = None,
        hourly_levels: Optional[Mapping[Tuple[str, str, int], int]] = None,
    ):
        self._levels = dict(levels or {})
        self._hourly = dict(hourly_levels or {})

    def lookup(self, station_id: str, line: str, hour: int) -> Optional[int]:
        level = self._hourly.get((station_id, line, hour))
        if level is None:
            level = self._levels.get((station_id, line))
        return level


class SeoulCongestionProvider:
    """서울 열린데이터 광장 CardSubwayStatsNew API 기반 제공자"""

    SERVICE = "CardSubwayStatsNew"
    DEFAULT_PASSENGER_COUNT = 500

    def __init__(
        self,
        station_names: Mapping[str, str],
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            station_names: station_id → 역명 (API는 역명으로 조회)
            api_key: API 키 (None이면 settings.SEOUL_API_KEY)
            base_url: API 주소 (None이면 settings.SEOUL_API_BASE)
            timeout: 호출당 타임아웃 초 (None이면 settings.CONGESTION_TIMEOUT_SECONDS)
            client: 주입할 httpx.Client (테스트용)
        """
        self.station_names = dict(station_names)
        self.api_key = api_key if api_key is not None else settings.SEOUL_API_KEY
        self.base_url = (base_url or settings.SEOUL_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.CONGESTION_TIMEOUT_SECONDS
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self.timeout,
            headers={"Accept": "application/json"},
        )

    def is_available(self) -> bool:
        """API 키 설정 여부"""
        return bool(self.api_key)

    def build_url(self, station_name: str, line: str) -> str:
        return (
            f"{self.base_url}/{self.api_key}/json/{self.SERVICE}/1/5/"
            f"{quote(station_name)}/{quote(line)}"
        )

    def fetch_passenger_count(self, station_name: str, line: str) -> Optional[int]:
        """
        역/노선 승차 인원 조회

        Returns:
            승차 인원, 데이터가 없으면 None

        Raises:
            CongestionLookupError: 네트워크 오류, 타임아웃, 응답 형식 오류
        """
        url = self.build_url(station_name, line)
        try:
            response = self._client.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise CongestionLookupError(f"서울시 API 요청 타임아웃 ({self.timeout}s)") from e
        except httpx.HTTPError as e:
            raise CongestionLookupError(f"서울시 API 호출 실패: {e}") from e
        except ValueError as e:
            raise CongestionLookupError(f"서울시 API 응답 파싱 실패: {e}") from e

        body = data.get(self.SERVICE) if isinstance(data, dict) else None
        if not isinstance(body, dict):
            # 데이터 없음 응답은 최상위 RESULT만 옴 (INFO-200)
            return None

        result = body.get("RESULT") or {}
        if result.get("CODE") and result.get("CODE") != "INFO-000":
            return None

        rows = body.get("row") or []
        if not rows:
            return None

        count = rows[0].get("RIDE_PASGR_NUM")
        try:
            return int(count) if count is not None else self.DEFAULT_PASSENGER_COUNT
        except (TypeError, ValueError):
            return self.DEFAULT_PASSENGER_COUNT

    def lookup(self, station_id: str, line: str, hour: int) -> Optional[int]:
        station_name = self.station_names.get(station_id)
        if not station_name or not self.is_available():
            return None

        count = self.fetch_passenger_count(station_name, line)
        if count is None:
            return None
        return calculate_congestion_level(count)

    def close(self) -> None:
        """직접 만든 클라이언트만 닫음 (주입된 클라이언트는 호출자 소유)"""
        if self._owns_client:
            self._client.close()


class CongestionLookup:
    """
    제공자 래퍼: TTL 캐시 + 레벨 보정 + 실패 시 기본값

    캐시 키는 (station_id, line, hour). 동시 갱신은 마지막 값이 남을 뿐이라 잠금을 쓰지 않습니다.
    """

    def __init__(
        self,
        provider: CongestionProvider,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CONGESTION_CACHE_TTL_SECONDS
        self._clock = clock
        self._cache: Dict[Tuple[str, str, int], Tuple[int, float]] = {}
        self._warned = False

    def level_for(self, station_id: str, line: str, hour: int) -> int:
        """
        혼잡도 레벨 조회 (항상 1~4 반환)

        Args:
            station_id: 역 ID
            line: 노선 ID
            hour: 시각 (0~23)

        Returns:
            혼잡도 레벨, 조회 실패/데이터 없음/범위 밖이면 2 (보통)
        """
        key = (station_id, line, hour % 24)
        now = self._clock()

        cached = self._cache.get(key)
        if cached and now - cached[1] < self.ttl_seconds:
            return cached[0]

        try:
            raw = self.provider.lookup(station_id, line, key[2])
        except Exception as e:
            # 경고는 한 번만, 이후 조용히 기본값
            if not self._warned:
                logger.warning(f"혼잡도 조회 실패, 기본값 사용 (이후 조용히 처리): {station_id}/{line} - {e}")
                self._warned = True
            return NEUTRAL_LEVEL

        level = raw if isinstance(raw, int) and 1 <= raw <= 4 else NEUTRAL_LEVEL
        self._cache[key] = (level, now)
        return level

    def clear(self) -> None:
        """캐시 비우기"""
        self._cache.clear()

    def close(self) -> None:
        """캐시를 비우고 제공자 자원 해제 (close()가 있는 제공자만)"""
        self._cache.clear()
        close = getattr(self.provider, "close", None)
        if callable(close):
            close()
