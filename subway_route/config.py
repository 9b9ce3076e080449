"""환경 설정 모듈"""

from pydantic_settings import BaseSettings
from typing import Dict, Optional


class Settings(BaseSettings):
    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    LOG_FILE: Optional[str] = None  # 파일 로깅 경로 (None이면 콘솔만)

    # 역/노선 카탈로그 (None이면 내장 샘플 데이터 사용)
    STATION_CATALOG_PATH: Optional[str] = None

    # Search
    MAX_TRANSFERS: int = 5
    MAX_ROUTES: int = 3
    MAX_SEARCH_ITERATIONS: int = 10000
    TRANSFER_PENALTY: int = 1000

    # 혼잡도 반영 탐색 (False면 중립 가중치 fast path)
    CONGESTION_AWARE_ROUTING: bool = False

    # 서울 열린데이터 광장 API
    SEOUL_API_KEY: str = ""
    SEOUL_API_BASE: str = "http://openapi.seoul.go.kr:8088"
    CONGESTION_TIMEOUT_SECONDS: float = 5.0
    CONGESTION_CACHE_TTL_SECONDS: float = 300.0

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


# ========== 경로 탐색 상수 (중앙화) ==========

class RouteConfig:
    """그래프 구축/비용/요금 관련 상수 중앙 관리"""

    # 주행 시간 추정
    AVG_SPEED_KM_PER_MIN = 0.58  # 평균 35km/h
    DWELL_MINUTES = 0.5  # 역간 정차 시간
    DEFAULT_STATION_DISTANCE_KM = 1.2  # 좌표 없을 때 평균 역간 거리
    MIN_TRAVEL_MINUTES = 1.0

    # 시간 기본값 (잘못된 값 보정용)
    DEFAULT_HOP_MINUTES = 2
    DEFAULT_TRANSFER_MINUTES = 4

    # 환승 시간 (환승역 규모별)
    LARGE_TRANSFER_MINUTES = 6  # 3개 노선 이상
    MEDIUM_TRANSFER_MINUTES = 4  # 2개 노선
    SMALL_TRANSFER_MINUTES = 3

    # 혼잡도 레벨 → 비용 배수
    CONGESTION_MULTIPLIERS: Dict[int, float] = {
        1: 0.5,  # 여유
        2: 1.0,  # 보통
        3: 1.5,  # 주의
        4: 2.0,  # 매우 혼잡
    }
    NEUTRAL_CONGESTION_LEVEL = 2
    EMPTY_ROUTE_CONGESTION_SCORE = 50

    # 요금 (서울 지하철 거리비례제)
    BASE_FARE = 1400
    BASE_FARE_DISTANCE_KM = 10.0
    EXTRA_FARE_BAND_KM = 5.0
    EXTRA_FARE_PER_BAND = 100
    MAX_FARE = 2000

    # 혼잡도 산정 (승차 인원 / 수용 인원)
    STATION_CAPACITY = 1000
