"""경로 탐색 엔진 커스텀 예외 모듈

"경로 없음"은 예외가 아니라 빈 결과로 표현합니다.
여기 정의된 예외는 데이터 형태가 깨진 경우에만 사용합니다.
"""


class RouteEngineError(Exception):
    """경로 탐색 엔진 기본 예외"""
    pass


class CatalogError(RouteEngineError):
    """역/노선 카탈로그 로드 또는 검증 실패"""
    pass


class GraphDataError(RouteEngineError):
    """그래프 무결성 위반 (존재하지 않는 역을 가리키는 엣지 등)"""
    pass


class CongestionLookupError(RouteEngineError):
    """혼잡도 조회 실패 (CongestionLookup에서 항상 기본값으로 흡수됨)"""
    pass
