"""
역/노선 카탈로그 로더

JSON 파일 형식:
    {
        "stations": [{"id", "name", "lines", "is_transfer", "lat", "lng"}, ...],
        "lines": [{"id", "name", "color", "station_ids", "branches": [...]}, ...]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from subway_route.config import settings
from subway_route.exceptions import CatalogError
from subway_route.models.catalog import StationCatalog

logger = logging.getLogger(__name__)

# 내장 샘플 데이터 (서울 도심 구간)
BUNDLED_CATALOG = Path(__file__).parent.parent / "data" / "seoul_sample.json"


def parse_catalog(data: Dict[str, Any]) -> StationCatalog:
    """
    dict 형태의 원본 레코드를 검증된 카탈로그로 변환

    Raises:
        CatalogError: 필수 필드 누락, 타입 오류, 중복 역 ID
    """
    try:
        return StationCatalog.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"카탈로그 검증 실패: {e.error_count()}건 - {e.errors()[0]['msg']}") from e


def load_catalog(path: Optional[Union[str, Path]] = None) -> StationCatalog:
    """
    JSON 파일에서 카탈로그 로드

    Args:
        path: 카탈로그 파일 경로 (None이면 settings.STATION_CATALOG_PATH, 그것도 없으면 내장 샘플)

    Returns:
        검증된 StationCatalog

    Raises:
        CatalogError: 파일 없음, JSON 파싱 오류, 검증 실패
    """
    if path is None:
        path = settings.STATION_CATALOG_PATH or BUNDLED_CATALOG
    catalog_path = Path(path)

    if not catalog_path.exists():
        raise CatalogError(f"카탈로그 파일 없음: {catalog_path}")

    try:
        with open(catalog_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"카탈로그 JSON 파싱 오류: {catalog_path} ({e})") from e

    if not isinstance(data, dict):
        raise CatalogError(f"카탈로그 최상위는 객체여야 함: {catalog_path}")

    catalog = parse_catalog(data)
    logger.info(
        f"카탈로그 로드: {catalog_path.name} "
        f"(역 {len(catalog.stations)}개, 노선 {len(catalog.lines)}개)"
    )
    return catalog
