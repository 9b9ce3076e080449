"""시간/요금 값 정규화 유틸리티

NaN, 무한대, 0, 음수, 숫자가 아닌 값이 결과로 새어 나가지 않도록
모든 시간 필드를 유한한 양수로 보정합니다.
"""

import math
from typing import Any, Optional

from subway_route.config import RouteConfig


def as_finite_number(value: Any) -> Optional[float]:
    """유한한 숫자로 변환 (불가능하면 None)"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def safe_minutes(value: Any) -> Optional[float]:
    """양수 분 값이면 그대로, 아니면 None"""
    number = as_finite_number(value)
    if number is None or number <= 0:
        return None
    return number


def default_minutes(is_transfer: bool) -> int:
    """기본 소요 시간 (환승 4분, 일반 2분)"""
    return RouteConfig.DEFAULT_TRANSFER_MINUTES if is_transfer else RouteConfig.DEFAULT_HOP_MINUTES


def minutes_or_default(value: Any, is_transfer: bool) -> float:
    """유효하면 원래 값, 아니면 기본 소요 시간"""
    minutes = safe_minutes(value)
    return minutes if minutes is not None else float(default_minutes(is_transfer))


def whole_minutes(value: Any, is_transfer: bool) -> int:
    """구간 표시용 정수 분 (항상 1 이상)"""
    minutes = safe_minutes(value)
    if minutes is None:
        return default_minutes(is_transfer)
    return max(1, int(round(minutes)))

