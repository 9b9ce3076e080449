"""경로 탐색 엔진 로깅 설정 모듈

모든 모듈 로거(logging.getLogger(__name__))는 "subway_route" 아래에 위치하므로
setup_logger()로 패키지 로거 하나만 설정하면 됩니다.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import List, Optional, Sequence, Union

from subway_route.config import settings

LOGGER_NAME = "subway_route"

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    # stdout은 CLI 결과 출력용
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    return handlers


def setup_logger(
    name: str = LOGGER_NAME,
    level: Union[int, str, None] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    패키지 로거 설정 (핸들러가 이미 있으면 그대로 반환)

    Args:
        name: 로거 이름
        level: 로그 레벨 (int 또는 "DEBUG" 같은 이름, None이면 settings.LOG_LEVEL)
        log_file: 파일 출력 경로 (None이면 settings.LOG_FILE)

    Returns:
        설정된 로거
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = _resolve_level(level)
    logger.setLevel(resolved)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(log_file if log_file is not None else settings.LOG_FILE):
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """로거 인스턴스 반환 (설정 안 됐으면 설정)"""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


@contextmanager
def log_timing(operation: str, logger: Optional[logging.Logger] = None):
    """
    구간 소요시간 측정 (DEBUG, ms 단위)

    Usage:
        with log_timing("경로 탐색 0150 -> 0206"):
            routes = search.find_routes(...)
    """
    _logger = logger or logging.getLogger(LOGGER_NAME)
    started = time.perf_counter()
    _logger.debug(f"[START] {operation}")
    try:
        yield
    finally:
        _logger.debug(f"[END] {operation} ({(time.perf_counter() - started) * 1000:.1f}ms)")


def log_route_summary(
    logger: logging.Logger,
    start_id: str,
    end_id: str,
    minutes: Sequence[int],
):
    """경로 탐색 결과 요약 로깅"""
    if not minutes:
        logger.info(f"[ROUTE] {start_id} -> {end_id}: 경로 없음")
        return
    logger.info(
        f"[ROUTE] {start_id} -> {end_id}: {len(minutes)}개 경로 "
        f"(최단 {min(minutes)}분, 최장 {max(minutes)}분)"
    )
