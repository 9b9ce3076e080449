"""Pydantic 스키마 정의 - 경로 탐색 요청 옵션"""

from pydantic import BaseModel, Field
from typing import Optional


class RouteSearchOptions(BaseModel):
    """경로 탐색 옵션"""
    max_transfers: Optional[int] = Field(
        default=None,
        ge=0,
        le=20,
        description="최대 환승 횟수 (None이면 settings.MAX_TRANSFERS)"
    )
    max_routes: Optional[int] = Field(
        default=None,
        ge=1,
        le=10,
        description="최대 경로 수 (None이면 settings.MAX_ROUTES)"
    )
