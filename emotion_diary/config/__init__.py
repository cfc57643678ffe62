"""Configuration module

이 모듈은 애플리케이션의 모든 설정 값을 중앙에서 관리합니다.
"""

from datetime import date, datetime, timezone, timedelta

from .business_config import (
    DIARY_TABLE,
    FEEDBACK_FUNCTION_NAME,
    MIN_PASSWORD_LENGTH,
    WEEK_START_WEEKDAY,
    CALENDAR_PREVIEW_LENGTH,
)

# 한국 시간대 (KST = UTC+9)
KST = timezone(timedelta(hours=9))


def get_kst_now():
    """한국 시간 기준 현재 datetime 반환 (timezone-aware)"""
    return datetime.now(KST)


def get_kst_today() -> date:
    """한국 시간 기준 오늘 날짜 (미래 날짜 판정 기준)"""
    return get_kst_now().date()


__all__ = [
    "DIARY_TABLE",
    "FEEDBACK_FUNCTION_NAME",
    "MIN_PASSWORD_LENGTH",
    "WEEK_START_WEEKDAY",
    "CALENDAR_PREVIEW_LENGTH",
    "KST",
    "get_kst_now",
    "get_kst_today",
]
