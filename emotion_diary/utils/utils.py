from datetime import date, datetime
from typing import Optional
import logging

from ..core.exceptions import InvalidDate

logger = logging.getLogger(__name__)


# =============================================================================
# 날짜 파싱 헬퍼
# =============================================================================

def parse_date(value: Optional[str]) -> Optional[date]:
    """YYYY-MM-DD 문자열 → date (None/빈 문자열이면 None)

    Raises:
        InvalidDate: 형식이 잘못된 경우
    """
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(f"[Utils] 잘못된 날짜 형식: {value}")
        raise InvalidDate()


def parse_month(value: Optional[str], default: date) -> date:
    """YYYY-MM 문자열 → 해당 월 1일 (없으면 default가 속한 월)"""
    if not value:
        return default.replace(day=1)
    try:
        return datetime.strptime(value.strip(), "%Y-%m").date()
    except ValueError:
        logger.warning(f"[Utils] 잘못된 월 형식: {value}")
        raise InvalidDate("월 형식이 올바르지 않습니다. (YYYY-MM)")


def format_joined_on(value: Optional[datetime]) -> Optional[str]:
    """가입일 표시 (ko-KR 로캘 형식: 2024. 3. 1.)"""
    if value is None:
        return None
    return f"{value.year}. {value.month}. {value.day}."
