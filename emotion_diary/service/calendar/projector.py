"""달력 투영 (순수 함수만)

DB 접근 없음 - Repository에서 가져온 일기 목록을 월 달력 칸으로 배치합니다.
"""
import calendar
from datetime import date
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ...config import WEEK_START_WEEKDAY, CALENDAR_PREVIEW_LENGTH
from ...database.schemas import DiarySchema

# 일요일 시작 기준 요일 헤더
WEEKDAY_HEADERS = ["일", "월", "화", "수", "목", "금", "토"]

# date.weekday() 순서 (0=월)
KOREAN_WEEKDAY_NAMES = ["월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일"]


class CalendarCell(BaseModel):
    """달력 날짜 칸"""
    date_key: str  # YYYY-MM-DD (날짜별 화면 경로)
    day: int
    count: int = 0
    preview: Optional[str] = None  # 첫 번째(최신) 일기 미리보기
    has_feedback: bool = False  # AI 분석 완료 일기가 하나라도 있는지
    is_today: bool = False
    is_future: bool = False
    diary_ids: List[str] = Field(default_factory=list)


class CalendarMonth(BaseModel):
    """월 달력 화면 데이터"""
    month: str  # YYYY-MM
    label: str  # 2024년 3월
    previous: str
    next: str
    weekday_headers: List[str]
    cells: List[Optional[CalendarCell]]  # None = 첫 주 앞쪽 빈 칸
    total_entries: int


# =============================================================================
# 월 계산
# =============================================================================

def month_start(value: date) -> date:
    return value.replace(day=1)


def previous_month(month: date) -> date:
    """이전 달 1일"""
    first = month_start(month)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def next_month(month: date) -> date:
    """다음 달 1일"""
    first = month_start(month)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def is_future(value: date, today: date) -> bool:
    """오늘 0시 이후(내일부터)면 미래"""
    return value > today


def format_month_label(month: date) -> str:
    return f"{month.year}년 {month.month}월"


def format_korean_date(value: date) -> str:
    """2024년 3월 1일 금요일"""
    return f"{value.year}년 {value.month}월 {value.day}일 {KOREAN_WEEKDAY_NAMES[value.weekday()]}"


# =============================================================================
# 배치
# =============================================================================

def layout_month(month: date) -> List[Optional[date]]:
    """월 달력 칸 목록

    1일의 요일만큼 앞에 None(빈 칸)을 두고, 이후 1일~말일을 순서대로 배치합니다.

    Examples:
        2024-03-01(금) → [None x 5, 3/1, 3/2, ..., 3/31]
    """
    first = month_start(month)
    leading = (first.weekday() - WEEK_START_WEEKDAY) % 7
    _, days_in_month = calendar.monthrange(first.year, first.month)

    cells: List[Optional[date]] = [None] * leading
    cells.extend(first.replace(day=day) for day in range(1, days_in_month + 1))
    return cells


def _newest_first(entries: Sequence[DiarySchema]) -> List[DiarySchema]:
    # 입력 순서와 무관하게 같은 결과가 나오도록 id로 동률 정리
    return sorted(entries, key=lambda entry: (entry.created_at, entry.id), reverse=True)


def bucket_by_date(entries: Sequence[DiarySchema], month: date) -> Dict[int, List[DiarySchema]]:
    """일기를 날짜(일)별로 묶기

    - target_date 기준, 없으면 created_at 날짜 (초기 버전 데이터 호환)
    - 하루 여러 개의 일기는 모두 유지 (최신순)
    - 해당 월이 아닌 일기는 제외

    Returns:
        {1: [entry, ...], 15: [...]} 형태 (일기가 있는 날만 포함)
    """
    first = month_start(month)
    buckets: Dict[int, List[DiarySchema]] = {}

    for entry in entries:
        resolved = entry.resolved_date
        if resolved.year != first.year or resolved.month != first.month:
            continue
        buckets.setdefault(resolved.day, []).append(entry)

    return {day: _newest_first(day_entries) for day, day_entries in buckets.items()}


def _preview(content: str) -> str:
    if len(content) <= CALENDAR_PREVIEW_LENGTH:
        return content
    return content[:CALENDAR_PREVIEW_LENGTH].rstrip() + "…"


def project_month(entries: Sequence[DiarySchema], month: date, today: date) -> CalendarMonth:
    """일기 목록 → 월 달력 화면 데이터"""
    first = month_start(month)
    buckets = bucket_by_date(entries, first)

    cells: List[Optional[CalendarCell]] = []
    for day in layout_month(first):
        if day is None:
            cells.append(None)
            continue

        day_entries = buckets.get(day.day, [])
        cells.append(CalendarCell(
            date_key=day.isoformat(),
            day=day.day,
            count=len(day_entries),
            preview=_preview(day_entries[0].content) if day_entries else None,
            has_feedback=any(entry.ai_feedback for entry in day_entries),
            is_today=day == today,
            is_future=is_future(day, today),
            diary_ids=[entry.id for entry in day_entries],
        ))

    return CalendarMonth(
        month=first.strftime("%Y-%m"),
        label=format_month_label(first),
        previous=previous_month(first).strftime("%Y-%m"),
        next=next_month(first).strftime("%Y-%m"),
        weekday_headers=WEEKDAY_HEADERS,
        cells=cells,
        total_entries=sum(len(day_entries) for day_entries in buckets.values()),
    )
