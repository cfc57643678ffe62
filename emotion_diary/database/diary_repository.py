"""일기 조회 관련 복합 DB 로직 (달력 / 날짜별 목록)"""
from datetime import date
from typing import List
import logging

from pydantic import BaseModel

from .schemas import DiarySchema
from ..service.calendar.projector import (
    CalendarMonth,
    project_month,
    is_future,
    format_korean_date,
)

logger = logging.getLogger(__name__)


class DateDiariesView(BaseModel):
    """날짜별 일기 화면 데이터"""
    date: str  # YYYY-MM-DD
    display_date: str  # 2024년 3월 1일 금요일
    is_future: bool
    can_write: bool
    summary: str
    write_link: str
    diaries: List[DiarySchema]


async def get_calendar_month(db, owner_id: str, month: date, today: date) -> CalendarMonth:
    """월 달력 구성

    사용자의 전체 일기를 가져와서 (created_at DESC) 해당 월 달력에 배치합니다.

    Args:
        db: Database 인스턴스
        owner_id: 사용자 ID
        month: 표시할 월 (아무 날짜나 가능, 1일 기준으로 정규화)
        today: 오늘 날짜 (오늘/미래 표시용)
    """
    diaries = await db.list_diaries(owner_id)
    calendar_month = project_month(diaries, month, today)
    logger.info(
        f"[DiaryRepo] 달력 구성: {owner_id} {calendar_month.month} "
        f"(이번 달 {calendar_month.total_entries}개 / 전체 {len(diaries)}개)"
    )
    return calendar_month


async def get_date_diaries_view(db, owner_id: str, target_date: date, today: date) -> DateDiariesView:
    """날짜별 일기 목록 (최신순) + 작성 가능 여부"""
    diaries = await db.list_diaries_by_date(owner_id, target_date)
    future = is_future(target_date, today)

    if diaries:
        summary = f"이 날에 작성한 {len(diaries)}개의 일기를 확인해보세요"
    elif future:
        summary = "미래의 날짜예요"
    else:
        summary = "아직 작성한 일기가 없어요"

    return DateDiariesView(
        date=target_date.isoformat(),
        display_date=format_korean_date(target_date),
        is_future=future,
        can_write=not future,
        summary=summary,
        write_link=f"/diary/new?date={target_date.isoformat()}",
        diaries=diaries,
    )
