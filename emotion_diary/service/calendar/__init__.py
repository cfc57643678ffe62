"""달력 투영 서비스"""

from .projector import (
    CalendarCell,
    CalendarMonth,
    WEEKDAY_HEADERS,
    bucket_by_date,
    layout_month,
    project_month,
    is_future,
    previous_month,
    next_month,
    format_korean_date,
    format_month_label,
)

__all__ = [
    "CalendarCell",
    "CalendarMonth",
    "WEEKDAY_HEADERS",
    "bucket_by_date",
    "layout_month",
    "project_month",
    "is_future",
    "previous_month",
    "next_month",
    "format_korean_date",
    "format_month_label",
]
