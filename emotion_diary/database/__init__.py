"""Database module - DB 접근 및 복합 쿼리"""

from .database import Database

# Schemas
from .schemas import DiarySchema, SessionSchema, AccountSchema

# Diary Repository
from .diary_repository import (
    DateDiariesView,
    get_calendar_month,
    get_date_diaries_view,
)

__all__ = [
    # Database class
    "Database",

    # Schemas
    "DiarySchema",
    "SessionSchema",
    "AccountSchema",

    # Diary Repository
    "DateDiariesView",
    "get_calendar_month",
    "get_date_diaries_view",
]
