"""Database Pydantic Schemas"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date

from ..config import KST


# ============================================
# 1. diaries 테이블 스키마
# ============================================

class DiarySchema(BaseModel):
    """diaries 테이블 스키마"""
    id: str  # UUID (저장소가 생성)
    user_id: str  # 작성자 (모든 조회는 이 값으로 필터링)
    content: str
    ai_feedback: Optional[str] = None

    # 일기가 "어느 날"의 기록인지 (created_at과 별개)
    # 초기 버전 데이터에는 없을 수 있음 → resolved_date 참고
    target_date: Optional[date] = None

    # 타임스탬프
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def resolved_date(self) -> date:
        """달력 배치용 날짜: target_date 우선, 없으면 created_at의 KST 날짜"""
        if self.target_date is not None:
            return self.target_date
        created_at = self.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(KST)
        return created_at.date()


# ============================================
# 2. 인증 세션 스키마
# ============================================

class SessionSchema(BaseModel):
    """인증 세션 (요청마다 명시적으로 전달)"""
    access_token: str
    refresh_token: Optional[str] = None
    user_id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None  # 계정 생성 시각


class AccountSchema(BaseModel):
    """설정 화면 계정 정보"""
    user_id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    joined_on: Optional[str] = Field(default=None, description="가입일 (YYYY. M. D.)")
