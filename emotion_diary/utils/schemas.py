"""AI Service Layer Schemas

감정 분석(피드백 함수 / LLM 호출)의 Input/Output을 명확히 정의하여
데이터 레이어(Repository)와 비즈니스 로직(Service)을 분리합니다.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from dataclasses import dataclass
from datetime import date

from ..database.schemas import DiarySchema


# ============================================
# 피드백 요청 옵션
# ============================================

@dataclass
class AnalysisOptions:
    """피드백 요청 옵션

    Attributes:
        is_reanalyze: False면 신규 작성 (함수가 저장까지 수행), True면 재분석
        diary_id: 재분석 대상 일기 ID
        target_date: 신규 작성 시 일기 날짜
    """
    is_reanalyze: bool = False
    diary_id: Optional[str] = None
    target_date: Optional[date] = None


class AnalysisResult(BaseModel):
    """피드백 요청 결과"""
    feedback: Optional[str] = None
    message: Optional[str] = None
    diary: Optional[DiarySchema] = None  # 신규 작성 시 저장된 일기
    diary_id: Optional[str] = None


# ============================================
# 피드백 함수 (clever-endpoint) 요청/응답
# ============================================

class FeedbackFunctionRequest(BaseModel):
    """피드백 함수 요청 본문 (웹 클라이언트와 동일한 필드명)"""
    content: str
    diaryId: Optional[str] = None
    isReanalyze: bool = False
    selectedDate: Optional[str] = None  # YYYY-MM-DD

    class Config:
        json_schema_extra = {
            "example": {
                "content": "오늘은 오랜만에 친구를 만나서 즐거웠다.",
                "selectedDate": "2024-03-01"
            }
        }


class FeedbackFunctionResponse(BaseModel):
    """피드백 함수 응답 본문"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    diary: Optional[Dict[str, Any]] = None  # {id, ai_feedback, ...}
    feedback: Optional[str] = None

    class Config:
        extra = "allow"


# ============================================
# 감정 피드백 생성 Input/Output
# ============================================

class EmotionFeedbackInput(BaseModel):
    """감정 피드백 생성 입력 데이터"""
    content: str = Field(
        description="일기 본문 (앞뒤 공백 제거 완료)"
    )
    target_date: Optional[date] = Field(
        default=None,
        description="일기 날짜 (프롬프트 맥락용)"
    )
    is_reanalyze: bool = Field(
        default=False,
        description="재분석 여부 (다시 읽어보는 관점의 피드백)"
    )


class EmotionFeedbackOutput(BaseModel):
    """감정 피드백 생성 출력 데이터"""
    feedback_text: str = Field(
        description="생성된 감정 피드백 텍스트"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "feedback_text": "친구와 보낸 시간이 마음을 따뜻하게 채워준 하루였네요."
            }
        }
