"""감정 분석 함수 (clever-endpoint) 서버 측 처리

웹 클라이언트와 같은 계약을 따릅니다.
- 요청: {content, diaryId?, isReanalyze?, selectedDate?} + Bearer 토큰
- 응답: {success, message?, error?, diary?: {id, ai_feedback, ...}}

신규 작성이면 일기 저장 + 피드백 생성을 한 번에 수행하고,
재분석이면 기존 일기에 대한 새 피드백을 생성합니다.
"""
import logging
from datetime import date
from typing import Callable, Optional

from ...config import get_kst_today
from ...config.config import get_feedback_mode
from ...core.exceptions import DiaryAppError, EmptyContent, FutureDateRejected, NotFound
from ...utils.schemas import (
    EmotionFeedbackInput,
    FeedbackFunctionRequest,
    FeedbackFunctionResponse,
)
from ...utils.utils import parse_date
from .generator import create_feedback

logger = logging.getLogger(__name__)

CREATE_SUCCESS_MESSAGE = "일기가 성공적으로 저장되었습니다!"
REANALYZE_SUCCESS_MESSAGE = "일기가 성공적으로 수정되었습니다!"
ANALYSIS_FAILED_MESSAGE = "감정 분석 중 오류가 발생했습니다."
SAVED_WITHOUT_FEEDBACK_MESSAGE = "일기는 저장되었지만 감정 분석에 실패했습니다. 상세 화면에서 다시 분석해 주세요."


class FeedbackFunctionHandler:
    """피드백 함수 처리기

    Args:
        db: Database 인스턴스
        mode: "llm" | "canned" (None이면 환경변수 기준)
        today: 오늘 날짜 제공 함수 (미래 날짜 판정용)
    """

    def __init__(self, db, mode: Optional[str] = None, today: Callable[[], date] = get_kst_today):
        self.db = db
        self.mode = mode or get_feedback_mode()
        self.today = today

    async def handle(
        self,
        owner_id: str,
        request: FeedbackFunctionRequest,
        persist_reanalysis: bool = True,
        access_token: Optional[str] = None
    ) -> FeedbackFunctionResponse:
        """요청 처리 - 실패해도 예외 대신 success=False 응답을 반환

        access_token이 있으면 저장소 호출은 요청자 권한으로 수행됩니다.
        """
        try:
            db = self.db.scoped(access_token)
            content = request.content.strip()
            if not content:
                raise EmptyContent()

            if request.isReanalyze:
                return await self._reanalyze(db, owner_id, request.diaryId, content, persist_reanalysis)
            return await self._create(db, owner_id, content, request.selectedDate)

        except DiaryAppError as e:
            logger.warning(f"[FeedbackFunction] 요청 거절: {e.message}")
            return FeedbackFunctionResponse(success=False, error=e.message)

    async def _generate(self, content: str, target_date: Optional[date], is_reanalyze: bool) -> Optional[str]:
        try:
            output = await create_feedback(
                EmotionFeedbackInput(content=content, target_date=target_date, is_reanalyze=is_reanalyze),
                self.mode
            )
        except Exception as e:
            logger.error(f"[FeedbackFunction] 피드백 생성 실패: {e}")
            return None
        return output.feedback_text

    async def _create(self, db, owner_id: str, content: str, selected_date: Optional[str]) -> FeedbackFunctionResponse:
        target_date = parse_date(selected_date) or self.today()
        if target_date > self.today():
            raise FutureDateRejected()

        diary = await db.create_diary(owner_id, content, target_date)
        logger.info(f"[FeedbackFunction] 일기 저장 완료: {diary.id} ({target_date})")

        feedback = await self._generate(content, target_date, is_reanalyze=False)
        if feedback is None:
            return FeedbackFunctionResponse(
                success=False,
                error=SAVED_WITHOUT_FEEDBACK_MESSAGE,
                diary=diary.model_dump(mode="json"),
            )

        diary = await db.update_diary(diary.id, owner_id, {"ai_feedback": feedback})
        return FeedbackFunctionResponse(
            success=True,
            message=CREATE_SUCCESS_MESSAGE,
            diary=diary.model_dump(mode="json"),
            feedback=feedback,
        )

    async def _reanalyze(
        self,
        db,
        owner_id: str,
        diary_id: Optional[str],
        content: str,
        persist: bool
    ) -> FeedbackFunctionResponse:
        if not diary_id:
            raise NotFound()

        diary = await db.get_diary(diary_id, owner_id)

        feedback = await self._generate(content, diary.target_date, is_reanalyze=True)
        if feedback is None:
            return FeedbackFunctionResponse(success=False, error=ANALYSIS_FAILED_MESSAGE)

        if persist:
            diary = await db.update_diary(diary_id, owner_id, {
                "content": content,
                "ai_feedback": feedback,
            })
        else:
            diary = diary.model_copy(update={"content": content, "ai_feedback": feedback})

        logger.info(f"[FeedbackFunction] 재분석 완료: {diary_id}")
        return FeedbackFunctionResponse(
            success=True,
            message=REANALYZE_SUCCESS_MESSAGE,
            diary=diary.model_dump(mode="json"),
            feedback=feedback,
        )
