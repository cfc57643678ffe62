"""감정 분석 요청 (Feedback Requestor)

피드백 함수에 일기 본문과 신규/재분석 여부를 보내고 피드백(신규 작성이면 저장된 일기 포함)을 받습니다.
- 전송/백엔드 실패 → AnalysisError
- 응답은 왔지만 success=False → AnalysisRejected
재시도, 타임아웃 설정 없음 (전송 계층 기본값 사용)
"""
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ...config import FEEDBACK_FUNCTION_NAME
from ...config.config import get_feedback_backend
from ...core.exceptions import AnalysisError, AnalysisRejected
from ...database.schemas import DiarySchema, SessionSchema
from ...utils.schemas import (
    AnalysisOptions,
    AnalysisResult,
    FeedbackFunctionRequest,
    FeedbackFunctionResponse,
)
from .function_handler import FeedbackFunctionHandler

logger = logging.getLogger(__name__)


# =============================================================================
# 백엔드
# =============================================================================

class RemoteFeedbackBackend:
    """Supabase Edge Function 호출"""

    def __init__(self, supabase_client, function_name: str = FEEDBACK_FUNCTION_NAME):
        self.client = supabase_client
        self.function_name = function_name

    async def invoke(self, body: Dict[str, Any], session: SessionSchema) -> Dict[str, Any]:
        try:
            data = self.client.functions.invoke(
                self.function_name,
                invoke_options={
                    "body": body,
                    "headers": {"Authorization": f"Bearer {session.access_token}"},
                    "responseType": "json",
                },
            )
        except Exception as e:
            logger.error(f"❌ [FeedbackRequestor] Edge Function 오류: {e}")
            raise AnalysisError(getattr(e, "message", None) or str(e) or None) from e

        if isinstance(data, (bytes, str)):
            try:
                data = json.loads(data)
            except ValueError as e:
                raise AnalysisError("감정 분석 응답을 해석할 수 없습니다.") from e
        return data


class LocalFeedbackBackend:
    """프로세스 내 피드백 함수 처리 (Edge Function 미사용 시)"""

    def __init__(self, handler: FeedbackFunctionHandler):
        self.handler = handler

    async def invoke(self, body: Dict[str, Any], session: SessionSchema) -> Dict[str, Any]:
        request = FeedbackFunctionRequest(**body)
        # 재분석 결과 저장은 Lifecycle Controller가 담당
        response = await self.handler.handle(
            session.user_id,
            request,
            persist_reanalysis=False,
            access_token=session.access_token,
        )
        return response.model_dump()


# =============================================================================
# Requestor
# =============================================================================

class FeedbackRequestor:
    def __init__(self, backend):
        self.backend = backend

    async def analyze(self, content: str, options: AnalysisOptions, session: SessionSchema) -> AnalysisResult:
        """감정 분석 요청

        Args:
            content: 일기 본문 (공백 제거 완료)
            options: 신규/재분석 여부, 대상 일기 ID, 날짜
            session: 요청자 세션 (Bearer 토큰)

        Returns:
            AnalysisResult: 피드백 + (신규 작성 시) 저장된 일기
        """
        body: Dict[str, Any] = {"content": content}
        if options.is_reanalyze:
            body["diaryId"] = options.diary_id
            body["isReanalyze"] = True
        elif options.target_date is not None:
            body["selectedDate"] = options.target_date.isoformat()

        logger.info(
            f"[FeedbackRequestor] 분석 요청 "
            f"(reanalyze={options.is_reanalyze}, diary_id={options.diary_id})"
        )
        payload = await self.backend.invoke(body, session)

        try:
            response = FeedbackFunctionResponse(**payload)
        except (TypeError, ValidationError) as e:
            logger.error(f"❌ [FeedbackRequestor] 응답 형식 오류: {payload}")
            raise AnalysisError("감정 분석 응답 형식이 올바르지 않습니다.") from e

        if not response.success:
            raise AnalysisRejected(response.error)

        diary_data = response.diary or {}
        return AnalysisResult(
            feedback=response.feedback or diary_data.get("ai_feedback"),
            message=response.message,
            diary=_parse_diary(diary_data),
            diary_id=diary_data.get("id"),
        )


def _parse_diary(diary_data: Dict[str, Any]) -> Optional[DiarySchema]:
    # 함수가 일부 필드만 돌려줄 수 있음 (id, ai_feedback)
    if not diary_data:
        return None
    try:
        return DiarySchema(**diary_data)
    except ValidationError:
        return None


def build_feedback_requestor(db, backend: Optional[str] = None, mode: Optional[str] = None) -> FeedbackRequestor:
    """설정에 맞는 Requestor 생성

    Args:
        db: Database 인스턴스
        backend: "remote" | "local" (None이면 환경변수 기준)
        mode: 로컬 처리 시 피드백 생성 방식 ("llm" | "canned")
    """
    backend = backend or get_feedback_backend()

    if backend == "remote":
        if db.supabase is None:
            logger.warning("⚠️ [FeedbackRequestor] Supabase 미연결 - 로컬 피드백 함수로 대체합니다.")
        else:
            logger.info(f"[FeedbackRequestor] Edge Function 사용: {FEEDBACK_FUNCTION_NAME}")
            return FeedbackRequestor(RemoteFeedbackBackend(db.supabase))

    logger.info("[FeedbackRequestor] 로컬 피드백 함수 사용")
    return FeedbackRequestor(LocalFeedbackBackend(FeedbackFunctionHandler(db, mode=mode)))
