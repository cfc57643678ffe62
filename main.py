from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Callable, Optional
from datetime import date
import logging
from dotenv import load_dotenv

from emotion_diary.auth import SessionGatekeeper
from emotion_diary.config import get_kst_now, get_kst_today
from emotion_diary.core.exceptions import DiaryAppError, Unauthenticated
from emotion_diary.database import Database, get_calendar_month, get_date_diaries_view
from emotion_diary.database.schemas import SessionSchema
from emotion_diary.helpers.response_formatter import success_response, error_response
from emotion_diary.service.diary import DiaryLifecycleController
from emotion_diary.service.feedback import FeedbackFunctionHandler, build_feedback_requestor
from emotion_diary.utils import FeedbackFunctionRequest, parse_date, parse_month

# 환경 변수 로드
load_dotenv()

logger = logging.getLogger(__name__)


class AuthRequest(BaseModel):
    email: str = ""
    password: str = ""


class NewDiaryRequest(BaseModel):
    content: str = ""
    date: Optional[str] = None  # YYYY-MM-DD (없으면 오늘)


class EditDiaryRequest(BaseModel):
    content: str = ""


class ReanalyzeRequest(BaseModel):
    content: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""
    confirmPassword: str = ""


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def _session_payload(session: SessionSchema) -> dict:
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "user": {"id": session.user_id, "email": session.email},
    }


def create_app(
    db: Optional[Database] = None,
    gatekeeper: Optional[SessionGatekeeper] = None,
    controller: Optional[DiaryLifecycleController] = None,
    feedback_mode: Optional[str] = None,
    today: Callable[[], date] = get_kst_today,
) -> FastAPI:
    """FastAPI 앱 생성 (테스트에서는 의존성을 직접 주입)"""
    app = FastAPI(title="감정일기")

    # 데이터베이스 / 세션 / 생명주기 초기화
    db = db or Database()
    gatekeeper = gatekeeper or SessionGatekeeper(db)
    controller = controller or DiaryLifecycleController(
        db, build_feedback_requestor(db, mode=feedback_mode), today=today
    )
    function_handler = FeedbackFunctionHandler(db, mode=feedback_mode, today=today)

    # 로그아웃 시 진행 중 상태 정리
    gatekeeper.subscribe(controller.handle_auth_event)

    app.state.db = db
    app.state.gatekeeper = gatekeeper
    app.state.controller = controller

    async def current_session(authorization: Optional[str]) -> SessionSchema:
        return await gatekeeper.require_session(_bearer_token(authorization))

    # 앱 시작 시 연결 확인
    @app.on_event("startup")
    async def startup_event():
        await db.test_connection()

    # ========================================
    # 예외 처리 - 모든 실패는 사용자 메시지로 변환
    # ========================================

    @app.exception_handler(DiaryAppError)
    async def handle_diary_error(request: Request, exc: DiaryAppError):
        redirect_to = exc.redirect_to if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.message, redirect_to))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"❌ [API] 처리되지 않은 오류 ({request.url.path}): {exc}")
        return JSONResponse(
            status_code=500,
            content=error_response("서버 오류가 발생했습니다. 잠시 후 다시 시도해주세요."),
        )

    @app.get("/api/status")
    async def get_status():
        """서버 상태 확인"""
        return {
            "status": "running",
            "timestamp": get_kst_now().isoformat(),
            "database": "mock" if db.is_mock else "supabase",
            "connected": await db.test_connection(),
            "message": "감정일기 서버가 정상 작동 중입니다.",
        }

    # ========================================
    # 인증
    # ========================================

    @app.post("/auth/signup")
    async def sign_up(request: AuthRequest):
        """회원가입"""
        session = await gatekeeper.sign_up(request.email, request.password)
        if session is None:
            return success_response("회원가입 성공! 이메일을 확인해 주세요.")
        return success_response("회원가입 성공!", redirect_to="/", session=_session_payload(session))

    @app.post("/auth/signin")
    async def sign_in(request: AuthRequest):
        """로그인"""
        session = await gatekeeper.sign_in(request.email, request.password)
        return success_response("로그인 성공!", redirect_to="/", session=_session_payload(session))

    @app.post("/auth/signout")
    async def sign_out(authorization: Optional[str] = Header(None)):
        """로그아웃"""
        session = await current_session(authorization)
        await gatekeeper.sign_out(session)
        return success_response("로그아웃되었습니다.", redirect_to="/auth")

    # ========================================
    # 일기
    # ========================================

    @app.get("/api/diaries")
    async def list_diaries(authorization: Optional[str] = Header(None)):
        """내 일기 목록 (최신순)"""
        session = await current_session(authorization)
        diaries = await db.scoped(session.access_token).list_diaries(session.user_id)
        return success_response(diaries=[diary.model_dump(mode="json") for diary in diaries])

    @app.post("/api/diaries")
    async def create_diary(request: NewDiaryRequest, authorization: Optional[str] = Header(None)):
        """새 일기 작성 + 감정 분석"""
        session = await current_session(authorization)
        result = await controller.submit_new(session, request.content, request.date)
        return success_response(**result.model_dump(mode="json"))

    @app.get("/api/diaries/date/{date_param}")
    async def get_date_diaries(date_param: str, authorization: Optional[str] = Header(None)):
        """날짜별 일기 목록"""
        session = await current_session(authorization)
        view = await get_date_diaries_view(
            db.scoped(session.access_token),
            session.user_id,
            parse_date(date_param),
            today(),
        )
        return success_response(**view.model_dump(mode="json"))

    @app.get("/api/diaries/{diary_id}")
    async def get_diary(diary_id: str, authorization: Optional[str] = Header(None)):
        """일기 상세"""
        session = await current_session(authorization)
        diary = await db.scoped(session.access_token).get_diary(diary_id, session.user_id)
        return success_response(diary=diary.model_dump(mode="json"))

    @app.put("/api/diaries/{diary_id}")
    async def edit_diary(diary_id: str, request: EditDiaryRequest, authorization: Optional[str] = Header(None)):
        """일기 수정 (감정 분석 다시 수행)"""
        session = await current_session(authorization)
        result = await controller.edit(session, diary_id, request.content)
        return success_response(**result.model_dump(mode="json"))

    @app.post("/api/diaries/{diary_id}/reanalyze")
    async def reanalyze_diary(
        diary_id: str,
        request: Optional[ReanalyzeRequest] = None,
        authorization: Optional[str] = Header(None)
    ):
        """감정 재분석"""
        session = await current_session(authorization)
        content = request.content if request else None
        result = await controller.reanalyze(session, diary_id, content)
        return success_response(**result.model_dump(mode="json"))

    @app.delete("/api/diaries/{diary_id}")
    async def delete_diary(diary_id: str, confirm: bool = False, authorization: Optional[str] = Header(None)):
        """일기 삭제 (confirm=true 필수)"""
        session = await current_session(authorization)
        result = await controller.delete(session, diary_id, confirmed=confirm)
        return success_response(**result.model_dump(mode="json"))

    # ========================================
    # 달력
    # ========================================

    @app.get("/api/calendar")
    async def get_calendar(month: Optional[str] = None, authorization: Optional[str] = Header(None)):
        """월 달력 (month=YYYY-MM, 없으면 이번 달)"""
        session = await current_session(authorization)
        calendar_month = await get_calendar_month(
            db.scoped(session.access_token),
            session.user_id,
            parse_month(month, today()),
            today(),
        )
        return success_response(calendar=calendar_month.model_dump(mode="json"))

    # ========================================
    # 설정
    # ========================================

    @app.get("/api/settings")
    async def get_settings(authorization: Optional[str] = Header(None)):
        """계정 정보"""
        session = await current_session(authorization)
        account = await gatekeeper.get_account(session)
        return success_response(account=account.model_dump(mode="json"))

    @app.post("/api/settings/password")
    async def change_password(request: PasswordChangeRequest, authorization: Optional[str] = Header(None)):
        """비밀번호 변경"""
        session = await current_session(authorization)
        await gatekeeper.change_password(
            session,
            request.currentPassword,
            request.newPassword,
            request.confirmPassword,
        )
        return success_response("비밀번호가 성공적으로 변경되었습니다.")

    # ========================================
    # 감정 분석 함수 (clever-endpoint)
    # ========================================

    @app.post("/functions/clever-endpoint")
    async def feedback_function(request: FeedbackFunctionRequest, authorization: Optional[str] = Header(None)):
        """일기 저장 + 감정 분석 (웹 클라이언트 호환 계약)"""
        session = await current_session(authorization)
        response = await function_handler.handle(session.user_id, request, access_token=session.access_token)
        return response.model_dump(exclude_none=True)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
