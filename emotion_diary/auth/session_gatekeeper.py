"""세션 관리 (Session Gatekeeper)

현재 인증된 사용자를 확인하고, 로그인/로그아웃 등 세션 변화를 구독자에게 알립니다.
전역 세션 대신 요청마다 access token → SessionSchema 로 명시적으로 전달합니다.
"""
import uuid
import hashlib
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..config import MIN_PASSWORD_LENGTH, get_kst_now
from ..core.exceptions import AuthError, PasswordChangeError, Unauthenticated
from ..database.schemas import AccountSchema, SessionSchema
from ..utils.utils import format_joined_on

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    """세션 변화 이벤트"""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, Optional[SessionSchema]], None]


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _session_from_response(response) -> Optional[SessionSchema]:
    """gotrue AuthResponse → SessionSchema (세션 없으면 None)"""
    session = getattr(response, "session", None)
    user = getattr(response, "user", None) or getattr(session, "user", None)
    if session is None or user is None:
        return None
    return SessionSchema(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user_id=str(user.id),
        email=user.email,
        created_at=user.created_at,
    )


class SessionGatekeeper:
    def __init__(self, db):
        self.db = db
        self._listeners: List[AuthListener] = []

        # 모킹 데이터 저장소 (Supabase 없을 때 사용)
        self._mock_users: Dict[str, Dict] = {}
        self._mock_sessions: Dict[str, SessionSchema] = {}

    # ============================================
    # 세션 변화 구독
    # ============================================

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """세션 변화 구독 - 구독 해제 함수 반환"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Optional[SessionSchema]) -> None:
        logger.info(f"[Session] {event.value}: {session.user_id if session else '-'}")
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                logger.error(f"❌ [Session] 구독자 처리 실패 ({event.value}): {e}")

    # ============================================
    # 세션 조회
    # ============================================

    async def get_current_session(self, access_token: Optional[str]) -> Optional[SessionSchema]:
        """access token → 세션 (로그인 안 됐거나 만료되면 None)"""
        if not access_token:
            return None

        if not self.db.supabase:
            return self._mock_sessions.get(access_token)

        try:
            response = self.db.supabase.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"⚠️ [Session] 토큰 확인 실패: {e}")
            return None

        user = getattr(response, "user", None)
        if user is None:
            return None
        return SessionSchema(
            access_token=access_token,
            user_id=str(user.id),
            email=user.email,
            created_at=user.created_at,
        )

    async def require_session(self, access_token: Optional[str]) -> SessionSchema:
        """세션 필수 - 없으면 Unauthenticated (로그인 화면으로 이동)"""
        session = await self.get_current_session(access_token)
        if session is None:
            raise Unauthenticated()
        return session

    async def get_account(self, session: SessionSchema) -> AccountSchema:
        """설정 화면 계정 정보"""
        return AccountSchema(
            user_id=session.user_id,
            email=session.email,
            created_at=session.created_at,
            joined_on=format_joined_on(session.created_at),
        )

    # ============================================
    # 로그인 / 회원가입 / 로그아웃
    # ============================================

    async def sign_up(self, email: str, password: str) -> Optional[SessionSchema]:
        """회원가입 - 이메일 확인이 필요한 경우 세션 없이 None 반환"""
        if not email or not password:
            raise AuthError("이메일과 비밀번호를 입력해 주세요.")

        if not self.db.supabase:
            if email in self._mock_users:
                raise AuthError("User already registered")
            self._mock_users[email] = {
                "id": str(uuid.uuid4()),
                "password_hash": _hash_password(password),
                "created_at": get_kst_now(),
            }
            logger.info(f"✨ [Session] 신규 사용자 생성 (모킹): {email}")
            return await self.sign_in(email, password)

        try:
            response = self.db.create_scoped_client().auth.sign_up({"email": email, "password": password})
        except Exception as e:
            logger.error(f"❌ [Session] 회원가입 실패: {e}")
            raise AuthError(getattr(e, "message", None) or str(e) or None) from e

        session = _session_from_response(response)
        if session:
            self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_in(self, email: str, password: str) -> SessionSchema:
        """이메일/비밀번호 로그인"""
        if not email or not password:
            raise AuthError("이메일과 비밀번호를 입력해 주세요.")

        if not self.db.supabase:
            user = self._mock_users.get(email)
            if not user or user["password_hash"] != _hash_password(password):
                raise AuthError("Invalid login credentials")
            session = SessionSchema(
                access_token=uuid.uuid4().hex,
                refresh_token=uuid.uuid4().hex,
                user_id=user["id"],
                email=email,
                created_at=user["created_at"],
            )
            self._mock_sessions[session.access_token] = session
        else:
            try:
                response = self.db.create_scoped_client().auth.sign_in_with_password(
                    {"email": email, "password": password}
                )
            except Exception as e:
                logger.warning(f"⚠️ [Session] 로그인 실패: {email} - {e}")
                raise AuthError(getattr(e, "message", None) or str(e) or None) from e

            session = _session_from_response(response)
            if session is None:
                raise AuthError()

        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self, session: SessionSchema) -> None:
        """로그아웃"""
        if not self.db.supabase:
            self._mock_sessions.pop(session.access_token, None)
        else:
            try:
                # 요청에 실린 access token 으로 직접 폐기 (refresh token 없이도 동작)
                self.db.create_scoped_client().auth.admin.sign_out(session.access_token)
            except Exception as e:
                logger.error(f"❌ [Session] 로그아웃 실패: {e}")
                raise AuthError(getattr(e, "message", None) or str(e) or None) from e

        self._emit(AuthEvent.SIGNED_OUT, session)

    # ============================================
    # 비밀번호 변경
    # ============================================

    async def change_password(
        self,
        session: SessionSchema,
        current_password: str,
        new_password: str,
        confirm_password: str
    ) -> None:
        """비밀번호 변경 - 현재 비밀번호로 재인증 후 변경"""
        if not current_password or not new_password or not confirm_password:
            raise PasswordChangeError("모든 필드를 입력해 주세요.")
        if new_password != confirm_password:
            raise PasswordChangeError("새 비밀번호가 일치하지 않습니다.")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise PasswordChangeError(f"새 비밀번호는 최소 {MIN_PASSWORD_LENGTH}자 이상이어야 합니다.")
        if not session.email:
            raise PasswordChangeError("사용자 정보를 찾을 수 없습니다.")

        if not self.db.supabase:
            user = self._mock_users.get(session.email)
            if not user or user["password_hash"] != _hash_password(current_password):
                raise PasswordChangeError("현재 비밀번호가 올바르지 않습니다.")
            user["password_hash"] = _hash_password(new_password)
        else:
            client = self.db.create_scoped_client()
            try:
                client.auth.sign_in_with_password({"email": session.email, "password": current_password})
            except Exception as e:
                logger.warning(f"⚠️ [Session] 재인증 실패: {session.email} - {e}")
                raise PasswordChangeError("현재 비밀번호가 올바르지 않습니다.") from e

            try:
                client.auth.update_user({"password": new_password})
            except Exception as e:
                logger.error(f"❌ [Session] 비밀번호 변경 실패: {e}")
                raise PasswordChangeError(getattr(e, "message", None) or str(e) or None) from e

        logger.info(f"✅ [Session] 비밀번호 변경 완료: {session.user_id}")
        self._emit(AuthEvent.USER_UPDATED, session)
