"""인증 모듈 - 세션 확인 및 세션 변화 알림"""

from .session_gatekeeper import AuthEvent, SessionGatekeeper

__all__ = [
    "AuthEvent",
    "SessionGatekeeper",
]
