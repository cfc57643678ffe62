"""감정일기 예외 정의

모든 예외는 사용자에게 그대로 보여줄 수 있는 한국어 메시지와 HTTP 상태 코드를 가집니다.
API 레이어(main.py)의 예외 핸들러가 {"success": False, "error": message} 형태로 변환합니다.
"""
from typing import Optional


class DiaryAppError(Exception):
    """감정일기 예외 베이스 클래스"""

    status_code = 500
    default_message = "오류가 발생했습니다."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# 인증
# =============================================================================

class Unauthenticated(DiaryAppError):
    """세션 없음 - 로그인 화면(/auth)으로 이동해야 함"""
    status_code = 401
    default_message = "로그인이 필요합니다."
    redirect_to = "/auth"


class AuthError(DiaryAppError):
    """로그인/회원가입 실패 (인증 제공자 메시지 전달)"""
    status_code = 400


class PasswordChangeError(DiaryAppError):
    """비밀번호 변경 검증 실패"""
    status_code = 400


# =============================================================================
# 일기 검증 (네트워크 호출 전)
# =============================================================================

class FutureDateRejected(DiaryAppError):
    status_code = 400
    default_message = "미래의 날짜에는 일기를 작성할 수 없어요."


class EmptyContent(DiaryAppError):
    status_code = 400
    default_message = "일기 내용을 입력해 주세요."


class InvalidDate(DiaryAppError):
    status_code = 400
    default_message = "날짜 형식이 올바르지 않습니다. (YYYY-MM-DD)"


class ConfirmationRequired(DiaryAppError):
    """삭제 확인이 필요함 - 사용자가 확인 후 다시 요청하면 진행"""
    status_code = 409
    default_message = "정말로 이 일기를 삭제하시겠습니까?"


class OperationInProgress(DiaryAppError):
    """같은 일기에 대한 요청이 이미 처리 중"""
    status_code = 409
    default_message = "이전 요청을 처리하고 있어요. 잠시 후 다시 시도해 주세요."


# =============================================================================
# 저장소
# =============================================================================

class NotFound(DiaryAppError):
    """일기가 없거나 다른 사용자의 일기 - 빈 화면으로 처리 (치명적 오류 아님)"""
    status_code = 404
    default_message = "일기를 찾을 수 없습니다."


class StoreError(DiaryAppError):
    """일반 저장소 오류 (백엔드 메시지가 있으면 그대로 전달)"""
    status_code = 500
    default_message = "일기를 처리하는 중 오류가 발생했습니다."


# =============================================================================
# 감정 분석
# =============================================================================

class AnalysisError(DiaryAppError):
    """피드백 함수 호출 실패 (네트워크/백엔드 오류)"""
    status_code = 502
    default_message = "감정 분석 중 오류가 발생했습니다."


class AnalysisRejected(AnalysisError):
    """전송은 성공했지만 피드백 함수가 success=false 를 반환"""
    default_message = "감정 분석에 실패했습니다."
