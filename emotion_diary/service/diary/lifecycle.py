"""일기 생명주기 관리 (작성 / 재분석 / 수정 / 삭제)

상태 흐름:
    DRAFT → SUBMITTING → {PERSISTED, FAILED}
    PERSISTED → REANALYZING → {PERSISTED, FAILED}
    PERSISTED → EDITING → SUBMITTING → {PERSISTED, FAILED}
    PERSISTED → DELETING → {DELETED, FAILED}

검증(미래 날짜, 빈 내용)은 네트워크 호출 전에 수행합니다.
같은 일기에 대한 쓰기 요청은 동시에 하나만 처리합니다.
"""
import logging
from datetime import date
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from pydantic import BaseModel

from ...auth.session_gatekeeper import AuthEvent
from ...config import get_kst_today
from ...core.exceptions import (
    AnalysisRejected,
    ConfirmationRequired,
    DiaryAppError,
    EmptyContent,
    FutureDateRejected,
    NotFound,
    OperationInProgress,
)
from ...database.schemas import DiarySchema, SessionSchema
from ...utils.schemas import AnalysisOptions
from ...utils.utils import parse_date

logger = logging.getLogger(__name__)


class EntryState(str, Enum):
    """일기 처리 상태"""
    DRAFT = "draft"
    SUBMITTING = "submitting"
    PERSISTED = "persisted"
    REANALYZING = "reanalyzing"
    EDITING = "editing"
    DELETING = "deleting"
    DELETED = "deleted"
    FAILED = "failed"


BUSY_STATES = {
    EntryState.SUBMITTING,
    EntryState.REANALYZING,
    EntryState.EDITING,
    EntryState.DELETING,
}


class DiaryOperationResult(BaseModel):
    """작성/수정/재분석/삭제 결과 (화면 이동 경로 포함)"""
    state: EntryState
    message: str
    redirect_to: str
    diary_id: Optional[str] = None
    diary: Optional[DiarySchema] = None


class DiaryLifecycleController:
    """일기 작성/수정/재분석/삭제 오케스트레이션

    Args:
        db: Database 인스턴스 (Entry Store)
        requestor: FeedbackRequestor
        today: 오늘 날짜 제공 함수 - 제출 시점 기준으로 호출됨
    """

    def __init__(self, db, requestor, today: Callable[[], date] = get_kst_today):
        self.db = db
        self.requestor = requestor
        self.today = today

        # (owner_id, diary_id) → 현재 상태
        self._states: Dict[Tuple[str, str], EntryState] = {}
        # 로그아웃 시 증가 - 이전 세대 요청의 결과는 기록하지 않음
        self._generations: Dict[str, int] = {}

    # ============================================
    # 상태 관리
    # ============================================

    def state_of(self, owner_id: str, diary_id: str) -> Optional[EntryState]:
        return self._states.get((owner_id, diary_id))

    def _begin(self, owner_id: str, diary_id: str, state: EntryState) -> int:
        key = (owner_id, diary_id)
        current = self._states.get(key)
        if current in BUSY_STATES:
            raise OperationInProgress()
        self._states[key] = state
        logger.info(f"[Lifecycle] {diary_id}: {current.value if current else '-'} → {state.value}")
        return self._generations.get(owner_id, 0)

    def _transition(self, owner_id: str, diary_id: str, state: EntryState, generation: int) -> None:
        if self._generations.get(owner_id, 0) != generation:
            # 로그아웃 이후 완료된 요청 - 결과 버림
            logger.info(f"[Lifecycle] {diary_id}: 로그아웃 이후 완료된 요청 결과 무시 ({state.value})")
            return
        key = (owner_id, diary_id)
        logger.info(f"[Lifecycle] {diary_id}: → {state.value}")
        # 종료 상태는 추적하지 않음 (삭제된 일기는 저장소 조회에서 NotFound)
        if state in (EntryState.PERSISTED, EntryState.DELETED):
            self._states.pop(key, None)
        else:
            self._states[key] = state

    def _fail(self, owner_id: str, diary_id: str, error: DiaryAppError, generation: int) -> None:
        logger.warning(f"[Lifecycle] {diary_id}: 실패 - {error.message}")
        if isinstance(error, NotFound):
            self._states.pop((owner_id, diary_id), None)
            return
        self._transition(owner_id, diary_id, EntryState.FAILED, generation)

    def handle_auth_event(self, event: AuthEvent, session: Optional[SessionSchema]) -> None:
        """세션 변화 구독 콜백 - 로그아웃 시 해당 사용자 상태 정리"""
        if event != AuthEvent.SIGNED_OUT or session is None:
            return
        owner_id = session.user_id
        self._generations[owner_id] = self._generations.get(owner_id, 0) + 1
        for key in [key for key in self._states if key[0] == owner_id]:
            del self._states[key]
        logger.info(f"[Lifecycle] 로그아웃 - 진행 중 상태 정리: {owner_id}")

    # ============================================
    # 작성
    # ============================================

    async def submit_new(
        self,
        session: SessionSchema,
        content: str,
        target_date: Union[date, str, None] = None
    ) -> DiaryOperationResult:
        """새 일기 작성

        target_date가 없으면 오늘(제출 시점)로 정하고, 미래 날짜면 네트워크 호출 전에 거절합니다.
        저장과 감정 분석은 피드백 함수 한 번의 호출로 처리됩니다.
        """
        resolved = parse_date(target_date) if isinstance(target_date, str) else target_date
        # 날짜 선택 시점이 아니라 제출 시점의 오늘 기준
        today = self.today()
        resolved = resolved or today
        if resolved > today:
            raise FutureDateRejected()

        text = (content or "").strip()
        if not text:
            raise EmptyContent()

        logger.info(f"[Lifecycle] 새 일기: {EntryState.DRAFT.value} → {EntryState.SUBMITTING.value} ({resolved})")
        try:
            result = await self.requestor.analyze(
                text,
                AnalysisOptions(is_reanalyze=False, target_date=resolved),
                session
            )
        except DiaryAppError as e:
            logger.warning(f"[Lifecycle] 새 일기: → {EntryState.FAILED.value} - {e.message}")
            raise

        diary_id = result.diary.id if result.diary else result.diary_id
        logger.info(f"[Lifecycle] 새 일기: → {EntryState.PERSISTED.value} ({diary_id})")
        return DiaryOperationResult(
            state=EntryState.PERSISTED,
            message=result.message or "일기가 성공적으로 저장되었습니다!",
            # 함수가 id를 돌려주지 않으면 목록으로 이동
            redirect_to=f"/diary/{diary_id}" if diary_id else "/diary",
            diary_id=diary_id,
            diary=result.diary,
        )

    # ============================================
    # 재분석
    # ============================================

    async def _refresh_feedback(self, db, session: SessionSchema, diary_id: str, content: str) -> DiarySchema:
        result = await self.requestor.analyze(
            content,
            AnalysisOptions(is_reanalyze=True, diary_id=diary_id),
            session
        )
        if not result.feedback:
            raise AnalysisRejected("감정 분석 결과가 비어 있습니다.")
        return await db.update_diary(diary_id, session.user_id, {"ai_feedback": result.feedback})

    async def reanalyze(
        self,
        session: SessionSchema,
        diary_id: str,
        content: Optional[str] = None
    ) -> DiaryOperationResult:
        """감정 재분석 - ai_feedback만 교체 (created_at 유지)"""
        owner_id = session.user_id
        generation = self._begin(owner_id, diary_id, EntryState.REANALYZING)
        try:
            db = self.db.scoped(session.access_token)
            diary = await db.get_diary(diary_id, owner_id)
            text = (content if content is not None else diary.content).strip()
            if not text:
                raise EmptyContent()
            diary = await self._refresh_feedback(db, session, diary_id, text)
        except DiaryAppError as e:
            self._fail(owner_id, diary_id, e, generation)
            raise

        self._transition(owner_id, diary_id, EntryState.PERSISTED, generation)
        return DiaryOperationResult(
            state=EntryState.PERSISTED,
            message="감정 분석이 완료되었습니다!",
            redirect_to=f"/diary/{diary_id}",
            diary_id=diary_id,
            diary=diary,
        )

    # ============================================
    # 수정
    # ============================================

    async def edit(self, session: SessionSchema, diary_id: str, new_content: str) -> DiaryOperationResult:
        """일기 수정 - 내용 저장 후 감정 분석을 다시 수행"""
        text = (new_content or "").strip()
        if not text:
            raise EmptyContent()

        owner_id = session.user_id
        generation = self._begin(owner_id, diary_id, EntryState.EDITING)
        try:
            db = self.db.scoped(session.access_token)
            await db.get_diary(diary_id, owner_id)
            self._transition(owner_id, diary_id, EntryState.SUBMITTING, generation)
            await db.update_diary(diary_id, owner_id, {"content": text})
            diary = await self._refresh_feedback(db, session, diary_id, text)
        except DiaryAppError as e:
            self._fail(owner_id, diary_id, e, generation)
            raise

        self._transition(owner_id, diary_id, EntryState.PERSISTED, generation)
        return DiaryOperationResult(
            state=EntryState.PERSISTED,
            message="일기가 성공적으로 수정되었습니다!",
            redirect_to=f"/diary/{diary_id}",
            diary_id=diary_id,
            diary=diary,
        )

    # ============================================
    # 삭제
    # ============================================

    async def delete(self, session: SessionSchema, diary_id: str, confirmed: bool = False) -> DiaryOperationResult:
        """일기 삭제 - 사용자 확인 필수, 삭제 후 복구 불가"""
        if not confirmed:
            raise ConfirmationRequired()

        owner_id = session.user_id
        generation = self._begin(owner_id, diary_id, EntryState.DELETING)
        try:
            db = self.db.scoped(session.access_token)
            await db.get_diary(diary_id, owner_id)
            await db.delete_diary(diary_id, owner_id)
        except DiaryAppError as e:
            self._fail(owner_id, diary_id, e, generation)
            raise

        self._transition(owner_id, diary_id, EntryState.DELETED, generation)
        return DiaryOperationResult(
            state=EntryState.DELETED,
            message="일기가 삭제되었습니다.",
            redirect_to="/diary",
            diary_id=diary_id,
        )
