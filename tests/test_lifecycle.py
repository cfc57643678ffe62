import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from emotion_diary.auth import AuthEvent
from emotion_diary.core.exceptions import (
    AnalysisError,
    ConfirmationRequired,
    EmptyContent,
    FutureDateRejected,
    InvalidDate,
    NotFound,
    OperationInProgress,
)
from emotion_diary.service.diary import DiaryLifecycleController, EntryState
from emotion_diary.service.feedback import CANNED_FEEDBACKS, CANNED_REANALYZE_FEEDBACKS

from conftest import TODAY


# =============================================================================
# 작성 전 검증 (네트워크 호출 없음)
# =============================================================================

def _isolated_controller():
    db = MagicMock()
    requestor = MagicMock()
    requestor.analyze = AsyncMock()
    return DiaryLifecycleController(db, requestor, today=lambda: TODAY), db, requestor


def test_future_date_is_rejected_before_any_call(session) -> None:
    controller, db, requestor = _isolated_controller()

    with pytest.raises(FutureDateRejected):
        asyncio.run(controller.submit_new(session, "내일 일기", TODAY + timedelta(days=1)))

    requestor.analyze.assert_not_awaited()
    assert db.method_calls == []


def test_future_date_wins_over_empty_content(session) -> None:
    controller, _, requestor = _isolated_controller()

    with pytest.raises(FutureDateRejected):
        asyncio.run(controller.submit_new(session, "   ", "2024-03-16"))

    requestor.analyze.assert_not_awaited()


def test_blank_content_is_rejected(session) -> None:
    controller, _, requestor = _isolated_controller()

    with pytest.raises(EmptyContent):
        asyncio.run(controller.submit_new(session, "  \n\t ", TODAY))

    requestor.analyze.assert_not_awaited()


def test_invalid_date_string_is_rejected(session) -> None:
    controller, _, requestor = _isolated_controller()

    with pytest.raises(InvalidDate):
        asyncio.run(controller.submit_new(session, "일기", "2024/03/01"))

    requestor.analyze.assert_not_awaited()


def test_today_is_read_at_submission_time(session) -> None:
    days = iter([TODAY, TODAY + timedelta(days=1)])
    controller, _, requestor = _isolated_controller()
    controller.today = lambda: next(days)

    # 첫 제출 시점의 오늘(3/15) 기준으로는 3/16이 미래
    with pytest.raises(FutureDateRejected):
        asyncio.run(controller.submit_new(session, "일기", "2024-03-16"))

    # 자정이 지난 뒤(3/16) 다시 제출하면 허용
    requestor.analyze.return_value = MagicMock(diary=None, diary_id="d-1", message=None)
    result = asyncio.run(controller.submit_new(session, "일기", "2024-03-16"))
    assert result.redirect_to == "/diary/d-1"


def test_missing_diary_id_redirects_to_list(session) -> None:
    controller, _, requestor = _isolated_controller()
    requestor.analyze.return_value = MagicMock(diary=None, diary_id=None, message=None)

    result = asyncio.run(controller.submit_new(session, "일기", TODAY))

    assert result.redirect_to == "/diary"
    assert result.message == "일기가 성공적으로 저장되었습니다!"


# =============================================================================
# 작성 → 재분석 → 수정 → 삭제
# =============================================================================

def test_submit_new_saves_entry_with_feedback(controller, db, session) -> None:
    result = asyncio.run(controller.submit_new(session, "  오늘은 산책을 했다.  "))

    assert result.state == EntryState.PERSISTED
    assert result.redirect_to == f"/diary/{result.diary_id}"

    stored = asyncio.run(db.get_diary(result.diary_id, session.user_id))
    assert stored.content == "오늘은 산책을 했다."
    assert stored.target_date == TODAY
    assert stored.ai_feedback in CANNED_FEEDBACKS


def test_submit_new_for_past_date(controller, db, session) -> None:
    result = asyncio.run(controller.submit_new(session, "hello", "2024-03-01"))

    same_day = asyncio.run(db.list_diaries_by_date(session.user_id, TODAY.replace(day=1)))
    assert [d.id for d in same_day] == [result.diary_id]


def test_reanalyze_replaces_feedback_only(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "오늘은 비가 왔다.", TODAY))
    before = asyncio.run(db.get_diary(created.diary_id, session.user_id))

    result = asyncio.run(controller.reanalyze(session, created.diary_id))

    assert result.message == "감정 분석이 완료되었습니다!"
    assert result.diary.ai_feedback in CANNED_REANALYZE_FEEDBACKS
    assert result.diary.created_at == before.created_at
    assert result.diary.content == before.content
    assert controller.state_of(session.user_id, created.diary_id) is None


def test_edit_saves_content_and_refreshes_feedback(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "처음 쓴 내용", TODAY))

    result = asyncio.run(controller.edit(session, created.diary_id, "  고친 내용 "))

    stored = asyncio.run(db.get_diary(created.diary_id, session.user_id))
    assert result.message == "일기가 성공적으로 수정되었습니다!"
    assert result.redirect_to == f"/diary/{created.diary_id}"
    assert stored.content == "고친 내용"
    assert stored.ai_feedback in CANNED_REANALYZE_FEEDBACKS


def test_edit_with_blank_content_changes_nothing(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "원래 내용", TODAY))

    with pytest.raises(EmptyContent):
        asyncio.run(controller.edit(session, created.diary_id, "   "))

    assert asyncio.run(db.get_diary(created.diary_id, session.user_id)).content == "원래 내용"


def test_edit_of_other_users_entry_is_not_found(controller, session, other_session) -> None:
    created = asyncio.run(controller.submit_new(session, "내 일기", TODAY))

    with pytest.raises(NotFound):
        asyncio.run(controller.edit(other_session, created.diary_id, "덮어쓰기"))

    assert controller.state_of(other_session.user_id, created.diary_id) is None


def test_delete_requires_confirmation(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "지울까 말까", TODAY))

    with pytest.raises(ConfirmationRequired):
        asyncio.run(controller.delete(session, created.diary_id))

    assert asyncio.run(db.get_diary(created.diary_id, session.user_id)).content == "지울까 말까"


def test_confirmed_delete_removes_entry(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "지울 일기", TODAY))

    result = asyncio.run(controller.delete(session, created.diary_id, confirmed=True))

    assert result.state == EntryState.DELETED
    assert result.redirect_to == "/diary"
    # 삭제 완료 후 상태를 남기지 않음
    assert controller.state_of(session.user_id, created.diary_id) is None
    assert controller._states == {}
    with pytest.raises(NotFound):
        asyncio.run(db.get_diary(created.diary_id, session.user_id))
    # 삭제된 일기는 더 이상 수정/재분석 불가
    with pytest.raises(NotFound):
        asyncio.run(controller.reanalyze(session, created.diary_id))


# =============================================================================
# 동시 요청 / 실패 / 로그아웃
# =============================================================================

class _GatedRequestor:
    """analyze 호출을 event가 열릴 때까지 붙잡아 두는 requestor"""

    def __init__(self, inner):
        self.inner = inner
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def analyze(self, content, options, session):
        self.started.set()
        await self.release.wait()
        return await self.inner.analyze(content, options, session)


def test_second_request_while_busy_is_rejected(controller, session) -> None:
    created = asyncio.run(controller.submit_new(session, "바쁜 일기", TODAY))

    async def scenario():
        gated = _GatedRequestor(controller.requestor)
        controller.requestor = gated
        first = asyncio.create_task(controller.reanalyze(session, created.diary_id))
        await gated.started.wait()

        assert controller.state_of(session.user_id, created.diary_id) == EntryState.REANALYZING
        with pytest.raises(OperationInProgress):
            await controller.edit(session, created.diary_id, "동시에 수정")

        gated.release.set()
        return await first

    result = asyncio.run(scenario())

    assert result.state == EntryState.PERSISTED
    assert controller.state_of(session.user_id, created.diary_id) is None


def test_failed_analysis_can_be_retried(controller, session) -> None:
    created = asyncio.run(controller.submit_new(session, "다시 해볼 일기", TODAY))
    real_requestor = controller.requestor
    controller.requestor = MagicMock()
    controller.requestor.analyze = AsyncMock(side_effect=AnalysisError("network down"))

    with pytest.raises(AnalysisError):
        asyncio.run(controller.reanalyze(session, created.diary_id))
    assert controller.state_of(session.user_id, created.diary_id) == EntryState.FAILED

    controller.requestor = real_requestor
    result = asyncio.run(controller.reanalyze(session, created.diary_id))
    assert result.state == EntryState.PERSISTED


def test_sign_out_clears_states_and_ignores_late_results(controller, session) -> None:
    created = asyncio.run(controller.submit_new(session, "로그아웃 전 일기", TODAY))

    async def sign_out_then_fail(content, options, sess):
        # 요청 처리 중에 로그아웃 발생
        controller.handle_auth_event(AuthEvent.SIGNED_OUT, sess)
        raise AnalysisError()

    controller.requestor = MagicMock()
    controller.requestor.analyze = AsyncMock(side_effect=sign_out_then_fail)

    with pytest.raises(AnalysisError):
        asyncio.run(controller.reanalyze(session, created.diary_id))

    # 실패 결과가 새 세대에 기록되지 않음
    assert controller.state_of(session.user_id, created.diary_id) is None


def test_sign_out_only_affects_that_user(controller, session, other_session) -> None:
    controller._states[(session.user_id, "d-1")] = EntryState.FAILED
    controller._states[(other_session.user_id, "d-2")] = EntryState.FAILED

    controller.handle_auth_event(AuthEvent.SIGNED_OUT, session)

    assert controller.state_of(session.user_id, "d-1") is None
    assert controller.state_of(other_session.user_id, "d-2") == EntryState.FAILED


def test_sign_in_event_is_ignored(controller, session) -> None:
    controller._states[(session.user_id, "d-1")] = EntryState.FAILED

    controller.handle_auth_event(AuthEvent.SIGNED_IN, session)

    assert controller.state_of(session.user_id, "d-1") == EntryState.FAILED


def test_edit_keeps_new_content_when_analysis_fails(controller, db, session) -> None:
    created = asyncio.run(controller.submit_new(session, "처음 쓴 내용", TODAY))
    before = asyncio.run(db.get_diary(created.diary_id, session.user_id))
    real_requestor = controller.requestor
    controller.requestor = MagicMock()
    controller.requestor.analyze = AsyncMock(side_effect=AnalysisError())

    with pytest.raises(AnalysisError):
        asyncio.run(controller.edit(session, created.diary_id, "고친 내용"))

    stored = asyncio.run(db.get_diary(created.diary_id, session.user_id))
    assert stored.content == "고친 내용"
    assert stored.ai_feedback == before.ai_feedback
    assert controller.state_of(session.user_id, created.diary_id) == EntryState.FAILED

    # 상세 화면에서 다시 분석
    controller.requestor = real_requestor
    result = asyncio.run(controller.reanalyze(session, created.diary_id))
    assert result.diary.content == "고친 내용"
    assert result.diary.ai_feedback in CANNED_REANALYZE_FEEDBACKS
    assert controller.state_of(session.user_id, created.diary_id) is None


def test_store_calls_run_with_callers_token(session) -> None:
    scoped_db = MagicMock()
    scoped_db.get_diary = AsyncMock()
    scoped_db.delete_diary = AsyncMock()
    db = MagicMock()
    db.scoped.return_value = scoped_db
    controller = DiaryLifecycleController(db, MagicMock(), today=lambda: TODAY)

    asyncio.run(controller.delete(session, "d-1", confirmed=True))

    db.scoped.assert_called_once_with(session.access_token)
    scoped_db.get_diary.assert_awaited_once_with("d-1", session.user_id)
    scoped_db.delete_diary.assert_awaited_once_with("d-1", session.user_id)
