"""공통 테스트 픽스처 - 모두 모킹 모드(Supabase/LLM 없이)로 실행"""
import asyncio
from datetime import date

import pytest

from emotion_diary.auth import SessionGatekeeper
from emotion_diary.database import Database
from emotion_diary.service.diary import DiaryLifecycleController
from emotion_diary.service.feedback import build_feedback_requestor

# 2024-03-15 (금)
TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def mock_mode_env(monkeypatch):
    """.env 값이 있어도 테스트는 항상 모킹 모드"""
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_KEY",
        "FEEDBACK_BACKEND",
        "FEEDBACK_MODE",
        "GOOGLE_CLOUD_PROJECT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db():
    return Database()


@pytest.fixture
def gatekeeper(db):
    return SessionGatekeeper(db)


@pytest.fixture
def session(gatekeeper):
    return asyncio.run(gatekeeper.sign_up("diary@example.com", "secret123"))


@pytest.fixture
def other_session(gatekeeper):
    return asyncio.run(gatekeeper.sign_up("other@example.com", "secret456"))


@pytest.fixture
def controller(db):
    requestor = build_feedback_requestor(db, backend="local", mode="canned")
    return DiaryLifecycleController(db, requestor, today=lambda: TODAY)
