"""감정 분석 서비스"""

from .generator import (
    CANNED_FEEDBACKS,
    CANNED_REANALYZE_FEEDBACKS,
    create_feedback,
    generate_emotion_feedback,
    pick_canned_feedback,
)
from .function_handler import FeedbackFunctionHandler
from .requestor import (
    FeedbackRequestor,
    LocalFeedbackBackend,
    RemoteFeedbackBackend,
    build_feedback_requestor,
)

__all__ = [
    "CANNED_FEEDBACKS",
    "CANNED_REANALYZE_FEEDBACKS",
    "create_feedback",
    "generate_emotion_feedback",
    "pick_canned_feedback",
    "FeedbackFunctionHandler",
    "FeedbackRequestor",
    "LocalFeedbackBackend",
    "RemoteFeedbackBackend",
    "build_feedback_requestor",
]
