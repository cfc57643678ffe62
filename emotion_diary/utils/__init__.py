"""Utilities module"""

from .schemas import (
    AnalysisOptions,
    AnalysisResult,
    FeedbackFunctionRequest,
    FeedbackFunctionResponse,
    EmotionFeedbackInput,
    EmotionFeedbackOutput,
)
from .utils import parse_date, parse_month, format_joined_on

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "FeedbackFunctionRequest",
    "FeedbackFunctionResponse",
    "EmotionFeedbackInput",
    "EmotionFeedbackOutput",
    "parse_date",
    "parse_month",
    "format_joined_on",
]
