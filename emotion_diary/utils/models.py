from langchain_google_vertexai import ChatVertexAI
from ..config.config import (
    FEEDBACK_MODEL_NAME,
    FEEDBACK_TEMPERATURE,
    FEEDBACK_MAX_TOKENS,
)


# Vertex AI 모델 설정 (credentials는 환경변수에서 자동 로드)
FEEDBACK_MODEL_CONFIG = {
    "model_name": FEEDBACK_MODEL_NAME,
    "temperature": FEEDBACK_TEMPERATURE,
    "max_output_tokens": FEEDBACK_MAX_TOKENS,
    # timeout 미설정 - 재시도/타임아웃은 전송 계층 기본값
}


# =============================================================================
# LLM 인스턴스 캐싱 (싱글톤 패턴)
# =============================================================================

_cached_feedback_llm = None


def get_feedback_llm() -> ChatVertexAI:
    """감정 피드백용 LLM 인스턴스 반환 (캐시됨)"""
    global _cached_feedback_llm
    if _cached_feedback_llm is None:
        _cached_feedback_llm = ChatVertexAI(**FEEDBACK_MODEL_CONFIG)
    return _cached_feedback_llm
