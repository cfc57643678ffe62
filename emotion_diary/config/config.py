import os

# 감정 피드백 모델 설정 (Google Vertex AI)
# FEEDBACK_MODEL_NAME = "gpt-4.1-mini"  # OpenAI (backup)
FEEDBACK_MODEL_NAME = "gemini-2.5-flash-lite"
FEEDBACK_TEMPERATURE = 0.7
FEEDBACK_MAX_TOKENS = 400  # 한글 3~4문장 목표


# =============================================================================
# 실행 모드 설정 (환경변수)
# =============================================================================

def get_supabase_settings():
    """Supabase 접속 정보 반환 (url, key) - 없으면 (None, None)

    서버에서는 service role 키를 우선 사용하고, 없으면 anon 키를 사용합니다.
    """
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if url and key:
        return url, key
    return None, None


def get_feedback_backend() -> str:
    """피드백 요청 백엔드: "remote" (Edge Function) | "local" (프로세스 내 처리)"""
    backend = os.getenv("FEEDBACK_BACKEND")
    if backend in ("remote", "local"):
        return backend
    url, _ = get_supabase_settings()
    return "remote" if url else "local"


def get_feedback_mode() -> str:
    """피드백 생성 방식: "llm" (Vertex AI) | "canned" (고정 문구)"""
    mode = os.getenv("FEEDBACK_MODE")
    if mode in ("llm", "canned"):
        return mode
    return "llm" if os.getenv("GOOGLE_CLOUD_PROJECT") else "canned"
