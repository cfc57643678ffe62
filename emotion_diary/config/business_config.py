"""애플리케이션 전역 상수 정의

이 파일에 정의된 상수를 변경하면 전체 시스템에 반영됩니다.
"""

# =============================================================================
# 저장소 관련 상수
# =============================================================================

# 일기 테이블 이름
DIARY_TABLE = "diaries"
"""Supabase 일기 테이블
- 컬럼: id, user_id, content, ai_feedback, target_date, created_at, updated_at
- 변경 시 영향: database.py
"""

# 피드백 엣지 함수 이름
FEEDBACK_FUNCTION_NAME = "clever-endpoint"
"""일기 저장 + 감정 분석을 한 번에 수행하는 Supabase Edge Function
- 변경 시 영향: requestor.py, main.py (/functions 라우트)
"""

# =============================================================================
# 계정 관련 상수
# =============================================================================

# 새 비밀번호 최소 길이
MIN_PASSWORD_LENGTH = 6
"""비밀번호 변경 시 새 비밀번호 최소 글자 수
- 변경 시 영향: session_gatekeeper.py
"""

# =============================================================================
# 달력 관련 상수
# =============================================================================

# 한 주의 시작 요일 (Python weekday 기준: 0=월 ... 6=일)
WEEK_START_WEEKDAY = 6
"""달력 첫 열의 요일 (일요일 시작)
- 변경 시 영향: projector.py (layout_month, WEEKDAY_HEADERS)
"""

# 달력 칸 미리보기 글자 수
CALENDAR_PREVIEW_LENGTH = 40
"""날짜 칸에 표시할 첫 번째 일기 미리보기 최대 길이
- 변경 시 영향: projector.py (project_month)
"""
