import uuid
import logging
from supabase import create_client, Client
from typing import Optional, Dict, Any, List
from datetime import date

from ..config import DIARY_TABLE, get_kst_now
from ..config.config import get_supabase_settings
from ..core.exceptions import NotFound, StoreError
from .schemas import DiarySchema

logger = logging.getLogger(__name__)

# 수정 가능한 컬럼 (id, user_id, created_at은 생성 후 불변)
MUTABLE_FIELDS = ("content", "ai_feedback", "target_date")


def _is_no_rows_error(error: Exception) -> bool:
    """PostgREST 단건 조회 결과 없음 (PGRST116)"""
    return "PGRST116" in str(error)


def _store_error(error: Exception) -> StoreError:
    """백엔드 예외 → StoreError (메시지가 있으면 그대로 전달)"""
    message = getattr(error, "message", None) or str(error) or None
    return StoreError(message)


class Database:
    def __init__(self, supabase_client: Optional[Client] = None):
        self.url, self.key = get_supabase_settings()

        # Supabase 클라이언트 설정
        if supabase_client is not None:
            self.supabase: Optional[Client] = supabase_client
        elif self.url and self.key:
            self.supabase = create_client(self.url, self.key)
            logger.info("✅ Supabase 클라이언트 초기화 성공")
        else:
            logger.warning("⚠️ Supabase 환경 변수가 설정되지 않았습니다. 모킹 모드로 실행됩니다.")
            self.supabase = None

        # 모킹 데이터 저장소 (실제 DB 없을 때 사용)
        self._mock_diaries: Dict[str, Dict[str, Any]] = {}
        self._mock_sequence: Dict[str, int] = {}

    @property
    def is_mock(self) -> bool:
        return self.supabase is None

    def create_scoped_client(self) -> Client:
        """요청 단위 인증용 클라이언트 생성 (세션이 다른 사용자와 섞이지 않도록)"""
        if not (self.url and self.key):
            raise StoreError("Supabase 환경변수가 설정되지 않았습니다.")
        return create_client(self.url, self.key)

    def scoped(self, access_token: Optional[str]) -> "Database":
        """요청자 JWT로 PostgREST를 호출하는 Database 반환 (RLS 적용)

        공유 클라이언트의 헤더는 건드리지 않고 요청마다 새 클라이언트를 만듭니다.
        모킹 모드, 토큰 없음, 접속 정보 없이 주입된 클라이언트면 자기 자신을 반환합니다.
        """
        if self.supabase is None or not access_token or not (self.url and self.key):
            return self

        client = self.create_scoped_client()
        client.postgrest.auth(access_token)
        return Database(supabase_client=client)

    # ============================================
    # 모킹 헬퍼
    # ============================================

    def _mock_rows_for(self, owner_id: str) -> List[Dict[str, Any]]:
        rows = [row for row in self._mock_diaries.values() if row["user_id"] == owner_id]
        # created_at DESC (같은 시각이면 나중에 저장된 것이 먼저)
        rows.sort(key=lambda row: (row["created_at"], self._mock_sequence[row["id"]]), reverse=True)
        return rows

    # ============================================
    # 일기 CRUD
    # ============================================

    async def create_diary(self, owner_id: str, content: str, target_date: date) -> DiarySchema:
        """일기 생성 - id, created_at은 저장소가 부여"""
        if not self.supabase:
            now = get_kst_now().isoformat()
            row = {
                "id": str(uuid.uuid4()),
                "user_id": owner_id,
                "content": content,
                "ai_feedback": None,
                "target_date": target_date.isoformat(),
                "created_at": now,
                "updated_at": now,
            }
            self._mock_diaries[row["id"]] = row
            self._mock_sequence[row["id"]] = len(self._mock_sequence)
            return DiarySchema(**row)

        try:
            response = self.supabase.table(DIARY_TABLE).insert({
                "user_id": owner_id,
                "content": content,
                "target_date": target_date.isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"❌ [DiaryStore] 일기 생성 오류: {e}")
            raise _store_error(e) from e

        if not response.data:
            raise StoreError("일기 저장에 실패했습니다.")
        logger.info(f"✨ [DiaryStore] 일기 생성: {response.data[0].get('id')} ({target_date})")
        return DiarySchema(**response.data[0])

    async def get_diary(self, diary_id: str, owner_id: str) -> DiarySchema:
        """일기 단건 조회 (본인 일기만) - 없으면 NotFound"""
        if not self.supabase:
            row = self._mock_diaries.get(diary_id)
            if not row or row["user_id"] != owner_id:
                raise NotFound()
            return DiarySchema(**row)

        try:
            response = self.supabase.table(DIARY_TABLE) \
                .select("*") \
                .eq("id", diary_id) \
                .eq("user_id", owner_id) \
                .single() \
                .execute()
        except Exception as e:
            if _is_no_rows_error(e):  # 데이터 없음
                raise NotFound() from e
            logger.error(f"❌ [DiaryStore] 일기 조회 오류: {e}")
            raise _store_error(e) from e

        if not response.data:
            raise NotFound()
        return DiarySchema(**response.data)

    async def list_diaries(self, owner_id: str) -> List[DiarySchema]:
        """사용자의 전체 일기 (created_at DESC)"""
        if not self.supabase:
            return [DiarySchema(**row) for row in self._mock_rows_for(owner_id)]

        try:
            response = self.supabase.table(DIARY_TABLE) \
                .select("*") \
                .eq("user_id", owner_id) \
                .order("created_at", desc=True) \
                .execute()
        except Exception as e:
            logger.error(f"❌ [DiaryStore] 일기 목록 조회 오류: {e}")
            raise _store_error(e) from e

        return [DiarySchema(**row) for row in (response.data or [])]

    async def list_diaries_by_date(self, owner_id: str, target_date: date) -> List[DiarySchema]:
        """특정 날짜의 일기 (최신순)"""
        if not self.supabase:
            day = target_date.isoformat()
            return [
                DiarySchema(**row)
                for row in self._mock_rows_for(owner_id)
                if row.get("target_date") == day
            ]

        try:
            response = self.supabase.table(DIARY_TABLE) \
                .select("*") \
                .eq("user_id", owner_id) \
                .eq("target_date", target_date.isoformat()) \
                .order("created_at", desc=True) \
                .execute()
        except Exception as e:
            logger.error(f"❌ [DiaryStore] 날짜별 일기 조회 오류: {e}")
            raise _store_error(e) from e

        return [DiarySchema(**row) for row in (response.data or [])]

    async def update_diary(self, diary_id: str, owner_id: str, patch: Dict[str, Any]) -> DiarySchema:
        """일기 수정 - updated_at 자동 갱신"""
        invalid = [key for key in patch if key not in MUTABLE_FIELDS]
        if invalid:
            raise StoreError(f"수정할 수 없는 필드입니다: {', '.join(invalid)}")

        data = dict(patch)
        if isinstance(data.get("target_date"), date):
            data["target_date"] = data["target_date"].isoformat()
        data["updated_at"] = get_kst_now().isoformat()

        if not self.supabase:
            row = self._mock_diaries.get(diary_id)
            if not row or row["user_id"] != owner_id:
                raise NotFound()
            row.update(data)
            return DiarySchema(**row)

        try:
            logger.info(f"🔄 [DiaryStore] 일기 수정: {diary_id}, 필드: {list(patch.keys())}")
            response = self.supabase.table(DIARY_TABLE) \
                .update(data) \
                .eq("id", diary_id) \
                .eq("user_id", owner_id) \
                .execute()
        except Exception as e:
            logger.error(f"❌ [DiaryStore] 일기 수정 오류: {e}")
            raise _store_error(e) from e

        if not response.data:
            raise NotFound()
        return DiarySchema(**response.data[0])

    async def delete_diary(self, diary_id: str, owner_id: str) -> None:
        """일기 삭제 (하드 삭제, 복구 불가)"""
        if not self.supabase:
            row = self._mock_diaries.get(diary_id)
            if row and row["user_id"] == owner_id:
                del self._mock_diaries[diary_id]
                del self._mock_sequence[diary_id]
            return

        try:
            self.supabase.table(DIARY_TABLE) \
                .delete() \
                .eq("id", diary_id) \
                .eq("user_id", owner_id) \
                .execute()
            logger.info(f"🗑️ [DiaryStore] 일기 삭제: {diary_id}")
        except Exception as e:
            logger.error(f"❌ [DiaryStore] 일기 삭제 오류: {e}")
            raise _store_error(e) from e

    async def test_connection(self) -> bool:
        """데이터베이스 연결 테스트"""
        if not self.supabase:
            logger.info("⚠️ 모킹 모드에서 실행 중입니다.")
            return True

        try:
            # diaries 테이블에 간단한 쿼리 수행
            self.supabase.table(DIARY_TABLE).select("id").limit(1).execute()
            logger.info("✅ Supabase 연결 성공!")
            return True
        except Exception as e:
            logger.error(f"❌ Supabase 연결 실패: {e}")
            return False
