"""일기 생명주기 서비스"""

from .lifecycle import (
    DiaryLifecycleController,
    DiaryOperationResult,
    EntryState,
)

__all__ = [
    "DiaryLifecycleController",
    "DiaryOperationResult",
    "EntryState",
]
