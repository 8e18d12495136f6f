"""
In-memory SleepStore

Used by the test suite and by STORAGE_BACKEND=memory for local runs.
Records are NOT persisted across restarts.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from sleep_api.db.store import SleepStore
from sleep_api.models.sleep import SleepRecord

logger = logging.getLogger(__name__)


class InMemorySleepStore(SleepStore):
    """Dict-backed store; iteration order is insertion order"""

    def __init__(self):
        self._records: Dict[UUID, SleepRecord] = {}
        logger.warning("InMemorySleepStore initialized - records are NOT persisted")

    async def ensure_schema(self) -> None:
        pass

    async def create(self, user_id: int, hours: float) -> SleepRecord:
        now = datetime.now(timezone.utc)
        record = SleepRecord(
            id=uuid4(),
            user_id=user_id,
            hours=hours,
            created_at=now,
            updated_at=now
        )
        self._records[record.id] = record
        return record

    async def find_by_user(self, user_id: int) -> List[SleepRecord]:
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(
            (r for r in self._records.values() if r.user_id == user_id),
            key=lambda r: r.created_at
        )

    async def delete_by_id(self, record_id: UUID) -> Optional[SleepRecord]:
        return self._records.pop(record_id, None)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._records)
