"""Sleep record storage: the store contract and its PostgreSQL implementation"""
import asyncio
import logging
from typing import List, Optional
from uuid import UUID, uuid4

from sleep_api.db.connection import Database
from sleep_api.models.sleep import SleepRecord

logger = logging.getLogger(__name__)


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS sleep_records (
        id UUID PRIMARY KEY,
        user_id BIGINT NOT NULL,
        hours DOUBLE PRECISION NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sleep_records_user_created
        ON sleep_records (user_id, created_at)
    """,
)


class SleepStore:
    """
    Persistence contract the service relies on.

    Implementations assign ids and timestamps themselves; callers only
    supply user_id and hours.
    """

    async def ensure_schema(self) -> None:
        """Create backing structures if missing (idempotent)"""
        raise NotImplementedError

    async def create(self, user_id: int, hours: float) -> SleepRecord:
        raise NotImplementedError

    async def find_by_user(self, user_id: int) -> List[SleepRecord]:
        """All records for user_id, oldest created_at first"""
        raise NotImplementedError

    async def delete_by_id(self, record_id: UUID) -> Optional[SleepRecord]:
        """Delete one record, returning it, or None if it did not exist"""
        raise NotImplementedError

    async def ping(self) -> bool:
        """True when the backing storage answers"""
        raise NotImplementedError


class PostgresSleepStore(SleepStore):
    """SleepStore backed by the sleep_records table"""

    def __init__(self, database: Database):
        self.db = database
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def ensure_schema(self) -> None:
        async with self.db.connection() as conn:
            async with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    await cur.execute(statement)
            await conn.commit()
        self._schema_ready = True
        logger.info("sleep_records table ready")

    async def _ensure_schema_once(self) -> None:
        """Create the table before the first query; retried until it succeeds"""
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                await self.ensure_schema()

    async def create(self, user_id: int, hours: float) -> SleepRecord:
        await self._ensure_schema_once()
        async with self.db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO sleep_records (id, user_id, hours)
                    VALUES (%s, %s, %s)
                    RETURNING id, user_id, hours, created_at, updated_at
                    """,
                    (uuid4(), user_id, hours)
                )
                row = await cur.fetchone()
            await conn.commit()

        return SleepRecord.model_validate(row)

    async def find_by_user(self, user_id: int) -> List[SleepRecord]:
        await self._ensure_schema_once()
        async with self.db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT id, user_id, hours, created_at, updated_at
                    FROM sleep_records
                    WHERE user_id = %s
                    ORDER BY created_at ASC
                    """,
                    (user_id,)
                )
                rows = await cur.fetchall()

        return [SleepRecord.model_validate(row) for row in rows]

    async def delete_by_id(self, record_id: UUID) -> Optional[SleepRecord]:
        await self._ensure_schema_once()
        async with self.db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    DELETE FROM sleep_records
                    WHERE id = %s
                    RETURNING id, user_id, hours, created_at, updated_at
                    """,
                    (record_id,)
                )
                row = await cur.fetchone()
            await conn.commit()

        return SleepRecord.model_validate(row) if row else None

    async def ping(self) -> bool:
        async with self.db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
        return True
