"""
PostgreSQL repository adapter - Implements CodeStore protocol.

This module provides the PostgreSQL implementation of the domain's
code store port using psycopg3's async pool with raw SQL.

Write Serialization:
-------------------
Inserts and expiry sweeps share one asyncio.Lock per store instance, so a
sweep and an insert issued from the same process never interleave. Reads
(find_valid, count, ping) do not take the lock. Each statement runs in its
own transaction; nothing spans multiple rows except the sweep's single
DELETE.

Expiry:
-------
Rows carry created_at in epoch milliseconds and no expiry column. The
caller passes the cutoff, so the TTL lives in configuration only and the
database clock is never consulted.
"""

import asyncio
import logging
from pathlib import Path

import psycopg
from psycopg_pool import AsyncConnectionPool

from src.domain.exceptions import StorageError
from src.domain.ports import VerificationCode

logger = logging.getLogger(__name__)


class PostgresCodeStore:
    """
    Implements CodeStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        write_lock: asyncio.Lock | None = None,
        ping_timeout: float = 2.0,
    ) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
            write_lock: Lock shared by every store bound to the same pool
            ping_timeout: Seconds ping() waits for a pooled connection
        """
        self._pool = pool
        self._write_lock = write_lock or asyncio.Lock()
        self._ping_timeout = ping_timeout

    async def insert(self, record: VerificationCode) -> int:
        sql = """
            INSERT INTO verification_codes (company, username, email, code, created_at)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id
        """
        params = (record.company, record.username, record.email, record.code, record.created_at)

        try:
            async with self._write_lock, self._pool.connection() as conn:
                async with conn.cursor() as cursor:
                    await cursor.execute(sql, params)
                    row = await cursor.fetchone()
                await conn.commit()
        except psycopg.Error as e:
            logger.exception("Failed to insert verification code for %s", record.email)
            raise StorageError(f"insert failed: {e}") from e

        return row[0]

    async def find_valid(
        self, email: str, code: str, not_before: int
    ) -> VerificationCode | None:
        sql = """
            SELECT id, company, username, email, code, created_at
            FROM verification_codes
            WHERE email = %s AND code = %s AND created_at > %s
            LIMIT 1
        """

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(sql, (email, code, not_before))
                row = await cursor.fetchone()
        except psycopg.Error as e:
            logger.exception("Failed to look up verification code for %s", email)
            raise StorageError(f"lookup failed: {e}") from e

        if row is None:
            return None
        return VerificationCode(
            id=row[0],
            company=row[1],
            username=row[2],
            email=row[3],
            code=row[4],
            created_at=row[5],
        )

    async def purge_older_than(self, cutoff: int) -> int:
        sql = "DELETE FROM verification_codes WHERE created_at < %s"

        try:
            async with self._write_lock, self._pool.connection() as conn:
                async with conn.cursor() as cursor:
                    await cursor.execute(sql, (cutoff,))
                    deleted = cursor.rowcount
                await conn.commit()
        except psycopg.Error:
            # Best-effort cleanup: the next sweep covers anything left behind
            logger.exception("Failed to purge verification codes older than %s", cutoff)
            return 0

        return max(deleted, 0)

    async def count(self, email: str) -> int:
        sql = "SELECT COUNT(*) FROM verification_codes WHERE email = %s"

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(sql, (email,))
                row = await cursor.fetchone()
        except psycopg.Error as e:
            logger.exception("Failed to count verification codes for %s", email)
            raise StorageError(f"count failed: {e}") from e

        return row[0]

    async def ping(self) -> bool:
        # PoolTimeout subclasses psycopg.OperationalError
        try:
            async with self._pool.connection(timeout=self._ping_timeout) as conn:
                await conn.execute("SELECT 1")
        except psycopg.Error as e:
            logger.error("Database ping failed: %s", e)
            return False
        return True


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)
                await conn.commit()

            logger.info("Migration complete: %s", sql_file.name)
        except psycopg.Error as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
