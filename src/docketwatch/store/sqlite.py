"""SQLite-backed docket store."""

import asyncio
import json
import logging
import os
import sqlite3
from contextlib import closing
from datetime import datetime
from typing import Any, Callable, TypeVar

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from docketwatch.core.exceptions import StoreUnavailableError
from docketwatch.core.models import ensure_utc
from docketwatch.core.utils import to_epoch_ms, utc_now
from docketwatch.ecfs.models import Docket, DocketInfo, DocketStatus, Filing, ProcessingStatus
from docketwatch.settings import (
    PLACEHOLDER_DOCKET_BUREAU,
    PLACEHOLDER_DOCKET_DESCRIPTION,
    PLACEHOLDER_DOCKET_TITLE,
)
from docketwatch.store.base import check_watch_allowed

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS dockets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    docket_number TEXT NOT NULL UNIQUE,
    title TEXT,
    bureau TEXT,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'unknown' CHECK(status IN ('active', 'closed', 'unknown')),
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS docket_subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    docket_id INTEGER NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at INTEGER NOT NULL,
    FOREIGN KEY (docket_id) REFERENCES dockets(id),
    UNIQUE(user_id, docket_id)
);

CREATE TABLE IF NOT EXISTS filings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fcc_filing_id TEXT NOT NULL UNIQUE,
    docket_id INTEGER NOT NULL,
    title TEXT,
    author TEXT,
    author_organization TEXT,
    filing_url TEXT,
    document_urls TEXT,
    filed_at INTEGER,
    fetched_at INTEGER NOT NULL,
    summary TEXT,
    summary_generated_at INTEGER,
    processing_status TEXT NOT NULL DEFAULT 'pending'
        CHECK(processing_status IN ('pending', 'processed', 'failed')),
    FOREIGN KEY (docket_id) REFERENCES dockets(id)
);

CREATE INDEX IF NOT EXISTS idx_filings_docket_filed_at ON filings(docket_id, filed_at);
CREATE INDEX IF NOT EXISTS idx_subscriptions_active ON docket_subscriptions(is_active, docket_id);
"""


def _row_to_docket(row: sqlite3.Row) -> Docket:
    return Docket(
        id=row["id"],
        docket_number=row["docket_number"],
        title=row["title"],
        bureau=row["bureau"],
        description=row["description"],
        status=row["status"],
        created_at=row["created_at"],
    )


def _row_to_filing(row: sqlite3.Row) -> Filing:
    return Filing(
        id=row["id"],
        fcc_filing_id=row["fcc_filing_id"],
        docket_id=row["docket_id"],
        title=row["title"],
        author=row["author"],
        author_organization=row["author_organization"],
        filing_url=row["filing_url"],
        document_urls=json.loads(row["document_urls"] or "[]"),
        filed_at=row["filed_at"],
        fetched_at=row["fetched_at"],
        summary=row["summary"],
        summary_generated_at=row["summary_generated_at"],
        processing_status=row["processing_status"],
    )


class SqliteDocketStore:
    """Docket store on a local SQLite file.

    Each operation opens its own short-lived connection inside a worker thread
    (``asyncio.to_thread``) so the event loop is never blocked by disk I/O.
    """

    def __init__(self, path: str, connect_timeout: float = 10.0):
        self.path = path
        self.connect_timeout = connect_timeout

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type(sqlite3.OperationalError),
        reraise=True,
    )
    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self.path)
        if directory and self.path != ":memory:":
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=self.connect_timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _call(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open docket store at {self.path}: {e}") from e

        with closing(conn):
            with conn:
                return fn(conn, *args)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(self._call, fn, *args)

    async def initialize(self) -> None:
        await self._run(lambda conn: conn.executescript(SCHEMA))
        logger.debug(f"Docket store schema ready at {self.path}")

    async def list_active_dockets(self) -> list[Docket]:
        def query(conn):
            rows = conn.execute(
                """
                SELECT DISTINCT d.* FROM dockets d
                JOIN docket_subscriptions s ON d.id = s.docket_id
                WHERE s.is_active = 1
                ORDER BY d.id
                """
            ).fetchall()
            return [_row_to_docket(row) for row in rows]

        return await self._run(query)

    async def get_latest_filed_at(self, docket_number: str) -> datetime | None:
        def query(conn):
            row = conn.execute(
                """
                SELECT MAX(f.filed_at) AS latest FROM filings f
                JOIN dockets d ON f.docket_id = d.id
                WHERE d.docket_number = ?
                """,
                (docket_number,),
            ).fetchone()
            return row["latest"] if row else None

        return ensure_utc(await self._run(query))

    async def get_filing(self, fcc_filing_id: str) -> Filing | None:
        def query(conn):
            row = conn.execute(
                "SELECT * FROM filings WHERE fcc_filing_id = ?", (fcc_filing_id,)
            ).fetchone()
            return _row_to_filing(row) if row else None

        return await self._run(query)

    async def insert_filing(self, filing: Filing) -> Filing:
        def write(conn):
            conn.execute(
                """
                INSERT INTO filings (
                    fcc_filing_id, docket_id, title, author, author_organization,
                    filing_url, document_urls, filed_at, fetched_at, summary,
                    summary_generated_at, processing_status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(fcc_filing_id) DO NOTHING
                """,
                (
                    filing.fcc_filing_id,
                    filing.docket_id,
                    filing.title,
                    filing.author,
                    filing.author_organization,
                    filing.filing_url,
                    json.dumps(filing.document_urls),
                    to_epoch_ms(filing.filed_at),
                    to_epoch_ms(filing.fetched_at),
                    filing.summary,
                    to_epoch_ms(filing.summary_generated_at),
                    filing.processing_status.value,
                ),
            )
            row = conn.execute(
                "SELECT * FROM filings WHERE fcc_filing_id = ?", (filing.fcc_filing_id,)
            ).fetchone()
            return _row_to_filing(row)

        return await self._run(write)

    async def get_docket(self, docket_number: str) -> Docket | None:
        def query(conn):
            row = conn.execute(
                "SELECT * FROM dockets WHERE docket_number = ?", (docket_number,)
            ).fetchone()
            return _row_to_docket(row) if row else None

        return await self._run(query)

    async def list_dockets(self) -> list[Docket]:
        def query(conn):
            rows = conn.execute("SELECT * FROM dockets ORDER BY created_at DESC, id DESC").fetchall()
            return [_row_to_docket(row) for row in rows]

        return await self._run(query)

    async def upsert_docket(self, info: DocketInfo) -> Docket:
        def write(conn):
            conn.execute(
                """
                INSERT INTO dockets (docket_number, title, bureau, description, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(docket_number) DO UPDATE SET
                    title = excluded.title,
                    bureau = excluded.bureau,
                    description = excluded.description,
                    status = excluded.status
                """,
                (
                    info.docket_number,
                    info.title,
                    info.bureau,
                    info.description,
                    info.status.value,
                    to_epoch_ms(utc_now()),
                ),
            )
            row = conn.execute(
                "SELECT * FROM dockets WHERE docket_number = ?", (info.docket_number,)
            ).fetchone()
            return _row_to_docket(row)

        return await self._run(write)

    async def watch_docket(self, docket_number: str, user_id: str, tier: str = "free") -> Docket:
        docket_number = docket_number.strip()

        def write(conn):
            active_count = conn.execute(
                "SELECT COUNT(*) FROM docket_subscriptions WHERE user_id = ? AND is_active = 1",
                (user_id,),
            ).fetchone()[0]
            already_active = conn.execute(
                """
                SELECT 1 FROM docket_subscriptions s
                JOIN dockets d ON s.docket_id = d.id
                WHERE s.user_id = ? AND d.docket_number = ? AND s.is_active = 1
                """,
                (user_id, docket_number),
            ).fetchone()
            check_watch_allowed(docket_number, user_id, tier, active_count, bool(already_active))

            now = to_epoch_ms(utc_now())
            conn.execute(
                """
                INSERT INTO dockets (docket_number, title, bureau, description, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(docket_number) DO NOTHING
                """,
                (
                    docket_number,
                    PLACEHOLDER_DOCKET_TITLE,
                    PLACEHOLDER_DOCKET_BUREAU,
                    PLACEHOLDER_DOCKET_DESCRIPTION,
                    DocketStatus.UNKNOWN.value,
                    now,
                ),
            )
            row = conn.execute(
                "SELECT * FROM dockets WHERE docket_number = ?", (docket_number,)
            ).fetchone()
            conn.execute(
                """
                INSERT INTO docket_subscriptions (user_id, docket_id, is_active, created_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(user_id, docket_id) DO UPDATE SET is_active = 1
                """,
                (user_id, row["id"], now),
            )
            return _row_to_docket(row)

        return await self._run(write)

    async def unwatch_docket(self, docket_number: str, user_id: str) -> bool:
        def write(conn):
            cursor = conn.execute(
                """
                UPDATE docket_subscriptions SET is_active = 0
                WHERE user_id = ? AND is_active = 1
                  AND docket_id = (SELECT id FROM dockets WHERE docket_number = ?)
                """,
                (user_id, docket_number.strip()),
            )
            return cursor.rowcount > 0

        return await self._run(write)

    async def get_stats(self) -> dict[str, Any]:
        def query(conn):
            dockets = conn.execute("SELECT COUNT(*) FROM dockets").fetchone()[0]
            subscriptions = conn.execute(
                "SELECT COUNT(*) FROM docket_subscriptions WHERE is_active = 1"
            ).fetchone()[0]
            by_status = {status.value: 0 for status in ProcessingStatus}
            for row in conn.execute(
                "SELECT processing_status, COUNT(*) AS count FROM filings GROUP BY processing_status"
            ):
                by_status[row["processing_status"]] = row["count"]
            return {
                "backend": "sqlite",
                "dockets": dockets,
                "active_subscriptions": subscriptions,
                "filings": sum(by_status.values()),
                "filings_by_status": by_status,
            }

        return await self._run(query)
