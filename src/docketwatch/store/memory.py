"""In-process docket store used by tests and dry runs."""

import asyncio
from datetime import datetime
from typing import Any

from docketwatch.ecfs.models import Docket, DocketInfo, DocketStatus, Filing, ProcessingStatus
from docketwatch.settings import (
    PLACEHOLDER_DOCKET_BUREAU,
    PLACEHOLDER_DOCKET_DESCRIPTION,
    PLACEHOLDER_DOCKET_TITLE,
)
from docketwatch.store.base import check_watch_allowed


class InMemoryDocketStore:
    """Dict-backed store honouring the same uniqueness rules as the SQLite adapter."""

    def __init__(self):
        self.dockets: dict[str, Docket] = {}
        self.filings: dict[str, Filing] = {}
        # (user_id, docket_number) -> active flag
        self.subscriptions: dict[tuple[str, str], bool] = {}
        self._lock = asyncio.Lock()
        self._next_docket_id = 1
        self._next_filing_id = 1

    async def initialize(self) -> None:
        return None

    async def list_active_dockets(self) -> list[Docket]:
        active = {number for (_, number), is_active in self.subscriptions.items() if is_active}
        return sorted(
            (docket for number, docket in self.dockets.items() if number in active),
            key=lambda d: d.id,
        )

    async def get_latest_filed_at(self, docket_number: str) -> datetime | None:
        docket = self.dockets.get(docket_number)
        if docket is None:
            return None
        filed = [
            f.filed_at
            for f in self.filings.values()
            if f.docket_id == docket.id and f.filed_at is not None
        ]
        return max(filed) if filed else None

    async def get_filing(self, fcc_filing_id: str) -> Filing | None:
        return self.filings.get(fcc_filing_id)

    async def insert_filing(self, filing: Filing) -> Filing:
        async with self._lock:
            existing = self.filings.get(filing.fcc_filing_id)
            if existing is not None:
                return existing
            stored = filing.model_copy(update={"id": self._next_filing_id})
            self._next_filing_id += 1
            self.filings[stored.fcc_filing_id] = stored
            return stored

    async def get_docket(self, docket_number: str) -> Docket | None:
        return self.dockets.get(docket_number)

    async def list_dockets(self) -> list[Docket]:
        return sorted(self.dockets.values(), key=lambda d: d.id, reverse=True)

    def _create_docket(self, **fields: Any) -> Docket:
        docket = Docket(id=self._next_docket_id, **fields)
        self._next_docket_id += 1
        self.dockets[docket.docket_number] = docket
        return docket

    async def upsert_docket(self, info: DocketInfo) -> Docket:
        async with self._lock:
            existing = self.dockets.get(info.docket_number)
            if existing is None:
                return self._create_docket(**info.model_dump())
            updated = existing.model_copy(
                update=info.model_dump(exclude={"docket_number"})
            )
            self.dockets[info.docket_number] = updated
            return updated

    async def watch_docket(self, docket_number: str, user_id: str, tier: str = "free") -> Docket:
        docket_number = docket_number.strip()
        async with self._lock:
            active_count = sum(
                1 for (uid, _), is_active in self.subscriptions.items() if uid == user_id and is_active
            )
            already_active = self.subscriptions.get((user_id, docket_number), False)
            check_watch_allowed(docket_number, user_id, tier, active_count, already_active)

            docket = self.dockets.get(docket_number)
            if docket is None:
                docket = self._create_docket(
                    docket_number=docket_number,
                    title=PLACEHOLDER_DOCKET_TITLE,
                    bureau=PLACEHOLDER_DOCKET_BUREAU,
                    description=PLACEHOLDER_DOCKET_DESCRIPTION,
                    status=DocketStatus.UNKNOWN,
                )
            self.subscriptions[(user_id, docket_number)] = True
            return docket

    async def unwatch_docket(self, docket_number: str, user_id: str) -> bool:
        key = (user_id, docket_number.strip())
        async with self._lock:
            if not self.subscriptions.get(key):
                return False
            self.subscriptions[key] = False
            return True

    async def get_stats(self) -> dict[str, Any]:
        by_status = {status.value: 0 for status in ProcessingStatus}
        for filing in self.filings.values():
            by_status[filing.processing_status.value] += 1
        return {
            "backend": "memory",
            "dockets": len(self.dockets),
            "active_subscriptions": sum(1 for active in self.subscriptions.values() if active),
            "filings": len(self.filings),
            "filings_by_status": by_status,
        }
