"""Docket store contract shared by the SQLite adapter and the in-memory fake."""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from docketwatch.core.exceptions import InvalidDocketNumberError, SubscriptionLimitError
from docketwatch.core.utils import is_valid_docket_number, subscription_limit_reached
from docketwatch.ecfs.models import Docket, DocketInfo, Filing
from docketwatch.settings import FREE_TIER_DOCKET_LIMIT, SUBSCRIPTION_TIERS


def check_watch_allowed(
    docket_number: str, user_id: str, tier: str, active_count: int, already_active: bool
) -> None:
    """Validate a watch request before any row is written.

    Re-watching a docket the user already follows never counts against the limit.

    Raises:
        InvalidDocketNumberError: If the docket number is not NN-NNN or NN-NNNN
        ValueError: If the tier is unknown
        SubscriptionLimitError: If the user's tier allows no more dockets
    """
    if not is_valid_docket_number(docket_number):
        raise InvalidDocketNumberError(docket_number)
    if tier not in SUBSCRIPTION_TIERS:
        raise ValueError(f"Unknown subscription tier: {tier}")
    if already_active:
        return
    if subscription_limit_reached(tier, active_count, FREE_TIER_DOCKET_LIMIT):
        raise SubscriptionLimitError(user_id, tier, FREE_TIER_DOCKET_LIMIT)


@runtime_checkable
class DocketStore(Protocol):
    """Everything the ingestion pipeline needs from persistence.

    Writes are single-row and keyed by natural unique keys (docket number,
    FCC filing id), so every operation is its own atomic unit.
    """

    async def initialize(self) -> None:
        """Create the schema if needed. Safe to call repeatedly."""
        ...

    async def list_active_dockets(self) -> list[Docket]:
        """Dockets with at least one active subscription."""
        ...

    async def get_latest_filed_at(self, docket_number: str) -> datetime | None:
        """Maximum filed_at among the docket's stored filings (the ingestion cursor)."""
        ...

    async def get_filing(self, fcc_filing_id: str) -> Filing | None:
        ...

    async def insert_filing(self, filing: Filing) -> Filing:
        """Insert a filing unless one with the same FCC id exists; returns the stored row."""
        ...

    async def get_docket(self, docket_number: str) -> Docket | None:
        ...

    async def list_dockets(self) -> list[Docket]:
        ...

    async def upsert_docket(self, info: DocketInfo) -> Docket:
        """Insert a docket or refresh its metadata, keyed by docket number."""
        ...

    async def watch_docket(self, docket_number: str, user_id: str, tier: str = "free") -> Docket:
        """Create or re-activate a subscription, creating a placeholder docket on first sight."""
        ...

    async def unwatch_docket(self, docket_number: str, user_id: str) -> bool:
        ...

    async def get_stats(self) -> dict[str, Any]:
        ...
