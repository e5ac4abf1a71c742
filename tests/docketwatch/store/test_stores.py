"""Contract tests run against both docket store adapters."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from docketwatch.core.exceptions import (
    InvalidDocketNumberError,
    StoreUnavailableError,
    SubscriptionLimitError,
)
from docketwatch.ecfs.models import DocketInfo, DocketStatus, Filing, ProcessingStatus
from docketwatch.settings import PLACEHOLDER_DOCKET_TITLE
from docketwatch.store import (
    DocketStore,
    InMemoryDocketStore,
    SqliteDocketStore,
    get_docket_store,
)


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    if request.param == "memory":
        docket_store = InMemoryDocketStore()
    else:
        docket_store = SqliteDocketStore(str(tmp_path / "data" / "docketwatch.db"))
    await docket_store.initialize()
    return docket_store


def make_filing(fcc_filing_id, docket_id, filed_at=None, summary="A summary", **kwargs):
    return Filing(
        fcc_filing_id=fcc_filing_id,
        docket_id=docket_id,
        title=f"Filing {fcc_filing_id}",
        author="Example Co.",
        filing_url=f"https://www.fcc.gov/ecfs/filing/{fcc_filing_id}",
        document_urls=[f"https://ecfs.fcc.gov/api/filing/{fcc_filing_id}/download/a.pdf"],
        filed_at=filed_at,
        fetched_at=datetime(2024, 3, 2, tzinfo=timezone.utc),
        summary=summary,
        processing_status=ProcessingStatus.PROCESSED,
        **kwargs,
    )


def test_adapters_satisfy_the_protocol(tmp_path):
    assert isinstance(InMemoryDocketStore(), DocketStore)
    assert isinstance(SqliteDocketStore(str(tmp_path / "x.db")), DocketStore)


@pytest.mark.asyncio
async def test_watch_creates_placeholder_docket(store):
    docket = await store.watch_docket("17-108", "alice")

    assert docket.docket_number == "17-108"
    assert docket.title == PLACEHOLDER_DOCKET_TITLE
    assert docket.status == DocketStatus.UNKNOWN
    assert [d.docket_number for d in await store.list_active_dockets()] == ["17-108"]


@pytest.mark.asyncio
async def test_unwatch_removes_docket_from_active_list(store):
    await store.watch_docket("17-108", "alice")

    assert await store.unwatch_docket("17-108", "alice") is True
    assert await store.unwatch_docket("17-108", "alice") is False
    assert await store.list_active_dockets() == []
    # The docket itself is never deleted
    assert await store.get_docket("17-108") is not None


@pytest.mark.asyncio
async def test_docket_watched_by_two_users_is_listed_once(store):
    await store.watch_docket("17-108", "alice")
    await store.watch_docket("17-108", "bob")

    assert len(await store.list_active_dockets()) == 1


@pytest.mark.asyncio
async def test_free_tier_allows_one_active_docket(store):
    await store.watch_docket("17-108", "alice", tier="free")

    with pytest.raises(SubscriptionLimitError):
        await store.watch_docket("23-320", "alice", tier="free")

    # Re-watching the same docket is not a new subscription
    await store.watch_docket("17-108", "alice", tier="free")

    # Freeing the slot allows another docket
    await store.unwatch_docket("17-108", "alice")
    await store.watch_docket("23-320", "alice", tier="free")


@pytest.mark.asyncio
async def test_pro_tier_is_unlimited(store):
    for number in ["17-108", "23-320", "02-278"]:
        await store.watch_docket(number, "carol", tier="pro")

    assert len(await store.list_active_dockets()) == 3


@pytest.mark.asyncio
async def test_watch_rejects_invalid_docket_number(store):
    with pytest.raises(InvalidDocketNumberError):
        await store.watch_docket("not-a-docket", "alice")

    assert await store.list_dockets() == []


@pytest.mark.asyncio
async def test_insert_filing_is_idempotent(store):
    docket = await store.watch_docket("17-108", "alice")

    first = await store.insert_filing(make_filing("F1", docket.id, summary="first"))
    second = await store.insert_filing(make_filing("F1", docket.id, summary="second"))

    assert first.id is not None
    assert second.id == first.id
    assert second.summary == "first"
    assert (await store.get_stats())["filings"] == 1


@pytest.mark.asyncio
async def test_get_filing_round_trip(store):
    docket = await store.watch_docket("17-108", "alice")
    filed_at = datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)
    await store.insert_filing(make_filing("F1", docket.id, filed_at=filed_at))

    filing = await store.get_filing("F1")

    assert filing.docket_id == docket.id
    assert filing.filed_at == filed_at
    assert filing.document_urls == ["https://ecfs.fcc.gov/api/filing/F1/download/a.pdf"]
    assert filing.processing_status == ProcessingStatus.PROCESSED
    assert await store.get_filing("missing") is None


@pytest.mark.asyncio
async def test_cursor_is_max_filed_at(store):
    docket = await store.watch_docket("17-108", "alice")
    assert await store.get_latest_filed_at("17-108") is None

    for fcc_id, day in [("F1", 10), ("F2", 20), ("F3", 15)]:
        await store.insert_filing(
            make_filing(fcc_id, docket.id, filed_at=datetime(2024, 3, day, tzinfo=timezone.utc))
        )
    await store.insert_filing(make_filing("F4", docket.id, filed_at=None))

    assert await store.get_latest_filed_at("17-108") == datetime(2024, 3, 20, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_cursor_is_per_docket(store):
    a = await store.watch_docket("17-108", "carol", tier="pro")
    b = await store.watch_docket("23-320", "carol", tier="pro")
    await store.insert_filing(make_filing("A1", a.id, filed_at=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    await store.insert_filing(make_filing("B1", b.id, filed_at=datetime(2024, 6, 1, tzinfo=timezone.utc)))

    assert await store.get_latest_filed_at("17-108") == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_upsert_docket_refreshes_metadata(store):
    await store.watch_docket("17-108", "alice")

    refreshed = await store.upsert_docket(
        DocketInfo(
            docket_number="17-108",
            title="Restoring Internet Freedom",
            bureau="Wireline Competition Bureau",
            status=DocketStatus.ACTIVE,
        )
    )

    assert refreshed.title == "Restoring Internet Freedom"
    assert refreshed.status == DocketStatus.ACTIVE
    assert (await store.get_docket("17-108")).bureau == "Wireline Competition Bureau"
    assert len(await store.list_dockets()) == 1


@pytest.mark.asyncio
async def test_stats(store):
    docket = await store.watch_docket("17-108", "alice")
    await store.insert_filing(make_filing("F1", docket.id))

    stats = await store.get_stats()

    assert stats["dockets"] == 1
    assert stats["active_subscriptions"] == 1
    assert stats["filings"] == 1
    assert stats["filings_by_status"] == {"pending": 0, "processed": 1, "failed": 0}


@pytest.mark.asyncio
async def test_sqlite_data_survives_a_new_store_instance(tmp_path):
    path = str(tmp_path / "docketwatch.db")
    first = SqliteDocketStore(path)
    await first.initialize()
    docket = await first.watch_docket("17-108", "alice")
    await first.insert_filing(make_filing("F1", docket.id))

    second = SqliteDocketStore(path)
    await second.initialize()

    assert (await second.get_filing("F1")).title == "Filing F1"
    assert [d.docket_number for d in await second.list_active_dockets()] == ["17-108"]


@pytest.mark.asyncio
async def test_sqlite_unreachable_path_raises_store_unavailable(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    store = SqliteDocketStore(str(blocker / "docketwatch.db"))

    with pytest.raises(StoreUnavailableError):
        await store.list_active_dockets()


def test_get_docket_store_selects_backend(tmp_path):
    assert isinstance(get_docket_store("memory"), InMemoryDocketStore)
    assert isinstance(get_docket_store("sqlite", str(tmp_path / "x.db")), SqliteDocketStore)
    with pytest.raises(ValueError):
        get_docket_store("postgres")
