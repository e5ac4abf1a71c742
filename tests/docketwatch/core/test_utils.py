from datetime import date, datetime, timedelta, timezone

import pytest

from docketwatch.core.models import ensure_utc
from docketwatch.core.rate_limiter import Pacer
from docketwatch.core.utils import (
    cursor_to_since_date,
    is_valid_docket_number,
    parse_source_datetime,
    subscription_limit_reached,
    to_epoch_ms,
)


@pytest.mark.parametrize("number", ["17-108", "11-420", "02-2780", " 23-320 "])
def test_valid_docket_numbers(number):
    assert is_valid_docket_number(number)


@pytest.mark.parametrize("number", ["", "17108", "1-108", "17-10", "17-10845", "RM-11708", "ab-cde"])
def test_invalid_docket_numbers(number):
    assert not is_valid_docket_number(number)


def test_free_tier_limit_is_reached_at_the_limit():
    assert not subscription_limit_reached("free", 0, limit=1)
    assert subscription_limit_reached("free", 1, limit=1)
    assert subscription_limit_reached("free", 2, limit=1)


def test_pro_tier_is_unlimited():
    assert not subscription_limit_reached("pro", 500, limit=1)


def test_parse_source_datetime_normalises_to_utc():
    parsed = parse_source_datetime("2024-03-01T09:00:00-05:00")
    assert parsed == datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)
    assert parsed.tzinfo == timezone.utc


def test_cursor_uses_the_utc_calendar_date():
    latest = datetime(2024, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert cursor_to_since_date(latest) == date(2024, 3, 2)
    assert cursor_to_since_date(None) is None


def test_epoch_ms_round_trip_through_ensure_utc():
    moment = datetime(2024, 3, 1, 14, 0, 5, tzinfo=timezone.utc)
    assert ensure_utc(to_epoch_ms(moment)) == moment
    assert to_epoch_ms(None) is None


def test_pacer_budget():
    pacer = Pacer(filing_delay=1.0, docket_delay=2.0)
    assert pacer.budget_for(3, 10) == 3 * (10 * 1.0 + 2.0)


@pytest.mark.asyncio
async def test_pacer_accumulates_waits():
    pacer = Pacer(filing_delay=0.01, docket_delay=0.02)

    await pacer.after_filing()
    await pacer.after_filing()
    await pacer.between_dockets()

    assert pacer.total_waited == pytest.approx(0.04)


@pytest.mark.asyncio
async def test_zero_delay_pacer_never_sleeps():
    pacer = Pacer(filing_delay=0, docket_delay=0)
    await pacer.after_filing()
    await pacer.between_dockets()
    assert pacer.total_waited == 0
