import logging
import re
from datetime import date, datetime, timezone
from typing import Optional

from docketwatch.settings import FREE_TIER_DOCKET_LIMIT

logger = logging.getLogger(__name__)

# FCC docket format: XX-XXX or XX-XXXX
DOCKET_NUMBER_PATTERN = re.compile(r"^\d{2}-\d{3,4}$")


def set_logging_level(
    level: int,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Set logging level for all docketwatch loggers.

    Args:
        level: The logging level to set
        service_name: Name of the service (e.g., "api", "ingest")
        environment: Environment name (e.g., "localhost", "dev", "prod")
    """
    loggers = [logging.getLogger(name) for name in logging.root.manager.loggerDict]
    for logger_ in loggers:
        if "docketwatch" in logger_.name or "backend" in logger_.name or "__main__" == logger_.name:
            logger_.setLevel(level)
    logging.getLogger("docketwatch").setLevel(level)

    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if service_name:
        logger.debug(f"Logging configured for {service_name} ({environment or 'unknown'})")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_ms(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def parse_source_datetime(value) -> Optional[datetime]:
    """Parse an ECFS date field into an aware UTC datetime, or None if unusable.

    Examples:
        parse_source_datetime("2024-03-01T14:05:00.000Z") -> 2024-03-01 14:05:00+00:00
        parse_source_datetime("2024-03-01") -> 2024-03-01 00:00:00+00:00
        parse_source_datetime("not a date") -> None
    """
    if not value or not isinstance(value, str):
        return None

    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def cursor_to_since_date(latest_filed_at: Optional[datetime]) -> Optional[date]:
    """Turn a docket's latest stored filed-at into the inclusive since-date for the next fetch."""
    if latest_filed_at is None:
        return None
    if latest_filed_at.tzinfo is not None:
        latest_filed_at = latest_filed_at.astimezone(timezone.utc)
    return latest_filed_at.date()


def is_valid_docket_number(docket_number: str) -> bool:
    return bool(docket_number) and bool(DOCKET_NUMBER_PATTERN.match(docket_number.strip()))


def subscription_limit_reached(
    tier: str, active_count: int, limit: int = FREE_TIER_DOCKET_LIMIT
) -> bool:
    """The one rule for free-tier watch limits.

    A free user may hold at most ``limit`` active subscriptions, so a new watch
    is refused once ``active_count >= limit``. Pro users are unlimited.
    """
    if tier != "free":
        return False
    return active_count >= limit
