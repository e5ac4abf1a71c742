"""CLI entry point for docket ingestion.

Usage:
    # One ingestion sweep over every watched docket
    python -m docketwatch.ingest run

    # Sweep every INGEST_INTERVAL_MINUTES until interrupted
    python -m docketwatch.ingest schedule

    # Seed or remove a subscription
    python -m docketwatch.ingest watch 17-108 --user-id alice --tier free
    python -m docketwatch.ingest unwatch 17-108 --user-id alice

    # Create the database schema
    python -m docketwatch.ingest init-db
"""

import argparse
import asyncio
import json
import logging
import sys

from docketwatch.core.exceptions import DocketWatchError, IngestionRunError
from docketwatch.core.utils import set_logging_level
from docketwatch.ingest.scheduler import run_scheduler
from docketwatch.ingest.triggers import TriggerSource, trigger_ingestion
from docketwatch.settings import INGEST_INTERVAL_MINUTES, SUBSCRIPTION_TIERS
from docketwatch.store import get_docket_store

logger = logging.getLogger(__name__)


async def _run_once() -> dict:
    summary = await trigger_ingestion(TriggerSource.MANUAL)
    return summary.model_dump(mode="json", exclude={"transitions"})


async def _watch(docket_number: str, user_id: str, tier: str) -> dict:
    store = get_docket_store()
    await store.initialize()
    docket = await store.watch_docket(docket_number, user_id, tier)
    return {"docket_number": docket.docket_number, "user_id": user_id, "title": docket.title}


async def _unwatch(docket_number: str, user_id: str) -> dict:
    store = get_docket_store()
    await store.initialize()
    removed = await store.unwatch_docket(docket_number, user_id)
    return {"docket_number": docket_number, "user_id": user_id, "removed": removed}


async def _init_db() -> dict:
    store = get_docket_store()
    await store.initialize()
    return await store.get_stats()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docketwatch-ingest",
        description="FCC docket filing ingestion for docketwatch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run one ingestion sweep")

    schedule = subparsers.add_parser("schedule", help="Run ingestion on a fixed interval")
    schedule.add_argument(
        "--interval-minutes",
        type=float,
        default=INGEST_INTERVAL_MINUTES,
        help=f"Minutes between runs (default: {INGEST_INTERVAL_MINUTES})",
    )

    watch = subparsers.add_parser("watch", help="Subscribe a user to a docket")
    watch.add_argument("docket_number", help="FCC docket number, e.g. 17-108")
    watch.add_argument("--user-id", default="cli", help="Subscriber id (default: cli)")
    watch.add_argument(
        "--tier",
        choices=SUBSCRIPTION_TIERS,
        default="free",
        help="Subscription tier (default: free)",
    )

    unwatch = subparsers.add_parser("unwatch", help="Deactivate a user's docket subscription")
    unwatch.add_argument("docket_number", help="FCC docket number, e.g. 17-108")
    unwatch.add_argument("--user-id", default="cli", help="Subscriber id (default: cli)")

    subparsers.add_parser("init-db", help="Create the docket store schema")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the ingest CLI."""
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    set_logging_level(log_level, service_name="ingest")
    logger.info(f"Starting docketwatch command: {args.command}")

    try:
        if args.command == "run":
            result = asyncio.run(_run_once())
        elif args.command == "schedule":
            runs = asyncio.run(run_scheduler(interval_minutes=args.interval_minutes))
            result = {"runs": runs}
        elif args.command == "watch":
            result = asyncio.run(_watch(args.docket_number, args.user_id, args.tier))
        elif args.command == "unwatch":
            result = asyncio.run(_unwatch(args.docket_number, args.user_id))
        else:  # init-db
            result = asyncio.run(_init_db())

        print(json.dumps(result, indent=2, default=str))
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except IngestionRunError as e:
        logger.error(f"Ingestion failed: {e}")
        if e.summary is not None:
            print(e.summary.model_dump_json(indent=2, exclude={"transitions"}))
        return 1

    except DocketWatchError as e:
        logger.error(str(e))
        return 1

    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
