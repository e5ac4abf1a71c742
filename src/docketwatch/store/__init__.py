"""Docket store adapters."""

import logging

from docketwatch.settings import DATABASE_PATH, DOCKET_STORE_BACKEND
from docketwatch.store.base import DocketStore, check_watch_allowed
from docketwatch.store.memory import InMemoryDocketStore
from docketwatch.store.sqlite import SqliteDocketStore

logger = logging.getLogger(__name__)


def get_docket_store(backend: str = DOCKET_STORE_BACKEND, path: str = DATABASE_PATH) -> DocketStore:
    """Build the configured docket store."""
    if backend == "sqlite":
        logger.debug(f"Using SQLite docket store at {path}")
        return SqliteDocketStore(path)
    if backend == "memory":
        logger.warning("Using in-memory docket store; nothing will persist")
        return InMemoryDocketStore()
    raise ValueError(f"Unknown docket store backend: {backend}")


__all__ = [
    "DocketStore",
    "InMemoryDocketStore",
    "SqliteDocketStore",
    "check_watch_allowed",
    "get_docket_store",
]
