"""Docket ingestion pipeline."""

from docketwatch.ingest.orchestrator import IngestionOrchestrator, build_orchestrator
from docketwatch.ingest.state import RunSummary
from docketwatch.ingest.triggers import TriggerSource, trigger_ingestion

__all__ = [
    "IngestionOrchestrator",
    "RunSummary",
    "TriggerSource",
    "build_orchestrator",
    "trigger_ingestion",
]
