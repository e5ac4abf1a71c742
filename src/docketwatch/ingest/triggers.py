"""The single command every trigger (timer, HTTP, CLI) uses to start a run."""

import logging
from enum import Enum

from docketwatch.core.exceptions import IngestionRunError
from docketwatch.ingest.orchestrator import IngestionOrchestrator, build_orchestrator
from docketwatch.ingest.state import RunSummary

logger = logging.getLogger(__name__)


class TriggerSource(str, Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"


async def trigger_ingestion(
    source: TriggerSource, orchestrator: IngestionOrchestrator | None = None
) -> RunSummary:
    """Run one ingestion sweep on behalf of ``source``.

    Args:
        source: What started the run, for logging
        orchestrator: Orchestrator to use; one is built from settings (and
            closed afterwards) when omitted

    Returns:
        The run summary

    Raises:
        IngestionRunError: If the run could not start (store unavailable)
    """
    owned = orchestrator is None
    if owned:
        orchestrator = build_orchestrator()

    logger.info(
        f"Ingestion triggered ({source.value})",
        extra={"event_type": "ingestion_triggered", "trigger": source.value},
    )

    try:
        summary = await orchestrator.run()
    except IngestionRunError as e:
        logger.error(
            f"{source.value.capitalize()} ingestion failed: {e}",
            extra={"event_type": "ingestion_failed", "trigger": source.value},
        )
        raise
    finally:
        if owned:
            await orchestrator.aclose()

    logger.info(
        f"{source.value.capitalize()} ingestion finished: {summary.log_line()}",
        extra={
            "event_type": "ingestion_finished",
            "trigger": source.value,
            "processed": summary.processed,
        },
    )
    return summary
