import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from backend.core.dependencies import get_orchestrator, verify_api_key
from backend.core.error_handling import handle_errors
from docketwatch.ingest.orchestrator import IngestionOrchestrator
from docketwatch.ingest.triggers import TriggerSource, trigger_ingestion

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["ingestion"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "/trigger-ingestion",
    operation_id="trigger_ingestion",
    summary="Run one ingestion sweep now",
)
@handle_errors
async def trigger_ingestion_endpoint(
    orchestrator: Annotated[IngestionOrchestrator, Depends(get_orchestrator)],
):
    """Run the same ingestion the scheduler runs and return its summary.

    The response carries ``processed`` (filings newly stored) alongside the
    full run summary. If the docket store cannot be read the run does not
    start and a 500 with ``error``, ``message``, ``timestamp`` and the partial
    ``summary`` is returned instead.
    """
    summary = await trigger_ingestion(TriggerSource.MANUAL, orchestrator)
    return summary.model_dump(mode="json")
