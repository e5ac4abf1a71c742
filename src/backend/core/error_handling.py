"""Error handling utilities for FastAPI routers."""

import logging
import traceback
from functools import wraps
from typing import Callable, TypeVar

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from docketwatch.core.exceptions import IngestionRunError
from docketwatch.core.utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ingestion_error_response(error: IngestionRunError) -> JSONResponse:
    """JSON body for a run that could not start, with whatever summary it produced."""
    summary = error.summary.model_dump(mode="json") if error.summary is not None else None
    return JSONResponse(
        status_code=500,
        content={
            "error": "Ingestion failed",
            "message": str(error),
            "timestamp": utc_now().isoformat(),
            "summary": summary,
        },
    )


def handle_errors(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator that catches exceptions and converts them to error responses.

    Preserves HTTPExceptions (for auth, validation, etc.), turns a failed
    ingestion run into its JSON error payload and wraps anything else with
    traceback details for debugging.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HTTPException:
            raise
        except IngestionRunError as e:
            return ingestion_error_response(e)
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {e}", exc_info=True)
            error_detail = {
                "error_type": type(e).__name__,
                "error_message": str(e),
                "traceback": traceback.format_exc(),
            }
            raise HTTPException(status_code=500, detail=error_detail)

    return wrapper
