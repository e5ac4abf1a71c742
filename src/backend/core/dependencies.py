"""FastAPI dependencies for backend services."""

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.core.config import ADMIN_API_KEY
from docketwatch.ingest.orchestrator import IngestionOrchestrator, build_orchestrator
from docketwatch.store import DocketStore

# Security scheme; a missing header is rejected below rather than by FastAPI
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(security)],
) -> str | None:
    """Verify the admin API key from the Authorization header.

    Expects: Authorization: Bearer <api-key>
    """
    if not ADMIN_API_KEY:
        # If no API key is configured, allow all requests
        return credentials.credentials if credentials else None

    if credentials is None or credentials.credentials != ADMIN_API_KEY:
        raise HTTPException(
            status_code=401,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_store(request: Request) -> DocketStore:
    """The docket store created for this app in its lifespan."""
    return request.app.state.store


async def get_orchestrator(
    store: Annotated[DocketStore, Depends(get_store)],
) -> AsyncIterator[IngestionOrchestrator]:
    """A fresh orchestrator per request, closed once the response is sent."""
    orchestrator = build_orchestrator(store=store)
    try:
        yield orchestrator
    finally:
        await orchestrator.aclose()
