"""Dependency injection for FastAPI endpoints"""

import logging

from fastapi import Depends, Header, HTTPException, Request

from depco_simulator.config import settings
from depco_simulator.domain.exceptions import UpstreamError
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.infrastructure.observability.logging import log_upstream_failure
from depco_simulator.session import SessionStore, SimulatorSession, session_owner

# Upstream statuses that mean "not this caller's data"; never answered from a snapshot
AUTH_FAILURE_STATUSES = (401, 403)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Token from an `Authorization: Bearer ...` header, if any"""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:]
    return None


def get_lending_client(token: str | None = Depends(bearer_token)) -> LendingApiClient:
    """Provide a lending API client that forwards the caller's bearer token"""
    return LendingApiClient(token=token)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_session(
    x_session_id: str = Header(default="default"),
    token: str | None = Depends(bearer_token),
    store: SessionStore = Depends(get_session_store),
) -> SimulatorSession:
    """Presentation state for the calling session, scoped to the caller's token"""
    return store.get(x_session_id, owner=session_owner(token))


async def load_session(
    session: SimulatorSession,
    client: LendingApiClient,
    request_id: str,
    allow_stale: bool = True,
) -> SimulatorSession:
    """
    Refresh the session from the lending API.

    On upstream failure the last good snapshot is served (marked stale)
    when one exists and allow_stale is set; otherwise the caller gets 503.
    A 401/403 from the lending API is passed through and never served stale.
    """
    try:
        await session.refresh(client, settings.default_exposure_statuses)
    except UpstreamError as e:
        if e.status_code in AUTH_FAILURE_STATUSES:
            log_upstream_failure(request_id, e.operation, e, stale=False)
            raise HTTPException(status_code=e.status_code, detail="Not authorized for lending data")
        can_serve_stale = allow_stale and session.portfolio is not None
        log_upstream_failure(request_id, e.operation, e, stale=can_serve_stale)
        if not can_serve_stale:
            raise HTTPException(status_code=503, detail="Lending service unavailable")
    return session


def raise_upstream(e: UpstreamError, request_id: str) -> None:
    """Translate a failed lending API write into an HTTP error"""
    logging.error(f"Lending API error: {e}", extra={"request_id": request_id, "operation": e.operation})
    if e.status_code == 404:
        raise HTTPException(status_code=404, detail=str(e))
    if e.status_code in AUTH_FAILURE_STATUSES:
        raise HTTPException(status_code=e.status_code, detail="Not authorized for lending data")
    raise HTTPException(status_code=503, detail="Lending service unavailable")
