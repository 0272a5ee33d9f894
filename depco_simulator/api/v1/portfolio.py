"""GET /v1/portfolio and scenario preview endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from depco_simulator.api.dependencies import get_lending_client, get_request_id, get_session, load_session
from depco_simulator.api.v1.schemas import PortfolioResponse, PortfolioViewResponse
from depco_simulator.domain.exceptions import ScenarioNotFoundError
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.session import SimulatorSession

router = APIRouter()


@router.get("/portfolio", response_model=PortfolioResponse)
async def get_portfolio(
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """
    Current portfolio totals, DTI ratio and risk labels.

    If the lending API is down, the last good snapshot is returned with
    stale=true rather than an error.
    """
    await load_session(session, client, get_request_id(request))
    portfolio = session.require_portfolio()
    return {**portfolio.to_dict(), "stale": session.stale}


@router.get("/portfolio/view", response_model=PortfolioViewResponse)
async def get_portfolio_view(
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Portfolio panel values: current, or the previewed scenario's projection"""
    await load_session(session, client, get_request_id(request))
    return {**session.view().to_dict(), "stale": session.stale}


@router.post("/preview/{scenario_id}", response_model=PortfolioViewResponse)
def toggle_preview(
    scenario_id: int,
    request: Request,
    session: SimulatorSession = Depends(get_session),
):
    """
    Select a saved scenario for preview, or deselect it if already active.

    Uses the scenarios and portfolio already loaded for this session; no
    simulation or lending API call is made.
    """
    if session.portfolio is None:
        raise HTTPException(status_code=409, detail="Portfolio not loaded")
    try:
        active = session.toggle_preview(scenario_id)
    except ScenarioNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logging.info(
        "Preview toggled",
        extra={"request_id": get_request_id(request), "step": "preview", "active_scenario_id": active},
    )
    return {**session.view().to_dict(), "stale": session.stale}


@router.delete("/preview", response_model=PortfolioViewResponse)
def exit_preview(session: SimulatorSession = Depends(get_session)):
    """Return the portfolio panel to current values"""
    if session.portfolio is None:
        raise HTTPException(status_code=409, detail="Portfolio not loaded")
    session.exit_preview()
    return {**session.view().to_dict(), "stale": session.stale}
