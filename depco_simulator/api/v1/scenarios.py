"""/v1/scenarios - save, edit, delete and compare what-if scenarios"""

import logging
from dataclasses import replace
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from depco_simulator.api.dependencies import (
    get_lending_client,
    get_request_id,
    get_session,
    load_session,
    raise_upstream,
)
from depco_simulator.api.v1.schemas import CompareRequest, ScenarioRequest, ScenarioResponse
from depco_simulator.api.v1.simulate import validation_error
from depco_simulator.domain.amortization import coerce_credit_items
from depco_simulator.domain.exceptions import CreditItemValidationError, ScenarioNotFoundError, UpstreamError
from depco_simulator.domain.models import CreditScenario
from depco_simulator.domain.scenarios import build_scenario, compare_scenarios, update_scenario
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.session import SimulatorSession
from depco_simulator.utils.date_utils import parse_timestamp

router = APIRouter()


def _upstream_payload(scenario: CreditScenario) -> dict:
    data = scenario.to_dict()
    data.pop("id")
    data.pop("created_at")
    return data


def _merge_saved(scenario: CreditScenario, saved: dict | None, operation: str) -> CreditScenario:
    """Keep locally computed projections, take identity from the lending API"""
    saved = saved or {}
    try:
        created_at = parse_timestamp(saved.get("created_at"))
    except ValueError as e:
        raise UpstreamError(operation, f"invalid created_at from lending API: {e}") from e
    return replace(scenario, id=saved.get("id", scenario.id), created_at=created_at or scenario.created_at)


@router.get("/scenarios", response_model=List[ScenarioResponse])
async def list_scenarios(
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    await load_session(session, client, get_request_id(request))
    return [scenario.to_dict() for scenario in session.scenarios]


@router.post("/scenarios", response_model=ScenarioResponse, status_code=201)
async def create_scenario(
    request_body: ScenarioRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """
    Simulate then save a scenario.

    Projections are computed here against the fresh portfolio and cached
    on the scenario; previews later reuse them as-is.
    """
    request_id = get_request_id(request)
    try:
        coerce_credit_items(request_body.credit_items)
    except CreditItemValidationError as e:
        raise validation_error(e)

    await load_session(session, client, request_id, allow_stale=False)
    try:
        scenario = build_scenario(
            session.require_portfolio(),
            request_body.name,
            request_body.credit_items,
            description=request_body.description,
        )
    except CreditItemValidationError as e:
        raise validation_error(e)

    try:
        saved = await client.create_scenario(_upstream_payload(scenario))
        scenario = _merge_saved(scenario, saved, "create_scenario")
    except UpstreamError as e:
        raise_upstream(e, request_id)

    session.upsert_scenario(scenario)
    logging.info(
        "Scenario saved",
        extra={"request_id": request_id, "step": "scenario_saved", "scenario_id": scenario.id},
    )
    return scenario.to_dict()


@router.put("/scenarios/{scenario_id}", response_model=ScenarioResponse)
async def edit_scenario(
    scenario_id: int,
    request_body: ScenarioRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Replace a scenario's items and recompute its cached projections"""
    request_id = get_request_id(request)
    try:
        coerce_credit_items(request_body.credit_items)
    except CreditItemValidationError as e:
        raise validation_error(e)

    await load_session(session, client, request_id, allow_stale=False)
    try:
        existing = session.get_scenario(scenario_id)
        scenario = update_scenario(
            session.require_portfolio(),
            existing,
            request_body.credit_items,
            name=request_body.name,
            description=request_body.description,
        )
    except ScenarioNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CreditItemValidationError as e:
        raise validation_error(e)

    try:
        saved = await client.update_scenario(scenario_id, _upstream_payload(scenario))
        scenario = _merge_saved(scenario, saved, "update_scenario")
    except UpstreamError as e:
        raise_upstream(e, request_id)

    session.upsert_scenario(scenario)
    return scenario.to_dict()


@router.delete("/scenarios/{scenario_id}")
async def delete_scenario(
    scenario_id: int,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Delete a scenario; an active preview of it is cleared"""
    request_id = get_request_id(request)
    try:
        await client.delete_scenario(scenario_id)
    except UpstreamError as e:
        raise_upstream(e, request_id)

    session.remove_scenario(scenario_id)
    return {"message": "Scenario deleted"}


@router.post("/scenarios/compare")
async def compare(
    request_body: CompareRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Price several saved scenarios against the current portfolio and pick the best"""
    await load_session(session, client, get_request_id(request))
    try:
        scenarios = [session.get_scenario(scenario_id) for scenario_id in request_body.scenario_ids]
    except ScenarioNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return compare_scenarios(session.require_portfolio(), scenarios)
