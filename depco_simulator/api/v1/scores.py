"""/v1/imported-score and /v1/simulate-score-impact"""

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Request

from depco_simulator.api.dependencies import (
    get_lending_client,
    get_request_id,
    get_session,
    load_session,
    raise_upstream,
)
from depco_simulator.api.v1.schemas import (
    ImportedScoreResponse,
    ImportScoreRequest,
    ScoreImpactSimulationResponse,
    SimulateRequest,
)
from depco_simulator.api.v1.simulate import validation_error
from depco_simulator.domain.amortization import coerce_credit_items
from depco_simulator.domain.exceptions import CreditItemValidationError, ScoreRangeError, UpstreamError
from depco_simulator.domain.models import ImportedCreditScore
from depco_simulator.domain.preview import find_scenario
from depco_simulator.domain.scenarios import simulate
from depco_simulator.domain.score_impact import estimate_score_impact, import_score, simulate_score_impact
from depco_simulator.session import SimulatorSession
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient

router = APIRouter()


def _with_preview_impact(session: SimulatorSession, imported: ImportedCreditScore) -> ImportedCreditScore:
    """Attach the projected impact of the previewed scenario, if any"""
    scenario_id = session.preview.active_scenario_id
    scenario = find_scenario(session.scenarios, scenario_id) if scenario_id is not None else None
    if scenario is None or session.portfolio is None:
        return imported
    impact = estimate_score_impact(imported, simulate(session.portfolio, scenario.credit_items))
    return replace(imported, projected_impact=impact)


@router.get("/imported-score", response_model=ImportedScoreResponse | None)
async def get_imported_score(
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Imported bureau score, with the previewed scenario's impact when previewing"""
    await load_session(session, client, get_request_id(request))
    if session.imported_score is None:
        return None
    return _with_preview_impact(session, session.imported_score).to_dict()


@router.post("/imported-score", response_model=ImportedScoreResponse, status_code=201)
async def save_imported_score(
    request_body: ImportScoreRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Validate a self-reported score against its bureau range, then store it upstream"""
    request_id = get_request_id(request)
    try:
        imported = import_score(
            request_body.score,
            bureau=request_body.bureau,
            min_score=request_body.min_score,
            max_score=request_body.max_score,
            score_band_label=request_body.score_band,
            report_date=request_body.report_date,
            notes=request_body.notes,
        )
    except ScoreRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CreditItemValidationError as e:
        raise validation_error(e)

    try:
        saved = await client.save_imported_score(
            {
                "score": imported.score,
                "bureau": imported.bureau,
                "score_band": imported.score_band,
                "min_score": imported.min_score,
                "max_score": imported.max_score,
                "report_date": imported.report_date,
                "notes": imported.notes,
            }
        )
    except UpstreamError as e:
        raise_upstream(e, request_id)

    if saved:
        imported = replace(imported, id=saved.get("id"))
    session.imported_score = imported
    return _with_preview_impact(session, imported).to_dict()


@router.delete("/imported-score")
async def delete_imported_score(
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    try:
        await client.delete_imported_score()
    except UpstreamError as e:
        raise_upstream(e, get_request_id(request))
    session.imported_score = None
    return {"message": "Imported score removed"}


@router.post("/simulate-score-impact", response_model=ScoreImpactSimulationResponse)
async def simulate_impact(
    request_body: SimulateRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Estimate how the proposed items move the imported bureau score"""
    try:
        items = coerce_credit_items(request_body.credit_items)
    except CreditItemValidationError as e:
        raise validation_error(e)

    await load_session(session, client, get_request_id(request))
    if session.imported_score is None:
        raise HTTPException(status_code=404, detail="No imported credit score")
    return simulate_score_impact(session.imported_score, session.require_portfolio(), items)
