"""POST /v1/simulate - multi-item what-if simulation"""

import time

from fastapi import APIRouter, Depends, HTTPException, Request

from depco_simulator.api.dependencies import get_lending_client, get_request_id, get_session, load_session
from depco_simulator.api.v1.schemas import SimulateRequest, SimulationResponse
from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.domain.amortization import coerce_credit_items
from depco_simulator.domain.scenarios import simulate
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.infrastructure.observability.logging import log_simulation
from depco_simulator.infrastructure.observability.metrics import record_simulation, record_validation_rejection
from depco_simulator.session import SimulatorSession

router = APIRouter()


def validation_error(e: CreditItemValidationError) -> HTTPException:
    record_validation_rejection(e.field)
    return HTTPException(status_code=422, detail=e.to_dict())


@router.post("/simulate", response_model=SimulationResponse)
async def simulate_credit(
    request_body: SimulateRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """
    Project the portfolio after adding the proposed credit items.

    Flow:
    1. Validate every item before touching the portfolio
    2. Refresh the portfolio (stale snapshot is used if the API is down)
    3. Return projected totals, deltas, risk level and recommendation

    Nothing is saved; use POST /v1/scenarios to keep the result.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        items = coerce_credit_items(request_body.credit_items)
    except CreditItemValidationError as e:
        raise validation_error(e)

    await load_session(session, client, request_id)
    result = simulate(session.require_portfolio(), items)

    duration_ms = (time.time() - start_time) * 1000
    record_simulation(result.risk_level)
    log_simulation(request_id, len(result.new_credit_items), result.projected_dti, result.risk_level, duration_ms)

    return result.to_dict()
