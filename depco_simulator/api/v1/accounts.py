"""/v1/external-accounts - add, edit and remove accounts held at other lenders"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from depco_simulator.api.dependencies import (
    get_lending_client,
    get_request_id,
    get_session,
    load_session,
    raise_upstream,
)
from depco_simulator.api.v1.schemas import (
    ExternalAccountRequest,
    ExternalAccountSchema,
    ExternalAccountWriteResponse,
)
from depco_simulator.api.v1.simulate import validation_error
from depco_simulator.domain.exceptions import CreditItemValidationError, UpstreamError
from depco_simulator.domain.models import ExternalAccount
from depco_simulator.domain.portfolio import parse_external_account
from depco_simulator.domain.validation import validate_account_fields
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.session import SimulatorSession

router = APIRouter()


def _parse_account(payload: dict, operation: str) -> ExternalAccount:
    try:
        return parse_external_account(payload)
    except (CreditItemValidationError, ValueError, TypeError) as e:
        raise UpstreamError(operation, f"invalid account from lending API: {e}") from e


async def _write_response(
    session: SimulatorSession,
    client: LendingApiClient,
    request_id: str,
    account: ExternalAccount | None = None,
) -> dict:
    """Recompute the portfolio after a write so totals and DTI include the change"""
    await load_session(session, client, request_id)
    portfolio = session.require_portfolio()
    return {
        "account": account.to_dict() if account else None,
        "portfolio": {**portfolio.to_dict(), "stale": session.stale},
    }


@router.get("/external-accounts", response_model=List[ExternalAccountSchema])
async def list_external_accounts(
    request: Request,
    client: LendingApiClient = Depends(get_lending_client),
):
    """All reported accounts, including inactive ones that do not count towards DTI"""
    try:
        payloads = await client.list_external_accounts()
        accounts = [_parse_account(p, "list_external_accounts") for p in payloads]
    except UpstreamError as e:
        raise_upstream(e, get_request_id(request))
    return [account.to_dict() for account in accounts]


@router.post("/external-accounts", response_model=ExternalAccountWriteResponse, status_code=201)
async def add_external_account(
    request_body: ExternalAccountRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """
    Add an existing account held at another lender.

    Balance, payment, rate and limit must be non-negative numbers; nothing
    is sent upstream if any field fails.
    """
    request_id = get_request_id(request)
    try:
        body = validate_account_fields(request_body.model_dump(exclude_none=True))
    except CreditItemValidationError as e:
        raise validation_error(e)

    try:
        saved = await client.create_external_account(body)
        account = _parse_account(saved or {**body, "id": None}, "create_external_account")
    except UpstreamError as e:
        raise_upstream(e, request_id)

    logging.info(
        "External account added",
        extra={"request_id": request_id, "step": "account_added", "account_id": account.id},
    )
    return await _write_response(session, client, request_id, account)


@router.put("/external-accounts/{account_id}", response_model=ExternalAccountWriteResponse)
async def edit_external_account(
    account_id: int,
    request_body: ExternalAccountRequest,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    """Edit balance, rate, payment, status or active flag; only supplied fields change"""
    request_id = get_request_id(request)
    try:
        body = validate_account_fields(request_body.model_dump(exclude_unset=True), partial=True)
    except CreditItemValidationError as e:
        raise validation_error(e)

    try:
        saved = await client.update_external_account(account_id, body)
        account = _parse_account(saved, "update_external_account") if saved else None
    except UpstreamError as e:
        raise_upstream(e, request_id)

    return await _write_response(session, client, request_id, account)


@router.delete("/external-accounts/{account_id}", response_model=ExternalAccountWriteResponse)
async def delete_external_account(
    account_id: int,
    request: Request,
    session: SimulatorSession = Depends(get_session),
    client: LendingApiClient = Depends(get_lending_client),
):
    request_id = get_request_id(request)
    try:
        await client.delete_external_account(account_id)
    except UpstreamError as e:
        raise_upstream(e, request_id)

    return await _write_response(session, client, request_id)
