"""
E2E tests for borrower personas driving the full simulator flow.

Each persona swaps the lending API's portfolio body before the first request.

Borrower personas:
- comfortable: high income, one small rental deposit loan
- stretched: already near the caution line, considering a personal loan
- no_income: income not captured yet, DTI must resolve to 0
- applicant: pending deposit loan counts, rejected one does not
"""

import pytest
from fastapi.testclient import TestClient

EDGARS = {"type": "store_card", "provider": "Edgars", "amount": 8000, "interest_rate": 21, "term_months": 12}
ABSA = {"type": "personal_loan", "provider": "ABSA", "amount": 40000, "interest_rate": 18, "term_months": 24}


def _deposit_loan(status: str, monthly_payment: float = 1000) -> dict:
    return {
        "id": 1,
        "purpose": "rental_deposit",
        "amount": 8000,
        "monthly_payment": monthly_payment,
        "interest_rate": 18,
        "term_months": 12,
        "status": status,
    }


def _account(balance: float, monthly_payment: float) -> dict:
    return {
        "id": 1,
        "type": "credit_card",
        "provider": "FNB",
        "balance": balance,
        "monthly_payment": monthly_payment,
        "interest_rate": 21,
        "status": "on_time",
    }


@pytest.mark.integration
def test_comfortable_borrower_stays_safe(client: TestClient, lending_client):
    """
    comfortable: R40,000 income, R1,000/mo deposit loan
    Expected: store card keeps them well inside the safe band
    """
    lending_client.portfolio = {
        "depco_loans": [_deposit_loan("active")],
        "external_accounts": [],
        "monthly_income": 40000,
    }

    portfolio = client.get("/v1/portfolio").json()
    assert portfolio["dti_ratio"] == 2.5
    assert portfolio["risk_level"] == "low"

    data = client.post("/v1/simulate", json={"credit_items": [EDGARS]}).json()
    assert data["projected_dti"] == 4.4
    assert data["risk_level"] == "low"
    assert data["affordability_status"] == "comfortable"


@pytest.mark.integration
def test_stretched_borrower_overextended(client: TestClient, lending_client):
    """
    stretched: R4,800/mo on R10,000 income (48%)
    Expected: a R40,000 personal loan pushes them past 50%
    """
    lending_client.portfolio = {
        "depco_loans": [],
        "external_accounts": [_account(30000, 4800)],
        "monthly_income": 10000,
    }

    portfolio = client.get("/v1/portfolio").json()
    assert portfolio["dti_ratio"] == 48.0
    assert portfolio["dti_status"] == "caution"
    assert portfolio["risk_level"] == "high"

    data = client.post("/v1/simulate", json={"credit_items": [ABSA]}).json()
    assert data["projected_dti"] > 50
    assert data["risk_level"] == "very_high"
    assert data["affordability_status"] == "overextended"
    assert data["remaining_monthly"] < 5200


@pytest.mark.integration
def test_no_income_borrower_dti_zero(client: TestClient, lending_client):
    """
    no_income: income not captured
    Expected: DTI is 0.0 rather than an error or infinity
    """
    lending_client.portfolio = {
        "depco_loans": [_deposit_loan("active")],
        "external_accounts": [],
        "monthly_income": 0,
    }

    portfolio = client.get("/v1/portfolio").json()
    assert portfolio["dti_ratio"] == 0.0
    assert portfolio["dti_status"] == "safe"

    data = client.post("/v1/simulate", json={"credit_items": [EDGARS]}).json()
    assert data["projected_dti"] == 0.0
    assert data["dti_increase"] == 0.0


@pytest.mark.integration
def test_applicant_pending_loan_counts(client: TestClient, lending_client):
    """
    applicant: one pending and one rejected deposit loan
    Expected: only the pending loan contributes to exposure
    """
    lending_client.portfolio = {
        "depco_loans": [_deposit_loan("pending"), {**_deposit_loan("rejected", 600), "id": 2}],
        "external_accounts": [],
        "monthly_income": 10000,
    }

    portfolio = client.get("/v1/portfolio").json()
    assert len(portfolio["depco_loans"]) == 1
    assert portfolio["depco_monthly_payment"] == 1000
    assert portfolio["dti_ratio"] == 10.0
