"""Unit tests for portfolio aggregation"""

from depco_simulator.domain.models import DepcoLoan, ExternalAccount
from depco_simulator.domain.portfolio import (
    aggregate_portfolio,
    portfolio_from_payload,
    repayment_progress,
    utilization_ratio,
)


def _loan(status: str, requested: float = 10000, approved=None, payment: float = 900, paid_months=None) -> DepcoLoan:
    return DepcoLoan(
        id=1,
        purpose="rental_deposit",
        amount_requested=requested,
        amount_approved=approved,
        monthly_payment=payment,
        interest_rate=18,
        term_months=12,
        status=status,
        paid_months=paid_months,
    )


def _account(balance: float, payment: float, active: bool = True, limit=None) -> ExternalAccount:
    return ExternalAccount(
        id=2,
        account_type="store_card",
        provider_name="Woolworths",
        credit_limit=limit,
        current_balance=balance,
        interest_rate=21,
        minimum_payment=payment,
        is_active=active,
    )


def test_aggregate_portfolio_totals():
    """Approved amount wins over requested; inactive accounts and rejected loans are skipped"""
    portfolio = aggregate_portfolio(
        [_loan("active", approved=8000), _loan("rejected"), _loan("pending", requested=2000, payment=200)],
        [_account(12000, 1500), _account(5000, 400, active=False)],
        10000,
    )

    assert portfolio.depco_total_balance == 10000
    assert portfolio.depco_monthly_payment == 1100
    assert portfolio.external_total_balance == 12000
    assert portfolio.total_credit_used == 22000
    assert portfolio.total_monthly_payments == 2600
    assert portfolio.dti_ratio == 26.0
    assert portfolio.dti_status == "safe"
    assert portfolio.risk_level == "low"


def test_aggregate_portfolio_all_statuses():
    portfolio = aggregate_portfolio([_loan("active"), _loan("paid_off")], [], 10000, exposure_statuses=None)
    assert portfolio.depco_total_balance == 20000


def test_aggregate_portfolio_zero_income():
    portfolio = aggregate_portfolio([], [_account(12000, 1500)], 0)

    assert portfolio.dti_ratio == 0.0
    assert portfolio.dti_status == "safe"

    missing = aggregate_portfolio([], [_account(12000, 1500)], None)
    assert missing.dti_ratio == 0.0
    assert missing.monthly_income == 0


def test_dti_monotonic_in_payments():
    previous = -1.0
    for payment in range(0, 12000, 250):
        dti = aggregate_portfolio([], [_account(1000, payment)], 9000).dti_ratio
        assert dti >= previous
        previous = dti


def test_portfolio_from_payload_recomputes_totals(portfolio_payload):
    portfolio = portfolio_from_payload(portfolio_payload)

    assert portfolio.total_credit_used == 20000
    assert portfolio.total_monthly_payments == 2500
    assert portfolio.dti_ratio == 25.0
    assert len(portfolio.depco_loans) == 1
    assert portfolio.external_accounts[0].credit_limit == 15000
    assert portfolio.to_dict()["external_accounts"][0]["provider"] == "Woolworths"


def test_repayment_progress_defaults_missing_paid_months():
    assert repayment_progress(_loan("active", paid_months=3)) == 25.0
    assert repayment_progress(_loan("active")) == 0.0
    assert repayment_progress(_loan("active", paid_months=20)) == 100.0


def test_utilization_ratio():
    assert utilization_ratio(_account(12000, 1500, limit=15000)) == 80.0
    assert utilization_ratio(_account(12000, 1500)) is None
