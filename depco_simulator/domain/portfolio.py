"""Portfolio aggregation - combines platform loans and external accounts"""

from typing import Any, Dict, Iterable, List, Optional

from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.domain.models import CreditPortfolio, DepcoLoan, ExternalAccount
from depco_simulator.domain.risk import classify
from depco_simulator.domain.validation import require_number
from depco_simulator.utils.money import or_zero, percent_of

# Loan statuses that count towards current exposure
DEFAULT_EXPOSURE_STATUSES = frozenset({"pending", "approved", "active"})


def aggregate_portfolio(
    depco_loans: Iterable[DepcoLoan],
    external_accounts: Iterable[ExternalAccount],
    monthly_income: Optional[float],
    exposure_statuses: Optional[Iterable[str]] = DEFAULT_EXPOSURE_STATUSES,
) -> CreditPortfolio:
    """
    Compute current totals and DTI for a user.

    Pure function: re-run whenever accounts or income change.

    Args:
        depco_loans: Platform loans; filtered by exposure_statuses
        external_accounts: Reported accounts; inactive ones are skipped
        monthly_income: Gross monthly income; absent or zero yields DTI 0.0
        exposure_statuses: Loan statuses to count, or None to count all

    Returns:
        CreditPortfolio with totals, DTI ratio and both risk labels
    """
    if exposure_statuses is None:
        loans = list(depco_loans)
    else:
        statuses = set(exposure_statuses)
        loans = [loan for loan in depco_loans if loan.status in statuses]
    accounts = [acc for acc in external_accounts if acc.is_active]

    depco_balance = sum(loan.exposure for loan in loans)
    depco_payment = sum(loan.monthly_payment for loan in loans)
    external_balance = sum(acc.current_balance for acc in accounts)
    external_payment = sum(acc.minimum_payment for acc in accounts)

    total_monthly = depco_payment + external_payment
    income = or_zero(monthly_income)
    dti = percent_of(total_monthly, income)
    labels = classify(dti)

    return CreditPortfolio(
        depco_loans=loans,
        depco_total_balance=depco_balance,
        depco_monthly_payment=depco_payment,
        external_accounts=accounts,
        external_total_balance=external_balance,
        external_monthly_payment=external_payment,
        total_credit_used=depco_balance + external_balance,
        total_monthly_payments=total_monthly,
        monthly_income=income,
        dti_ratio=dti,
        dti_status=labels.status,
        risk_level=labels.risk_level,
    )


def repayment_progress(loan: DepcoLoan) -> float:
    """Percent of the loan term already paid, capped at 100"""
    if loan.term_months <= 0:
        return 0.0
    return min(percent_of(or_zero(loan.paid_months), loan.term_months), 100.0)


def utilization_ratio(account: ExternalAccount) -> Optional[float]:
    """Balance as a percent of credit limit; None when the account has no limit"""
    if not account.credit_limit:
        return None
    return percent_of(account.current_balance, account.credit_limit)


def _number(payload: Dict[str, Any], *keys: str, default: Optional[float] = None) -> Optional[float]:
    for key in keys:
        if payload.get(key) is not None:
            return require_number(payload[key], key)
    return default


def parse_depco_loan(payload: Dict[str, Any]) -> DepcoLoan:
    """Build a DepcoLoan from the lending API's loan JSON"""
    requested = _number(payload, "amount_requested", "amount")
    if requested is None:
        raise CreditItemValidationError("amount", "is required on depco loan")
    return DepcoLoan(
        id=payload.get("id"),
        purpose=payload.get("purpose", ""),
        amount_requested=requested,
        amount_approved=_number(payload, "amount_approved"),
        monthly_payment=_number(payload, "monthly_payment", default=0),
        interest_rate=_number(payload, "interest_rate", default=0),
        term_months=int(_number(payload, "term_months", default=0)),
        status=payload.get("status", "pending"),
        paid_months=payload.get("paid_months"),
    )


def parse_external_account(payload: Dict[str, Any]) -> ExternalAccount:
    """Build an ExternalAccount from either the account or portfolio JSON shape"""
    balance = _number(payload, "current_balance", "balance")
    if balance is None:
        raise CreditItemValidationError("current_balance", "is required on external account")
    return ExternalAccount(
        id=payload.get("id"),
        account_type=payload.get("account_type") or payload.get("type", "other"),
        provider_name=payload.get("provider_name") or payload.get("provider", ""),
        credit_limit=_number(payload, "credit_limit", "limit"),
        current_balance=balance,
        interest_rate=_number(payload, "interest_rate", default=0),
        minimum_payment=_number(payload, "minimum_payment", "monthly_payment", default=0),
        payment_status=payload.get("payment_status") or payload.get("status", "on_time"),
        is_active=payload.get("is_active", True),
    )


def portfolio_from_payload(
    payload: Dict[str, Any],
    exposure_statuses: Optional[Iterable[str]] = DEFAULT_EXPOSURE_STATUSES,
) -> CreditPortfolio:
    """
    Re-aggregate a GET /credit/portfolio response locally.

    Upstream totals are ignored so DTI rounding and thresholds are always
    the ones defined in this package.
    """
    loans: List[DepcoLoan] = [parse_depco_loan(item) for item in payload.get("depco_loans", [])]
    accounts: List[ExternalAccount] = [
        parse_external_account(item) for item in payload.get("external_accounts", [])
    ]
    return aggregate_portfolio(
        loans,
        accounts,
        _number(payload, "monthly_income"),
        exposure_statuses=exposure_statuses,
    )
