"""Multi-item "what if" simulation over the current portfolio"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from depco_simulator.domain.amortization import coerce_credit_items, price_credit_item
from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.domain.models import CreditItem, CreditPortfolio, CreditScenario, SimulationResult
from depco_simulator.domain.risk import affordability, classify
from depco_simulator.utils.date_utils import parse_timestamp, utc_now
from depco_simulator.utils.money import format_currency, percent_of, round1

ProposedItems = Sequence[Union[CreditItem, Dict[str, Any]]]


def simulate(portfolio: CreditPortfolio, proposed_items: ProposedItems) -> SimulationResult:
    """
    Project the portfolio after taking on every proposed credit item.

    Flow:
    1. Validate all items (nothing is computed if any item fails)
    2. Price each item with the amortization calculator
    3. Add new credit and new payments onto current totals
    4. Re-derive DTI and classify it
    5. Attach affordability tier, recommendation and remaining income

    remaining_monthly is income minus projected payments and is negative
    when the user would be overextended.

    Raises:
        CreditItemValidationError: naming the first offending item and field
    """
    items = coerce_credit_items(proposed_items)
    priced = [price_credit_item(item) for item in items]

    total_new_credit = sum(p.item.amount for p in priced)
    total_new_payment = sum(p.monthly_payment for p in priced)
    total_new_interest = sum(p.total_interest for p in priced)

    projected_debt = portfolio.total_credit_used + total_new_credit
    projected_payments = portfolio.total_monthly_payments + total_new_payment
    projected_dti = percent_of(projected_payments, portfolio.monthly_income)

    labels = classify(projected_dti)
    affordability_status, recommendation = affordability(labels.risk_level)

    return SimulationResult(
        current_total_debt=portfolio.total_credit_used,
        current_monthly_payments=portfolio.total_monthly_payments,
        current_dti=portfolio.dti_ratio,
        projected_total_debt=projected_debt,
        projected_monthly_payments=projected_payments,
        projected_dti=projected_dti,
        debt_increase=projected_debt - portfolio.total_credit_used,
        payment_increase=projected_payments - portfolio.total_monthly_payments,
        dti_increase=round1(projected_dti - portfolio.dti_ratio),
        new_credit_items=priced,
        total_new_credit=total_new_credit,
        total_new_interest=total_new_interest,
        total_new_monthly_payment=total_new_payment,
        projected_status=labels.status,
        risk_level=labels.risk_level,
        affordability_status=affordability_status,
        recommendation=recommendation,
        remaining_monthly=portfolio.monthly_income - projected_payments,
        monthly_income=portfolio.monthly_income,
    )


def build_scenario(
    portfolio: CreditPortfolio,
    name: str,
    proposed_items: ProposedItems,
    description: Optional[str] = None,
    scenario_id: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> CreditScenario:
    """
    Simulate then package the result as a saveable scenario.

    Projections are cached on the scenario so previews reuse exactly what
    was saved instead of re-running the engine.
    """
    if not name or not name.strip():
        raise CreditItemValidationError("name", "must not be blank")

    result = simulate(portfolio, proposed_items)
    return CreditScenario(
        id=scenario_id,
        name=name.strip(),
        description=description,
        credit_items=[p.item for p in result.new_credit_items],
        projected_total_debt=result.projected_total_debt,
        projected_monthly_payment=result.projected_monthly_payments,
        projected_dti=result.projected_dti,
        projected_total_interest=result.total_new_interest,
        risk_level=result.risk_level,
        created_at=created_at or utc_now(),
    )


def update_scenario(
    portfolio: CreditPortfolio,
    scenario: CreditScenario,
    proposed_items: ProposedItems,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> CreditScenario:
    """Replace a scenario's items and recompute its cached projections"""
    return build_scenario(
        portfolio,
        name if name is not None else scenario.name,
        proposed_items,
        description=description if description is not None else scenario.description,
        scenario_id=scenario.id,
        created_at=scenario.created_at,
    )


def scenario_from_payload(payload: Dict[str, Any]) -> CreditScenario:
    """Build a CreditScenario from the lending API's saved-scenario JSON"""
    items = coerce_credit_items(payload.get("credit_items") or [])
    return CreditScenario(
        id=payload.get("id"),
        name=payload.get("name", ""),
        description=payload.get("description"),
        credit_items=items,
        projected_total_debt=payload.get("projected_total_debt"),
        projected_monthly_payment=payload.get("projected_monthly_payment"),
        projected_dti=payload.get("projected_dti"),
        projected_total_interest=payload.get("projected_total_interest"),
        risk_level=payload.get("risk_level"),
        created_at=parse_timestamp(payload.get("created_at")),
    )


def compare_scenarios(portfolio: CreditPortfolio, scenarios: Sequence[CreditScenario]) -> Dict[str, Any]:
    """
    Price several saved scenarios against the same current portfolio.

    Best scenario: lowest projected DTI, then lowest new interest, then
    the earliest in the input order.
    """
    if not scenarios:
        raise CreditItemValidationError("scenario_ids", "must contain at least one scenario")

    rows: List[Dict[str, Any]] = []
    for scenario in scenarios:
        result = simulate(portfolio, scenario.credit_items)
        rows.append(
            {
                "id": scenario.id,
                "name": scenario.name,
                "total_debt": result.projected_total_debt,
                "monthly_payments": result.projected_monthly_payments,
                "new_credit": result.total_new_credit,
                "new_interest": result.total_new_interest,
                "dti": result.projected_dti,
                "risk_level": result.risk_level,
                "remaining_monthly": result.remaining_monthly,
                "credit_items": [item.to_dict() for item in scenario.credit_items],
            }
        )

    best = min(rows, key=lambda row: (row["dti"], row["new_interest"]))
    current = classify(portfolio.dti_ratio)

    return {
        "current": {
            "name": "Current portfolio",
            "total_debt": portfolio.total_credit_used,
            "monthly_payments": portfolio.total_monthly_payments,
            "dti": portfolio.dti_ratio,
            "risk_level": current.risk_level,
            "remaining_monthly": portfolio.monthly_income - portfolio.total_monthly_payments,
        },
        "scenarios": rows,
        "monthly_income": portfolio.monthly_income,
        "recommendation": {
            "best_scenario_id": best["id"],
            "best_scenario_name": best["name"],
            "reason": (
                f"Lowest projected DTI ({best['dti']}%) with "
                f"{format_currency(best['new_interest'])} in new interest"
            ),
        },
    }
