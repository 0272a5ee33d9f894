"""Scenario preview overlay - swaps displayed totals for a saved scenario's projection"""

from typing import Optional, Sequence

from depco_simulator.domain.exceptions import ScenarioNotFoundError
from depco_simulator.domain.models import CreditPortfolio, CreditScenario, PortfolioView
from depco_simulator.domain.risk import classify
from depco_simulator.utils.money import or_zero, round1


def find_scenario(scenarios: Sequence[CreditScenario], scenario_id: int) -> Optional[CreditScenario]:
    return next((s for s in scenarios if s.id == scenario_id), None)


def current_view(portfolio: CreditPortfolio) -> PortfolioView:
    """The Idle display: real totals, no deltas"""
    return PortfolioView(
        previewing=False,
        scenario_id=None,
        scenario_name=None,
        total_credit_used=portfolio.total_credit_used,
        total_monthly_payments=portfolio.total_monthly_payments,
        dti_ratio=portfolio.dti_ratio,
        dti_status=portfolio.dti_status,
        risk_level=portfolio.risk_level,
    )


def scenario_view(portfolio: CreditPortfolio, scenario: CreditScenario) -> PortfolioView:
    """
    Display a scenario's cached projection over the live portfolio.

    Displayed totals are the values cached when the scenario was saved.
    Deltas are recomputed against the portfolio passed in, so they track
    changes made to real accounts after the scenario was saved.
    """
    projected_debt = or_zero(scenario.projected_total_debt)
    projected_payments = or_zero(scenario.projected_monthly_payment)
    projected_dti = or_zero(scenario.projected_dti)
    labels = classify(projected_dti)

    return PortfolioView(
        previewing=True,
        scenario_id=scenario.id,
        scenario_name=scenario.name,
        total_credit_used=projected_debt,
        total_monthly_payments=projected_payments,
        dti_ratio=projected_dti,
        dti_status=labels.status,
        risk_level=labels.risk_level,
        debt_delta=projected_debt - portfolio.total_credit_used,
        payment_delta=projected_payments - portfolio.total_monthly_payments,
        dti_delta=round1(projected_dti - portfolio.dti_ratio),
        scenario_items=list(scenario.credit_items),
    )


class ScenarioPreview:
    """
    Preview selection state machine.

    States:
    - Idle: active_scenario_id is None, portfolio shows current values
    - Previewing(s): portfolio shows scenario s's cached projection

    Selecting the active scenario again, or calling exit(), returns to
    Idle. Selecting another scenario switches directly. The portfolio and
    scenarios are never modified; render() only reads them.
    """

    def __init__(self):
        self.active_scenario_id: Optional[int] = None

    @property
    def is_previewing(self) -> bool:
        return self.active_scenario_id is not None

    def select(self, scenario_id: int, scenarios: Sequence[CreditScenario]) -> Optional[int]:
        """Toggle preview for scenario_id; returns the new active id"""
        if find_scenario(scenarios, scenario_id) is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")

        if self.active_scenario_id == scenario_id:
            self.active_scenario_id = None
        else:
            self.active_scenario_id = scenario_id
        return self.active_scenario_id

    def exit(self) -> None:
        self.active_scenario_id = None

    def forget(self, scenario_id: int) -> None:
        """Drop the selection if the scenario it points at was deleted"""
        if self.active_scenario_id == scenario_id:
            self.active_scenario_id = None

    def render(self, portfolio: CreditPortfolio, scenarios: Sequence[CreditScenario]) -> PortfolioView:
        if self.active_scenario_id is None:
            return current_view(portfolio)

        scenario = find_scenario(scenarios, self.active_scenario_id)
        if scenario is None:
            # Previewed scenario no longer exists
            self.active_scenario_id = None
            return current_view(portfolio)

        return scenario_view(portfolio, scenario)
