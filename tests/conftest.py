"""Pytest fixtures for testing"""

import copy
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from depco_simulator.api.dependencies import get_lending_client
from depco_simulator.api.main import create_app
from depco_simulator.domain.exceptions import UpstreamError
from depco_simulator.domain.models import CreditItem, CreditItemType, CreditPortfolio, ExternalAccount
from depco_simulator.domain.portfolio import aggregate_portfolio


def make_portfolio(total_credit_used: float, total_monthly_payments: float, monthly_income: float) -> CreditPortfolio:
    """Portfolio whose totals come from a single external account"""
    account = ExternalAccount(
        id=1,
        account_type="credit_card",
        provider_name="FNB",
        credit_limit=None,
        current_balance=total_credit_used,
        interest_rate=21,
        minimum_payment=total_monthly_payments,
    )
    return aggregate_portfolio([], [account], monthly_income)


class FakeLendingClient:
    """In-memory stand-in for the lending API"""

    def __init__(self, portfolio: Dict[str, Any]):
        self.portfolio = portfolio
        self.scenarios: List[Dict[str, Any]] = []
        self.imported_score: Optional[Dict[str, Any]] = None
        self.fail = False
        self.fail_status = 503
        self.calls: List[str] = []
        self._next_id = 1
        self._next_account_id = 100

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise UpstreamError(name, f"HTTP error {self.fail_status}", self.fail_status)

    async def get_portfolio(self) -> Dict[str, Any]:
        self._call("get_portfolio")
        return copy.deepcopy(self.portfolio)

    async def list_scenarios(self) -> List[Dict[str, Any]]:
        self._call("list_scenarios")
        return copy.deepcopy(self.scenarios)

    async def create_scenario(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._call("create_scenario")
        saved = {**payload, "id": self._next_id, "created_at": "2026-10-01T09:00:00+00:00"}
        self._next_id += 1
        self.scenarios.append(saved)
        return copy.deepcopy(saved)

    async def update_scenario(self, scenario_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._call("update_scenario")
        for index, existing in enumerate(self.scenarios):
            if existing["id"] == scenario_id:
                self.scenarios[index] = {**existing, **payload}
                return copy.deepcopy(self.scenarios[index])
        raise UpstreamError("update_scenario", "not found", 404)

    async def delete_scenario(self, scenario_id: int) -> None:
        self._call("delete_scenario")
        self.scenarios = [s for s in self.scenarios if s["id"] != scenario_id]

    async def get_imported_score(self) -> Optional[Dict[str, Any]]:
        self._call("get_imported_score")
        return copy.deepcopy(self.imported_score)

    async def save_imported_score(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._call("save_imported_score")
        self.imported_score = {**payload, "id": 1}
        return copy.deepcopy(self.imported_score)

    async def delete_imported_score(self) -> None:
        self._call("delete_imported_score")
        self.imported_score = None

    def _account_index(self, account_id: int, operation: str) -> int:
        for index, account in enumerate(self.portfolio["external_accounts"]):
            if account["id"] == account_id:
                return index
        raise UpstreamError(operation, "not found", 404)

    async def list_external_accounts(self) -> List[Dict[str, Any]]:
        self._call("list_external_accounts")
        return copy.deepcopy(self.portfolio["external_accounts"])

    async def create_external_account(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._call("create_external_account")
        saved = {"is_active": True, "payment_status": "on_time", **payload, "id": self._next_account_id}
        self._next_account_id += 1
        self.portfolio["external_accounts"].append(saved)
        return copy.deepcopy(saved)

    async def update_external_account(self, account_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._call("update_external_account")
        index = self._account_index(account_id, "update_external_account")
        accounts = self.portfolio["external_accounts"]
        accounts[index] = {**accounts[index], **payload}
        return copy.deepcopy(accounts[index])

    async def delete_external_account(self, account_id: int) -> None:
        self._call("delete_external_account")
        index = self._account_index(account_id, "delete_external_account")
        del self.portfolio["external_accounts"][index]


@pytest.fixture
def portfolio_payload() -> Dict[str, Any]:
    """GET /credit/portfolio body: R20,000 debt, R2,500/mo, R10,000 income (DTI 25%)"""
    return {
        "depco_loans": [
            {
                "id": 7,
                "purpose": "rental_deposit",
                "amount": 8000,
                "monthly_payment": 1000,
                "interest_rate": 18,
                "term_months": 12,
                "status": "active",
                "paid_months": 3,
            },
            {
                "id": 8,
                "purpose": "rental_deposit",
                "amount": 5000,
                "monthly_payment": 600,
                "interest_rate": 18,
                "term_months": 12,
                "status": "rejected",
            },
        ],
        "external_accounts": [
            {
                "id": 1,
                "type": "store_card",
                "provider": "Woolworths",
                "balance": 12000,
                "limit": 15000,
                "monthly_payment": 1500,
                "interest_rate": 21,
                "status": "on_time",
            }
        ],
        "monthly_income": 10000,
        # Upstream totals are recomputed locally
        "total_credit_used": 999999,
        "dti_ratio": 99.9,
    }


@pytest.fixture
def current_portfolio() -> CreditPortfolio:
    return make_portfolio(20000, 2500, 10000)


@pytest.fixture
def store_card_item() -> CreditItem:
    return CreditItem(
        type=CreditItemType.STORE_CARD,
        provider="Edgars",
        amount=8000,
        interest_rate=21,
        term_months=12,
    )


@pytest.fixture
def lending_client(portfolio_payload: Dict[str, Any]) -> FakeLendingClient:
    return FakeLendingClient(portfolio_payload)


@pytest.fixture
def client(lending_client: FakeLendingClient) -> TestClient:
    """Create FastAPI test client backed by the fake lending API"""
    app = create_app()
    app.dependency_overrides[get_lending_client] = lambda: lending_client
    return TestClient(app)


@pytest.fixture
def portfolio_factory():
    return make_portfolio
