"""Per-session presentation state: last good snapshot and preview selection"""

import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from depco_simulator.domain.exceptions import (
    CreditItemValidationError,
    ScenarioNotFoundError,
    ScoreRangeError,
    UpstreamError,
)
from depco_simulator.domain.models import CreditPortfolio, CreditScenario, ImportedCreditScore, PortfolioView
from depco_simulator.domain.portfolio import portfolio_from_payload
from depco_simulator.domain.preview import ScenarioPreview, find_scenario
from depco_simulator.domain.scenarios import scenario_from_payload
from depco_simulator.domain.score_impact import import_score
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient
from depco_simulator.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class SimulatorSession:
    """
    Everything one user's simulator screen is showing.

    refresh() replaces portfolio, scenarios and imported score together or
    not at all; a failed fetch leaves the previous snapshot visible and
    marks the session stale.
    """

    portfolio: Optional[CreditPortfolio] = None
    scenarios: List[CreditScenario] = field(default_factory=list)
    imported_score: Optional[ImportedCreditScore] = None
    preview: ScenarioPreview = field(default_factory=ScenarioPreview)
    stale: bool = False

    async def refresh(self, client: LendingApiClient, exposure_statuses: Optional[Iterable[str]] = None) -> None:
        try:
            portfolio_payload = await client.get_portfolio()
            scenario_payloads = await client.list_scenarios()
            score_payload = await client.get_imported_score()
        except UpstreamError:
            self.stale = True
            raise

        # Parse everything before assigning anything
        kwargs = {} if exposure_statuses is None else {"exposure_statuses": exposure_statuses}
        try:
            portfolio = portfolio_from_payload(portfolio_payload or {}, **kwargs)
            scenarios = [scenario_from_payload(p) for p in scenario_payloads]
            imported = score_from_payload(score_payload) if score_payload else None
        except (CreditItemValidationError, ScoreRangeError, AttributeError, TypeError, ValueError) as e:
            self.stale = True
            raise UpstreamError("refresh", f"invalid data from lending API: {e}") from e

        self.portfolio = portfolio
        self.scenarios = scenarios
        self.imported_score = imported
        self.stale = False
        logger.debug("Session refreshed", extra={"scenario_count": len(scenarios)})

    def require_portfolio(self) -> CreditPortfolio:
        if self.portfolio is None:
            raise UpstreamError("get_portfolio", "no portfolio loaded")
        return self.portfolio

    def get_scenario(self, scenario_id: int) -> CreditScenario:
        scenario = find_scenario(self.scenarios, scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        return scenario

    def upsert_scenario(self, scenario: CreditScenario) -> None:
        self.scenarios = [s for s in self.scenarios if s.id != scenario.id] + [scenario]

    def remove_scenario(self, scenario_id: int) -> None:
        self.scenarios = [s for s in self.scenarios if s.id != scenario_id]
        self.preview.forget(scenario_id)

    def toggle_preview(self, scenario_id: int) -> Optional[int]:
        return self.preview.select(scenario_id, self.scenarios)

    def exit_preview(self) -> None:
        self.preview.exit()

    def view(self) -> PortfolioView:
        return self.preview.render(self.require_portfolio(), self.scenarios)


def score_from_payload(payload: dict) -> ImportedCreditScore:
    """Re-validate an imported score returned by the lending API, keeping its timestamps"""
    imported = import_score(
        payload.get("score"),
        bureau=payload.get("bureau", "other"),
        min_score=payload.get("min_score"),
        max_score=payload.get("max_score"),
        score_band_label=payload.get("score_band"),
        report_date=payload.get("report_date"),
        notes=payload.get("notes"),
        score_id=payload.get("id"),
    )
    created_at = parse_timestamp(payload.get("created_at")) or imported.created_at
    updated_at = parse_timestamp(payload.get("updated_at")) or created_at
    return replace(imported, created_at=created_at, updated_at=updated_at)


def session_owner(token: Optional[str]) -> str:
    """Stable, non-reversible identity for the bearer token a session belongs to"""
    if not token:
        return "anonymous"
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionStore:
    """
    In-memory sessions keyed by token owner and X-Session-ID.

    Least recently used sessions are evicted once max_sessions is reached.
    """

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[Tuple[str, str], SimulatorSession] = OrderedDict()

    def get(self, session_id: str, owner: str = "anonymous") -> SimulatorSession:
        key = (owner, session_id)
        if key in self._sessions:
            self._sessions.move_to_end(key)
            return self._sessions[key]

        session = SimulatorSession()
        self._sessions[key] = session
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Session evicted", extra={"session_id": evicted[1]})
        return session

    def drop(self, session_id: str, owner: str = "anonymous") -> None:
        self._sessions.pop((owner, session_id), None)

    def __len__(self) -> int:
        return len(self._sessions)
