"""Domain models - pure Python dataclasses representing credit entities"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import List, Optional


class CreditItemType(str, Enum):
    """Categories of credit a user can hold or propose"""

    STORE_CARD = "store_card"
    CREDIT_CARD = "credit_card"
    PERSONAL_LOAN = "personal_loan"
    CLOTHING_ACCOUNT = "clothing_account"
    FURNITURE_ACCOUNT = "furniture_account"
    VEHICLE_FINANCE = "vehicle_finance"
    BUY_NOW_PAY_LATER = "buy_now_pay_later"
    OTHER = "other"


# Short wire names used by older clients
CREDIT_ITEM_TYPE_ALIASES = {"bnpl": CreditItemType.BUY_NOW_PAY_LATER}


@dataclass(frozen=True)
class CreditItem:
    """One proposed unit of credit"""

    type: CreditItemType
    provider: str
    amount: float
    interest_rate: float  # annual percentage rate
    term_months: int

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "provider": self.provider,
            "amount": self.amount,
            "interest_rate": self.interest_rate,
            "term_months": self.term_months,
        }


@dataclass(frozen=True)
class PricedCreditItem:
    """Credit item with its amortized cost"""

    item: CreditItem
    monthly_payment: int
    total_interest: int
    total_repayment: int

    def to_dict(self) -> dict:
        return {
            **self.item.to_dict(),
            "monthly_payment": self.monthly_payment,
            "total_interest": self.total_interest,
            "total_repayment": self.total_repayment,
        }


@dataclass(frozen=True)
class ExternalAccount:
    """Existing credit account reported by the user"""

    id: Optional[int]
    account_type: str
    provider_name: str
    credit_limit: Optional[float]
    current_balance: float
    interest_rate: float
    minimum_payment: float
    payment_status: str = "on_time"  # on_time | late | in_arrears
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.account_type,
            "provider": self.provider_name,
            "balance": self.current_balance,
            "limit": self.credit_limit,
            "monthly_payment": self.minimum_payment,
            "interest_rate": self.interest_rate,
            "status": self.payment_status,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class DepcoLoan:
    """Loan issued by the platform; read-only for the simulator"""

    id: Optional[int]
    purpose: str
    amount_requested: float
    monthly_payment: float
    interest_rate: float
    term_months: int
    status: str  # pending | approved | active | paid_off | defaulted | rejected
    amount_approved: Optional[float] = None
    paid_months: Optional[int] = None

    @property
    def exposure(self) -> float:
        return self.amount_approved if self.amount_approved is not None else self.amount_requested

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "purpose": self.purpose,
            "amount": self.exposure,
            "monthly_payment": self.monthly_payment,
            "interest_rate": self.interest_rate,
            "term_months": self.term_months,
            "status": self.status,
            "paid_months": self.paid_months,
        }


@dataclass(frozen=True)
class RiskClassification:
    """Dual-axis DTI label: status colours the DTI bar, risk_level badges scenarios"""

    status: str  # safe | caution | risky
    risk_level: str  # low | moderate | high | very_high


@dataclass(frozen=True)
class CreditPortfolio:
    """Aggregate view over a user's platform loans and external accounts"""

    depco_loans: List[DepcoLoan]
    depco_total_balance: float
    depco_monthly_payment: float
    external_accounts: List[ExternalAccount]
    external_total_balance: float
    external_monthly_payment: float
    total_credit_used: float
    total_monthly_payments: float
    monthly_income: float
    dti_ratio: float
    dti_status: str
    risk_level: str

    def to_dict(self) -> dict:
        return {
            "depco_loans": [loan.to_dict() for loan in self.depco_loans],
            "depco_total_balance": self.depco_total_balance,
            "depco_monthly_payment": self.depco_monthly_payment,
            "external_accounts": [acc.to_dict() for acc in self.external_accounts],
            "external_total_balance": self.external_total_balance,
            "external_monthly_payment": self.external_monthly_payment,
            "total_credit_used": self.total_credit_used,
            "total_monthly_payments": self.total_monthly_payments,
            "monthly_income": self.monthly_income,
            "dti_ratio": self.dti_ratio,
            "dti_status": self.dti_status,
            "risk_level": self.risk_level,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Projected portfolio after adding a set of proposed credit items"""

    current_total_debt: float
    current_monthly_payments: float
    current_dti: float
    projected_total_debt: float
    projected_monthly_payments: float
    projected_dti: float
    debt_increase: float
    payment_increase: float
    dti_increase: float
    new_credit_items: List[PricedCreditItem]
    total_new_credit: float
    total_new_interest: int
    total_new_monthly_payment: int
    projected_status: str
    risk_level: str
    affordability_status: str
    recommendation: str
    remaining_monthly: float
    monthly_income: float

    def to_dict(self) -> dict:
        data = {
            key: value
            for key, value in asdict(self).items()
            if key not in ("new_credit_items", "projected_status", "monthly_income")
        }
        data["new_credit_items"] = [item.to_dict() for item in self.new_credit_items]
        return data


@dataclass(frozen=True)
class CreditScenario:
    """Saved bundle of credit items with projections cached at save time"""

    id: Optional[int]
    name: str
    description: Optional[str]
    credit_items: List[CreditItem]
    projected_total_debt: Optional[float]
    projected_monthly_payment: Optional[float]
    projected_dti: Optional[float]
    projected_total_interest: Optional[float]
    risk_level: Optional[str]
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "credit_items": [item.to_dict() for item in self.credit_items],
            "projected_total_debt": self.projected_total_debt,
            "projected_monthly_payment": self.projected_monthly_payment,
            "projected_dti": self.projected_dti,
            "projected_total_interest": self.projected_total_interest,
            "risk_level": self.risk_level,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class PortfolioView:
    """What the portfolio panel shows: current values, or a scenario's projection"""

    previewing: bool
    scenario_id: Optional[int]
    scenario_name: Optional[str]
    total_credit_used: float
    total_monthly_payments: float
    dti_ratio: float
    dti_status: str
    risk_level: str
    debt_delta: float = 0
    payment_delta: float = 0
    dti_delta: float = 0
    scenario_items: List[CreditItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["scenario_items"] = [item.to_dict() for item in self.scenario_items]
        return data


@dataclass(frozen=True)
class ScoreImpactFactor:
    """One contributor to a projected score change"""

    factor: str
    impact: int
    description: str


@dataclass(frozen=True)
class ProjectedScoreImpact:
    """Heuristic estimate of how new credit moves a bureau score"""

    current_score: int
    projected_score: int
    total_impact: int
    factors: List[ScoreImpactFactor]
    confidence: str  # low | medium | high
    note: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ImportedCreditScore:
    """Self-reported bureau score"""

    score: int
    bureau: str
    min_score: int
    max_score: int
    normalized_score: float
    score_band: Optional[str] = None
    id: Optional[int] = None
    report_date: Optional[str] = None
    notes: Optional[str] = None
    projected_impact: Optional[ProjectedScoreImpact] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "score": self.score,
            "score_band": self.score_band,
            "bureau": self.bureau,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "normalized_score": self.normalized_score,
            "report_date": self.report_date,
            "notes": self.notes,
            "projected_impact": self.projected_impact.to_dict() if self.projected_impact else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
