"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SimulateRequest(BaseModel):
    """Request body for POST /v1/simulate and /v1/simulate-score-impact"""

    # Items are validated by the domain so errors name the item index and field
    credit_items: List[Dict[str, Any]]


class ScenarioRequest(BaseModel):
    """Request body for POST /v1/scenarios and PUT /v1/scenarios/{id}"""

    name: str = Field(..., min_length=1, description="Scenario name")
    description: Optional[str] = None
    credit_items: List[Dict[str, Any]]


class CompareRequest(BaseModel):
    """Request body for POST /v1/scenarios/compare"""

    scenario_ids: List[int] = Field(..., min_length=1)


class ImportScoreRequest(BaseModel):
    """Request body for POST /v1/imported-score"""

    score: float
    bureau: str = "transunion"
    score_band: Optional[str] = None
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    report_date: Optional[str] = None
    notes: Optional[str] = None


class ExternalAccountRequest(BaseModel):
    """Request body for POST /v1/external-accounts and PUT /v1/external-accounts/{id}"""

    # Fields are validated by the domain so errors name the offending field
    account_type: Optional[str] = None
    provider_name: Optional[str] = None
    credit_limit: Any = None
    current_balance: Any = None
    interest_rate: Any = None
    minimum_payment: Any = None
    payment_status: Optional[str] = None
    is_active: Any = None


class CreditItemSchema(BaseModel):
    """Credit item as sent and returned on the wire"""

    type: str
    provider: str
    amount: float
    interest_rate: float
    term_months: int


class PricedCreditItemSchema(CreditItemSchema):
    """Credit item with its amortized cost"""

    monthly_payment: int
    total_interest: int
    total_repayment: int


class DepcoLoanSchema(BaseModel):
    id: Optional[int] = None
    purpose: str
    amount: float
    monthly_payment: float
    interest_rate: float
    term_months: int
    status: str
    paid_months: Optional[int] = None


class ExternalAccountSchema(BaseModel):
    id: Optional[int] = None
    type: str
    provider: str
    balance: float
    limit: Optional[float] = None
    monthly_payment: float
    interest_rate: float
    status: str
    is_active: bool = True


class PortfolioResponse(BaseModel):
    """Response for GET /v1/portfolio"""

    depco_loans: List[DepcoLoanSchema]
    depco_total_balance: float
    depco_monthly_payment: float
    external_accounts: List[ExternalAccountSchema]
    external_total_balance: float
    external_monthly_payment: float
    total_credit_used: float
    total_monthly_payments: float
    monthly_income: float
    dti_ratio: float
    dti_status: str
    risk_level: str
    stale: bool = False


class SimulationResponse(BaseModel):
    """Response for POST /v1/simulate"""

    current_total_debt: float
    current_monthly_payments: float
    current_dti: float
    projected_total_debt: float
    projected_monthly_payments: float
    projected_dti: float
    debt_increase: float
    payment_increase: float
    dti_increase: float
    new_credit_items: List[PricedCreditItemSchema]
    total_new_credit: float
    total_new_interest: int
    total_new_monthly_payment: int
    risk_level: str
    affordability_status: str
    recommendation: str
    remaining_monthly: float


class ScenarioResponse(BaseModel):
    """Saved scenario with cached projections"""

    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    credit_items: List[CreditItemSchema]
    projected_total_debt: Optional[float] = None
    projected_monthly_payment: Optional[float] = None
    projected_dti: Optional[float] = None
    projected_total_interest: Optional[float] = None
    risk_level: Optional[str] = None
    created_at: Optional[str] = None


class PortfolioViewResponse(BaseModel):
    """Response for GET /v1/portfolio/view"""

    previewing: bool
    scenario_id: Optional[int] = None
    scenario_name: Optional[str] = None
    total_credit_used: float
    total_monthly_payments: float
    dti_ratio: float
    dti_status: str
    risk_level: str
    debt_delta: float
    payment_delta: float
    dti_delta: float
    scenario_items: List[CreditItemSchema]
    stale: bool = False


class ScoreImpactFactorSchema(BaseModel):
    factor: str
    impact: int
    description: str


class ProjectedScoreImpactSchema(BaseModel):
    current_score: int
    projected_score: int
    total_impact: int
    factors: List[ScoreImpactFactorSchema]
    confidence: str
    note: str


class ItemScoreImpactSchema(BaseModel):
    type: str
    provider: str
    amount: float
    individual_impact: int


class ScoreImpactSimulationResponse(ProjectedScoreImpactSchema):
    """Response for POST /v1/simulate-score-impact"""

    credit_items: List[ItemScoreImpactSchema]


class ImportedScoreResponse(BaseModel):
    """Response for GET/POST /v1/imported-score"""

    id: Optional[int] = None
    score: int
    score_band: Optional[str] = None
    bureau: str
    min_score: int
    max_score: int
    normalized_score: float
    report_date: Optional[str] = None
    notes: Optional[str] = None
    projected_impact: Optional[ProjectedScoreImpactSchema] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ExternalAccountWriteResponse(BaseModel):
    """Saved account plus the portfolio recomputed from the lending API"""

    account: Optional[ExternalAccountSchema] = None
    portfolio: PortfolioResponse
