"""Imported bureau scores and heuristic score-impact estimates"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from depco_simulator.domain.exceptions import CreditItemValidationError, ScoreRangeError
from depco_simulator.domain.models import (
    CreditPortfolio,
    ImportedCreditScore,
    ProjectedScoreImpact,
    ScoreImpactFactor,
    SimulationResult,
)
from depco_simulator.domain.scenarios import ProposedItems, simulate
from depco_simulator.domain.validation import require_number
from depco_simulator.utils.date_utils import utc_now
from depco_simulator.utils.money import is_number, percent_of, round1, round_half_up

# South African bureaus report on 0-999; "other" covers FICO-style ranges
BUREAU_RANGES: Dict[str, Tuple[int, int]] = {
    "transunion": (0, 999),
    "experian": (0, 999),
    "xds": (0, 999),
    "compuscan": (0, 999),
    "other": (300, 850),
}

ESTIMATE_NOTE = (
    "Estimate only. Bureaus use their own models; actual changes depend on "
    "your full credit history and repayment behaviour."
)

# Caps are in normalized points (0-100 scale) before conversion to bureau points
INQUIRY_PENALTY_PER_ITEM = 2.0
INQUIRY_PENALTY_CAP = 8.0
UTILIZATION_WEIGHT = 20.0
UTILIZATION_CAP = 15.0
DTI_WEIGHT = 0.5
DTI_CAP = 10.0
ACCOUNT_AGE_PENALTY_PER_ITEM = 1.0
ACCOUNT_AGE_CAP = 3.0


def bureau_range(bureau: str, min_score: Optional[int] = None, max_score: Optional[int] = None) -> Tuple[int, int]:
    """Declared range for a bureau; explicit bounds override the table"""
    default_min, default_max = BUREAU_RANGES.get(bureau, BUREAU_RANGES["other"])
    low = default_min if min_score is None else require_number(min_score, "min_score")
    high = default_max if max_score is None else require_number(max_score, "max_score")
    if low >= high:
        raise CreditItemValidationError("min_score", f"must be below max_score ({low} >= {high})")
    return low, high


def normalize_score(score: float, min_score: int, max_score: int) -> float:
    """Map a bureau score onto 0-100"""
    return round1((score - min_score) / (max_score - min_score) * 100)


def score_band(normalized: float) -> str:
    """
    Coarse band on the normalized scale.

    - 70+:   good
    - 50-70: fair
    - <50:   poor
    """
    if normalized >= 70:
        return "good"
    elif normalized >= 50:
        return "fair"
    else:
        return "poor"


def import_score(
    score: Any,
    bureau: str = "transunion",
    min_score: Optional[int] = None,
    max_score: Optional[int] = None,
    score_band_label: Optional[str] = None,
    report_date: Optional[str] = None,
    notes: Optional[str] = None,
    score_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> ImportedCreditScore:
    """
    Validate and normalize a self-reported bureau score.

    Raises:
        CreditItemValidationError: score is not a whole number or the range is
            not numeric or inverted
        ScoreRangeError: score lies outside [min_score, max_score]
    """
    if not is_number(score):
        raise CreditItemValidationError("score", f"must be a number, got {score!r}")
    if score != int(score):
        raise CreditItemValidationError("score", f"must be a whole number, got {score!r}")

    bureau = str(bureau or "other").lower()
    low, high = bureau_range(bureau, min_score, max_score)
    if not low <= score <= high:
        raise ScoreRangeError(f"Score {score} outside {bureau} range [{low}, {high}]")

    normalized = normalize_score(score, low, high)
    timestamp = now or utc_now()
    return ImportedCreditScore(
        id=score_id,
        score=int(score),
        bureau=bureau,
        min_score=low,
        max_score=high,
        normalized_score=normalized,
        score_band=score_band_label or score_band(normalized),
        report_date=report_date,
        notes=notes,
        created_at=timestamp,
        updated_at=timestamp,
    )


def impact_confidence(new_monthly_payment: float, monthly_income: float) -> str:
    """More new repayment relative to income means a less certain estimate"""
    if monthly_income <= 0:
        return "low"
    burden = percent_of(new_monthly_payment, monthly_income)
    if burden <= 10:
        return "high"
    elif burden <= 25:
        return "medium"
    else:
        return "low"


def _impact_factors(simulation: SimulationResult, monthly_income: float, points_per_unit: float) -> List[ScoreImpactFactor]:
    item_count = len(simulation.new_credit_items)
    annual_income = monthly_income * 12

    inquiries = min(item_count * INQUIRY_PENALTY_PER_ITEM, INQUIRY_PENALTY_CAP)
    if annual_income > 0:
        utilization = min(simulation.total_new_credit / annual_income * UTILIZATION_WEIGHT, UTILIZATION_CAP)
    else:
        utilization = UTILIZATION_CAP
    dti = min(max(simulation.dti_increase, 0) * DTI_WEIGHT, DTI_CAP)
    account_age = min(item_count * ACCOUNT_AGE_PENALTY_PER_ITEM, ACCOUNT_AGE_CAP)

    return [
        ScoreImpactFactor(
            factor="new_credit_inquiries",
            impact=-round_half_up(inquiries * points_per_unit),
            description=f"{item_count} new credit application(s) add hard enquiries",
        ),
        ScoreImpactFactor(
            factor="credit_utilization",
            impact=-round_half_up(utilization * points_per_unit),
            description="New credit utilization relative to annual income",
        ),
        ScoreImpactFactor(
            factor="debt_to_income",
            impact=-round_half_up(dti * points_per_unit),
            description=f"DTI rises by {simulation.dti_increase} percentage points",
        ),
        ScoreImpactFactor(
            factor="average_account_age",
            impact=-round_half_up(account_age * points_per_unit),
            description="Average account age decreases with new accounts",
        ),
    ]


def estimate_score_impact(
    imported: ImportedCreditScore,
    simulation: SimulationResult,
    monthly_income: Optional[float] = None,
) -> ProjectedScoreImpact:
    """
    Heuristic score delta for a simulated set of new credit.

    Deterministic for the same inputs. Every factor is non-positive and
    grows with new debt relative to income. The projected score is kept
    inside the bureau range and total_impact is reported after clamping.
    """
    income = simulation.monthly_income if monthly_income is None else monthly_income
    points_per_unit = (imported.max_score - imported.min_score) / 100
    factors = _impact_factors(simulation, income, points_per_unit)

    raw_total = sum(f.impact for f in factors)
    projected = min(max(imported.score + raw_total, imported.min_score), imported.max_score)

    return ProjectedScoreImpact(
        current_score=imported.score,
        projected_score=projected,
        total_impact=projected - imported.score,
        factors=factors,
        confidence=impact_confidence(simulation.total_new_monthly_payment, income),
        note=ESTIMATE_NOTE,
    )


def simulate_score_impact(
    imported: ImportedCreditScore,
    portfolio: CreditPortfolio,
    proposed_items: ProposedItems,
) -> Dict[str, Any]:
    """Combined estimate plus each item's impact when taken on alone"""
    simulation = simulate(portfolio, proposed_items)
    combined = estimate_score_impact(imported, simulation)

    per_item = []
    for priced in simulation.new_credit_items:
        alone = estimate_score_impact(imported, simulate(portfolio, [priced.item]))
        per_item.append(
            {
                "type": priced.item.type.value,
                "provider": priced.item.provider,
                "amount": priced.item.amount,
                "individual_impact": alone.total_impact,
            }
        )

    return {**combined.to_dict(), "credit_items": per_item}
