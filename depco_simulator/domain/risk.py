"""DTI risk classification"""

from typing import Dict, Tuple

from depco_simulator.domain.models import RiskClassification

RISK_LEVELS = ("low", "moderate", "high", "very_high")

# risk_level -> (affordability_status, recommendation)
AFFORDABILITY: Dict[str, Tuple[str, str]] = {
    "low": (
        "comfortable",
        "Comfortable - you'll still have healthy breathing room after these repayments.",
    ),
    "moderate": (
        "manageable",
        "Manageable - watch your spending carefully while these repayments run.",
    ),
    "high": (
        "tight",
        "Tight budget - consider whether this credit is essential before applying.",
    ),
    "very_high": (
        "overextended",
        "Overextended - high risk of financial stress; reduce or defer this credit.",
    ),
}


def dti_status(dti: float) -> str:
    """
    Status used to colour the DTI bar.

    - dti <= 30: safe
    - dti <= 50: caution
    - above:     risky
    """
    if dti <= 30:
        return "safe"
    elif dti <= 50:
        return "caution"
    else:
        return "risky"


def risk_level(dti: float) -> str:
    """
    Risk badge for a (projected) DTI. Independent ladder from dti_status.

    - dti <= 30: low
    - dti <= 40: moderate
    - dti <= 50: high
    - above:     very_high
    """
    if dti <= 30:
        return "low"
    elif dti <= 40:
        return "moderate"
    elif dti <= 50:
        return "high"
    else:
        return "very_high"


def classify(dti: float) -> RiskClassification:
    """Both labels for a DTI ratio"""
    return RiskClassification(status=dti_status(dti), risk_level=risk_level(dti))


def affordability(level: str) -> Tuple[str, str]:
    """Map a risk level to (affordability_status, recommendation)"""
    return AFFORDABILITY[level]
