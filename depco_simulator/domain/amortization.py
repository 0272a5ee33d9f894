"""Level-payment amortization for proposed credit items"""

from typing import Any, Dict, List, Optional, Sequence, Union

from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.domain.models import (
    CreditItem,
    CreditItemType,
    CREDIT_ITEM_TYPE_ALIASES,
    PricedCreditItem,
)
from depco_simulator.domain.validation import require_number
from depco_simulator.utils.money import round_half_up


def monthly_payment(principal: float, annual_rate_percent: float, term_months: int) -> int:
    """
    Level monthly payment for a loan, rounded to whole currency units.

    payment = P * r / (1 - (1 + r)^-n), with r = annual% / 100 / 12

    A zero rate makes the formula 0/0, so it falls back to P / n. For terms
    long enough that (1 + r)^n overflows a float, the payment has converged
    to the interest-only amount P * r.

    Example:
        10000 at 12% over 12 months -> 888
        1000 at 0% over 10 months   -> 100
    """
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate == 0:
        return round_half_up(principal / term_months)

    try:
        growth = (1 + monthly_rate) ** term_months
    except OverflowError:
        return round_half_up(principal * monthly_rate)
    payment = principal * monthly_rate / (1 - 1 / growth)
    return round_half_up(payment)


def total_interest(payment: int, term_months: int, principal: float) -> int:
    """Interest over the life of the loan, floored at 0 for rounding artifacts"""
    return max(round_half_up(payment * term_months - principal), 0)


def validate_credit_item(item: CreditItem, index: Optional[int] = None) -> CreditItem:
    """
    Check the numeric fields of a credit item before it is priced.

    Raises:
        CreditItemValidationError: naming the field and item index
    """
    amount = require_number(item.amount, "amount", index)
    if amount <= 0:
        raise CreditItemValidationError("amount", "must be greater than 0", index)

    rate = require_number(item.interest_rate, "interest_rate", index)
    if rate < 0:
        raise CreditItemValidationError("interest_rate", "must not be negative", index)

    term = require_number(item.term_months, "term_months", index)
    if term != int(term):
        raise CreditItemValidationError("term_months", "must be a whole number of months", index)
    if term <= 0:
        raise CreditItemValidationError("term_months", "must be greater than 0", index)

    return item


def parse_credit_item(payload: Dict[str, Any], index: Optional[int] = None) -> CreditItem:
    """Build a validated CreditItem from its wire representation"""
    if not isinstance(payload, dict):
        raise CreditItemValidationError("credit_item", "must be an object", index)

    raw_type = payload.get("type", CreditItemType.OTHER.value)
    try:
        item_type = CREDIT_ITEM_TYPE_ALIASES.get(raw_type) or CreditItemType(raw_type)
    except ValueError:
        raise CreditItemValidationError("type", f"unknown credit type {raw_type!r}", index)

    item = CreditItem(
        type=item_type,
        provider=str(payload.get("provider") or ""),
        amount=payload.get("amount"),
        interest_rate=payload.get("interest_rate"),
        term_months=payload.get("term_months"),
    )
    validate_credit_item(item, index)
    return CreditItem(
        type=item.type,
        provider=item.provider,
        amount=item.amount,
        interest_rate=item.interest_rate,
        term_months=int(item.term_months),
    )


def coerce_credit_items(items: Sequence[Union[CreditItem, Dict[str, Any]]]) -> List[CreditItem]:
    """Validate every item up front; nothing is priced if any item fails"""
    if not items:
        raise CreditItemValidationError("credit_items", "must contain at least one item")

    validated = []
    for index, item in enumerate(items):
        if isinstance(item, CreditItem):
            validated.append(validate_credit_item(item, index))
        else:
            validated.append(parse_credit_item(item, index))
    return validated


def price_credit_item(item: CreditItem) -> PricedCreditItem:
    """Attach monthly payment, total interest and total repayment to an item"""
    validate_credit_item(item)
    term = int(item.term_months)
    payment = monthly_payment(item.amount, item.interest_rate, term)
    return PricedCreditItem(
        item=item,
        monthly_payment=payment,
        total_interest=total_interest(payment, term, item.amount),
        total_repayment=payment * term,
    )
