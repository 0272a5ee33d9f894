"""Field validation for user-entered credit items and accounts"""

from typing import Any, Dict, Optional

from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.utils.money import is_number

PAYMENT_STATUSES = ("on_time", "late", "in_arrears")

# Upstream field name for each numeric account field; all must be >= 0
ACCOUNT_NUMERIC_FIELDS = ("current_balance", "minimum_payment", "interest_rate", "credit_limit")
ACCOUNT_REQUIRED_FIELDS = ("provider_name", "current_balance", "interest_rate", "minimum_payment")


def require_number(value, field: str, index: Optional[int] = None) -> float:
    """Return value unchanged if it is a finite number, else raise"""
    if value is None:
        raise CreditItemValidationError(field, "is required", index)
    if not is_number(value):
        raise CreditItemValidationError(field, f"must be a number, got {value!r}", index)
    return value


def validate_account_fields(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Check an external account add/edit form and build the lending API body.

    With partial=True (edits) only the supplied fields are checked and
    returned; otherwise provider, balance, rate and payment are required.

    Raises:
        CreditItemValidationError: naming the offending field
    """
    if not partial:
        for key in ACCOUNT_REQUIRED_FIELDS:
            if payload.get(key) is None or payload.get(key) == "":
                raise CreditItemValidationError(key, "is required")

    body: Dict[str, Any] = {}
    for key in ("account_type", "provider_name"):
        if payload.get(key) is not None:
            text = str(payload[key]).strip()
            if not text:
                raise CreditItemValidationError(key, "must not be blank")
            body[key] = text
    if not partial:
        body.setdefault("account_type", "other")

    for key in ACCOUNT_NUMERIC_FIELDS:
        if payload.get(key) is None:
            continue
        value = require_number(payload[key], key)
        if value < 0:
            raise CreditItemValidationError(key, "must not be negative")
        body[key] = value

    status = payload.get("payment_status")
    if status is not None:
        if status not in PAYMENT_STATUSES:
            raise CreditItemValidationError("payment_status", f"must be one of {', '.join(PAYMENT_STATUSES)}")
        body["payment_status"] = status

    if payload.get("is_active") is not None:
        if not isinstance(payload["is_active"], bool):
            raise CreditItemValidationError("is_active", "must be true or false")
        body["is_active"] = payload["is_active"]

    if partial and not body:
        raise CreditItemValidationError("account", "no fields to update")
    return body
