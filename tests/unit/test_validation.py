"""Unit tests for credit item and account field validation"""

import math

import pytest

from depco_simulator.domain.exceptions import CreditItemValidationError
from depco_simulator.domain.validation import require_number, validate_account_fields

WOOLWORTHS = {
    "account_type": "store_card",
    "provider_name": "Woolworths",
    "credit_limit": 15000,
    "current_balance": 12000,
    "interest_rate": 21,
    "minimum_payment": 1500,
}


@pytest.mark.parametrize("value", [None, "5000", True, float("nan"), math.inf])
def test_require_number_rejects_non_numbers(value):
    with pytest.raises(CreditItemValidationError) as exc:
        require_number(value, "amount", 2)
    assert exc.value.field == "amount"
    assert exc.value.index == 2


def test_validate_account_fields_new_account():
    body = validate_account_fields({**WOOLWORTHS, "provider_name": "  Woolworths "})

    assert body["provider_name"] == "Woolworths"
    assert body["current_balance"] == 12000
    assert "payment_status" not in body


def test_validate_account_fields_defaults_type():
    payload = {k: v for k, v in WOOLWORTHS.items() if k != "account_type"}
    assert validate_account_fields(payload)["account_type"] == "other"


@pytest.mark.parametrize("field", ["provider_name", "current_balance", "interest_rate", "minimum_payment"])
def test_validate_account_fields_requires_core_fields(field):
    payload = {k: v for k, v in WOOLWORTHS.items() if k != field}

    with pytest.raises(CreditItemValidationError) as exc:
        validate_account_fields(payload)
    assert exc.value.field == field


@pytest.mark.parametrize(
    "field,value",
    [
        ("current_balance", -1),
        ("minimum_payment", -200),
        ("credit_limit", -5000),
        ("interest_rate", "high"),
        ("payment_status", "paid"),
        ("is_active", "yes"),
    ],
)
def test_validate_account_fields_rejects_bad_values(field, value):
    with pytest.raises(CreditItemValidationError) as exc:
        validate_account_fields({**WOOLWORTHS, field: value})
    assert exc.value.field == field


def test_validate_account_fields_partial_edit():
    body = validate_account_fields({"current_balance": 9000, "payment_status": "late"}, partial=True)

    assert body == {"current_balance": 9000, "payment_status": "late"}


def test_validate_account_fields_empty_edit():
    with pytest.raises(CreditItemValidationError):
        validate_account_fields({}, partial=True)
