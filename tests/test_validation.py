import math

import pydantic
import pytest

from expense_tracker.errors import ValidationError
from expense_tracker.schemas import ExpenseCreate
from expense_tracker.service import validate_expense


@pytest.mark.parametrize("amount", [0.01, 1, 25.5, 1_000_000.99])
def test_amounts_from_minimum_upwards_are_accepted(amount):
    validate_expense(ExpenseCreate(amount=amount, category="Groceries"))


@pytest.mark.parametrize("amount", [0, 0.0, 0.009, -0.01, -10.0])
def test_amounts_below_minimum_are_rejected(amount):
    with pytest.raises(ValidationError) as exc_info:
        validate_expense(ExpenseCreate(amount=amount, category="Groceries"))
    assert exc_info.value.field == "amount"
    assert exc_info.value.message == "Amount must be at least 0.01"


@pytest.mark.parametrize("amount", [math.nan, math.inf, -math.inf])
def test_non_finite_amounts_are_rejected(amount):
    with pytest.raises(ValidationError) as exc_info:
        validate_expense(ExpenseCreate(amount=amount, category="Groceries"))
    assert exc_info.value.field == "amount"


def test_category_length_boundaries():
    validate_expense(ExpenseCreate(amount=1, category="a"))
    validate_expense(ExpenseCreate(amount=1, category="a" * 50))

    for category in ("", "a" * 51):
        with pytest.raises(ValidationError) as exc_info:
            validate_expense(ExpenseCreate(amount=1, category=category))
        assert exc_info.value.field == "category"
        assert "between 1 and 50 characters" in exc_info.value.message


def test_whitespace_category_is_not_trimmed():
    validate_expense(ExpenseCreate(amount=1, category="   "))


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_expense(ExpenseCreate(amount=0, category="Books"))


def test_category_with_lone_surrogate_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_expense(ExpenseCreate(amount=1, category="rent \ud800"))
    assert exc_info.value.field == "category"


def test_non_ascii_category_is_accepted():
    validate_expense(ExpenseCreate(amount=1, category="Café ☕"))


@pytest.mark.parametrize("amount", [True, "12.5"])
def test_amount_must_be_a_json_number(amount):
    with pytest.raises(pydantic.ValidationError):
        ExpenseCreate(amount=amount, category="Books")
