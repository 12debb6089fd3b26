from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.labour_ledger.labour_ledger.common.datetime_utils import iter_days, month_bounds, parse_iso_date
from src.labour_ledger.labour_ledger.common.formatting import format_phone, mask_national_id
from src.labour_ledger.labour_ledger.common.validators import (
    check_national_id,
    check_phone,
    check_wage,
    parse_wage,
    require_date_range,
)
from src.labour_ledger.labour_ledger.core.exceptions import ValidationError


def test_parse_wage_keeps_decimal_precision():
    assert parse_wage(450.1) == Decimal("450.1")
    assert parse_wage("500") == Decimal("500")
    with pytest.raises(ValidationError):
        parse_wage("NaN")
    with pytest.raises(ValidationError):
        parse_wage("")


@pytest.mark.parametrize(
    "wage, ok",
    [("1", True), ("100000", True), ("0", False), ("100000.01", False), ("10.999", False)],
)
def test_check_wage_bounds(wage, ok):
    assert (check_wage(Decimal(wage)) is None) is ok


def test_national_id_and_phone_checks():
    assert check_national_id("1234 5678 9012") is None
    assert check_national_id("12345678901") is not None
    assert check_phone(None) is None
    assert check_phone("98765 43210") is None
    assert check_phone("+919876543210") is not None


def test_masking_and_phone_format():
    assert mask_national_id("123456789012") == "XXXX XXXX 9012"
    assert mask_national_id("1234") == "1234"
    assert format_phone("9876543210") == "+91 98765 43210"


def test_date_helpers():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        parse_iso_date("29/02/2024")
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert list(iter_days(date(2024, 3, 1), date(2024, 3, 3)))[-1] == date(2024, 3, 3)
    with pytest.raises(ValidationError):
        require_date_range(date(2024, 1, 1), date(2025, 6, 1))
