import re
from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.constants import to_amount, to_positive_amount, format_naira, generate_reference, validate_mode, to_date


def test_to_amount_rounds_half_up_to_two_places():
	assert to_amount("10.005") == Decimal("10.01")
	assert to_amount(4000) == Decimal("4000.00")
	assert to_amount(0.1) == Decimal("0.10")


@pytest.mark.parametrize("bad", [None, True, "abc", "", "NaN", "Infinity"])
def test_to_amount_rejects_non_numbers(bad):
	with pytest.raises(ValidationError) as exc:
		to_amount(bad)
	assert exc.value.message == "invalid_amount"


def test_to_positive_amount_rejects_zero_and_negative():
	for value in ("0", "-5"):
		with pytest.raises(ValidationError):
			to_positive_amount(value)


def test_format_naira():
	assert format_naira(Decimal("10000")) == "₦10,000.00"
	assert format_naira("1234.5") == "₦1,234.50"


def test_generate_reference_shape():
	ref = generate_reference("del")
	assert re.fullmatch(r"DEL-\d{13}-[0-9A-Z]{9}", ref)
	assert generate_reference("TXN") != generate_reference("TXN")


def test_validate_mode():
	assert validate_mode("live") == "live"
	with pytest.raises(ValidationError):
		validate_mode("sandbox")


def test_to_date():
	assert to_date("2025-12-31") == date(2025, 12, 31)
	assert to_date("") is None
	with pytest.raises(ValidationError):
		to_date("31/12/2025")
