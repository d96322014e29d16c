"""Money, mode and reference helpers shared across the app.


- to_amount / format_naira convert between request values and 2-decimal Naira amounts.
- generate_reference builds human-readable transaction reference numbers.
- DEMO / LIVE are the account-mode namespaces every financial row is keyed by.
"""

import random
import string
import time
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date

AMOUNT_DECIMALS = getattr(settings, "AMOUNT_DECIMALS", 2)
QUANT = Decimal(1).scaleb(-AMOUNT_DECIMALS)
ZERO = Decimal("0.00")

DEMO = "demo"
LIVE = "live"
MODES = (DEMO, LIVE)

_BASE36 = string.digits + string.ascii_uppercase


def to_amount(value) -> Decimal:
    """
    Convert a request value (str, int, float or Decimal) to a 2-decimal Decimal
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("invalid_amount")
    try:
        # str() first so floats like 0.1 don't drag binary noise along
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("invalid_amount")
    if not amount.is_finite():
        raise ValidationError("invalid_amount")
    return amount.quantize(QUANT, rounding=ROUND_HALF_UP)


def to_positive_amount(value) -> Decimal:
    amount = to_amount(value)
    if amount <= 0:
        raise ValidationError("invalid_amount")
    return amount


def format_naira(amount) -> str:
    return f"₦{Decimal(amount):,.2f}"


def validate_mode(mode: str) -> str:
    if mode not in MODES:
        raise ValidationError("invalid_mode")
    return mode


def generate_reference(prefix: str) -> str:
    """
    PREFIX-<epoch millis>-<9 random base36 chars>, e.g. TOPUP-1760900000000-4K2J9QZ0A
    """
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"{prefix.upper()}-{millis}-{suffix}"


def to_date(value):
    """
    Accept a date or an ISO "YYYY-MM-DD" string; empty values become None
    """
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        raise ValidationError("invalid_date")
    if parsed is None:
        raise ValidationError("invalid_date")
    return parsed
