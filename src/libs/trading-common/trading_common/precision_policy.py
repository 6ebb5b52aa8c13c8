# src/libs/trading-common/trading_common/precision_policy.py
"""
Single rounding policy for every decimal the ledger stores or compares.

Money, trade prices and order quantities are all persisted with two fractional
digits and rounded half-up. Values are normalised through ``Decimal(str(x))`` so
that floats never leak binary representation error into the ledger.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

ROUNDING_POLICY_VERSION = "1.0.0"

MONEY_SCALE = 2
PRICE_SCALE = 2
QUANTITY_SCALE = 2
ROUNDING_MODE = ROUND_HALF_UP

ZERO = Decimal("0.00")

Numeric = Union[Decimal, int, float, str]


def _to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _quantize(value: Numeric, scale: int) -> Decimal:
    amount = _to_decimal(value)
    if not amount.is_finite():
        return amount
    return amount.quantize(Decimal(1).scaleb(-scale), rounding=ROUNDING_MODE)


def quantize_money(value: Numeric) -> Decimal:
    """Rounds a cash amount to exactly two fractional digits, half-up."""
    return _quantize(value, MONEY_SCALE)


def quantize_price(value: Numeric) -> Decimal:
    return _quantize(value, PRICE_SCALE)


def quantize_quantity(value: Numeric) -> Decimal:
    return _quantize(value, QUANTITY_SCALE)
