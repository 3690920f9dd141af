"""Decimal helpers shared by every calculator."""
from decimal import Context, Decimal, localcontext
from enum import Enum
from typing import Any, Optional

from unitrate import config

ZERO = Decimal(0)
ONE = Decimal(1)


class DivisorPolicy(str, Enum):
    """Behaviour when equipment depreciation_total is zero."""

    ZERO = "zero"
    RAISE = "raise"


def resolve_policy(policy: Optional[Any]) -> DivisorPolicy:
    """Return ``policy`` as a DivisorPolicy, falling back to the configured default."""
    if policy is None:
        return DivisorPolicy(config.DEFAULT_DIVISOR_POLICY)
    return DivisorPolicy(policy)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a rate/quantity to Decimal.

    None becomes 0. Floats go through ``str`` so 4.55 stays 4.55 rather than
    its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def decimal_context():
    """Local decimal context at the configured precision."""
    return localcontext(Context(prec=config.DECIMAL_PRECISION))


def base_divisor(base_quantity: Any) -> Decimal:
    """An analysis base quantity, with zero/missing treated as 1."""
    base = to_decimal(base_quantity)
    return base if base != ZERO else ONE
