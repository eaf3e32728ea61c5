"""Presentation helpers shared by the mobile and dashboard consumers."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from fleetfuel.domain.budget import Allow, Block, Decision, Warn
from fleetfuel.domain.profiles import Role

CENTS = Decimal("0.01")
WHOLE = Decimal("1")


def format_currency(amount: Decimal, symbol: str = "E", *, grouping: bool = False) -> str:
    """Render an amount with a single-character prefix and two decimals, e.g. 'E123.45'."""

    quantized = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    if grouping:
        return f"{symbol}{quantized:,}"
    return f"{symbol}{quantized}"


def format_percentage(value: Decimal) -> str:
    """Round a percentage to the nearest whole number, halves away from zero."""

    return str(Decimal(value).quantize(WHOLE, rounding=ROUND_HALF_UP))


def describe_decision(decision: Decision, role: Role, symbol: str = "E") -> str | None:
    """Return the prompt shown before a trip is started, or None when no prompt is needed."""

    subject = "monthly limit" if role is Role.DRIVER else "budget"
    if isinstance(decision, Block):
        return (
            f"This trip will exceed your {subject} by "
            f"{format_currency(decision.overage, symbol)}. Do you want to continue?"
        )
    if isinstance(decision, Warn):
        return f"This trip will bring you to {format_percentage(decision.percentage)}% of your {subject}."
    if isinstance(decision, Allow):
        return None
    raise TypeError(f"Unknown decision type: {type(decision).__name__}")
