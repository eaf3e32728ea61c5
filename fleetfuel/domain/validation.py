from __future__ import annotations

from decimal import Decimal, InvalidOperation

from fleetfuel.domain.errors import InvalidLimit
from fleetfuel.domain.formatting import format_currency


def validate_limit(
    value: object,
    *,
    allow_zero: bool,
    maximum: Decimal | None = None,
    currency_symbol: str = "E",
) -> Decimal:
    """Coerce and check a budget ceiling, raising InvalidLimit with a user-facing message.

    The reconciler tolerates a zero ceiling; the budget-edit flow does not.
    """

    try:
        amount = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError):
        raise InvalidLimit("Please enter a valid amount") from None

    if not amount.is_finite() or amount < 0:
        raise InvalidLimit("Please enter a valid amount")
    if amount == 0 and not allow_zero:
        raise InvalidLimit("Budget cannot be zero")
    if maximum is not None and amount > maximum:
        raise InvalidLimit(
            f"Budget cannot exceed {format_currency(maximum, currency_symbol, grouping=True)}"
        )
    return amount
