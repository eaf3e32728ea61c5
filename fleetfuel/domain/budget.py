from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from fleetfuel.domain.errors import InvalidAmount
from fleetfuel.domain.profiles import Role

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class BudgetStatus(BaseModel):
    """Current month consumption against a user's ceiling. Derived, never stored."""

    user_id: str
    role: Role
    monthly_usage: Decimal
    limit: Decimal
    usage_percentage: Decimal
    remaining_budget: Decimal
    is_over_budget: bool
    period_start: datetime
    period_end: datetime


@dataclass(frozen=True, slots=True)
class BudgetPolicy:
    """Thresholds and presentation settings applied by the reconciler."""

    monitor_threshold_percent: Decimal = Decimal("75")
    critical_threshold_percent: Decimal = Decimal("90")
    pre_action_warn_ratio: Decimal = Decimal("0.9")
    currency_symbol: str = "E"
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class DecisionKind(str, Enum):
    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"


@dataclass(frozen=True, slots=True)
class Allow:
    new_total: Decimal
    limit: Decimal

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.ALLOW


@dataclass(frozen=True, slots=True)
class Warn:
    """The planned spend keeps the user under the limit but past the warn ratio."""

    new_total: Decimal
    limit: Decimal
    percentage: Decimal

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.WARN


@dataclass(frozen=True, slots=True)
class Block:
    """The planned spend would exceed the limit by `overage`.

    The caller may still proceed on explicit user override.
    """

    new_total: Decimal
    limit: Decimal
    overage: Decimal

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.BLOCK


Decision = Union[Allow, Warn, Block]


def month_window(as_of: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the half-open calendar month `[start, end)` containing `as_of` in `tz`.

    Naive datetimes are interpreted as wall-clock time in `tz`.
    """

    if as_of.tzinfo is None:
        local = as_of.replace(tzinfo=tz)
    else:
        local = as_of.astimezone(tz)

    start = datetime(local.year, local.month, 1, tzinfo=tz)
    if local.month == 12:
        end = datetime(local.year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(local.year, local.month + 1, 1, tzinfo=tz)
    return start, end


def usage_percentage(usage: Decimal, limit: Decimal) -> Decimal:
    if limit > 0:
        return usage / limit * HUNDRED
    return ZERO


def build_status(
    *,
    user_id: str,
    role: Role,
    monthly_usage: Decimal,
    limit: Decimal,
    period: tuple[datetime, datetime],
) -> BudgetStatus:
    return BudgetStatus(
        user_id=user_id,
        role=role,
        monthly_usage=monthly_usage,
        limit=limit,
        usage_percentage=usage_percentage(monthly_usage, limit),
        remaining_budget=limit - monthly_usage,
        is_over_budget=monthly_usage > limit,
        period_start=period[0],
        period_end=period[1],
    )


def evaluate_action(
    status: BudgetStatus,
    estimated_cost: Decimal,
    warn_ratio: Decimal = Decimal("0.9"),
) -> Decision:
    """Classify a planned spend against the current status without side effects."""

    estimated = Decimal(estimated_cost)
    if not estimated.is_finite() or estimated < 0:
        raise InvalidAmount(f"Estimated cost must be a non-negative amount, got {estimated_cost}")

    new_total = status.monthly_usage + estimated
    limit = status.limit

    if new_total > limit:
        return Block(new_total=new_total, limit=limit, overage=new_total - limit)
    if new_total > limit * warn_ratio:
        # new_total <= limit here, so limit is positive
        return Warn(new_total=new_total, limit=limit, percentage=new_total / limit * HUNDRED)
    return Allow(new_total=new_total, limit=limit)
