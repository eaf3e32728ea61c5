from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

from fleetfuel.core.logging import get_logger
from fleetfuel.domain.budget import (
    ZERO,
    BudgetPolicy,
    BudgetStatus,
    Decision,
    build_status,
    evaluate_action,
    month_window,
)
from fleetfuel.domain.errors import IdentityNotFound, StoreUnavailable
from fleetfuel.domain.formatting import format_currency, format_percentage
from fleetfuel.domain.profiles import ProfileStore, UserProfile
from fleetfuel.domain.trips import TripStore
from fleetfuel.domain.validation import validate_limit
from fleetfuel.monitoring.metrics import (
    BUDGET_ALERTS_TOTAL,
    BUDGET_DECISIONS_TOTAL,
    BUDGET_STATUS_DURATION_SECONDS,
    BUDGET_STATUS_TOTAL,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BudgetReconciler:
    """Monthly budget and usage reconciliation shared by the mobile app and dashboard.

    Stateless: every call re-reads the profile and trip stores, so repeated
    calls with no intervening writes return identical results.
    """

    def __init__(
        self,
        profiles: ProfileStore,
        trips: TripStore,
        policy: BudgetPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._profiles = profiles
        self._trips = trips
        self._policy = policy or BudgetPolicy()
        self._clock = clock

    @property
    def policy(self) -> BudgetPolicy:
        return self._policy

    async def resolve_profile(self, user_id: str) -> UserProfile:
        try:
            profile = await self._profiles.get_profile(user_id)
        except StoreUnavailable:
            logger.exception(f"Profile lookup failed for {user_id}")
            raise
        if profile is None:
            raise IdentityNotFound(user_id)
        return profile

    async def get_monthly_usage(self, user_id: str, as_of: datetime | None = None) -> Decimal:
        """Sum trip costs for the calendar month containing `as_of` (default: now)."""

        profile = await self.resolve_profile(user_id)
        usage, _ = await self._usage_for(profile, as_of)
        return usage

    async def get_usage_with_period(
        self,
        user_id: str,
        as_of: datetime | None = None,
    ) -> tuple[Decimal, tuple[datetime, datetime]]:
        profile = await self.resolve_profile(user_id)
        return await self._usage_for(profile, as_of)

    async def get_budget_status(self, user_id: str, as_of: datetime | None = None) -> BudgetStatus:
        profile = await self.resolve_profile(user_id)
        return await self._status_for(profile, as_of)

    async def get_budget_alerts(self, user_id: str, as_of: datetime | None = None) -> list[str]:
        """Return at most one alert message, most severe first."""

        status = await self.get_budget_status(user_id, as_of)
        return self.alerts_for(status)

    def alerts_for(self, status: BudgetStatus) -> list[str]:
        policy = self._policy
        if status.is_over_budget:
            BUDGET_ALERTS_TOTAL.labels(level="exceeded").inc()
            amount = format_currency(abs(status.remaining_budget), policy.currency_symbol)
            return [f"Budget exceeded by {amount}"]
        if status.usage_percentage >= policy.critical_threshold_percent:
            BUDGET_ALERTS_TOTAL.labels(level="critical").inc()
            return [f"Budget at {format_percentage(status.usage_percentage)}% - nearly exceeded"]
        if status.usage_percentage >= policy.monitor_threshold_percent:
            BUDGET_ALERTS_TOTAL.labels(level="monitor").inc()
            return [f"Budget at {format_percentage(status.usage_percentage)}% - monitor spending"]
        return []

    async def check_budget_before_action(
        self,
        user_id: str,
        estimated_cost: Decimal,
        as_of: datetime | None = None,
    ) -> Decision:
        """Classify a planned spend as allow, warn or block. Never enforces or writes."""

        _, decision = await self.evaluate_planned_spend(user_id, estimated_cost, as_of)
        return decision

    async def evaluate_planned_spend(
        self,
        user_id: str,
        estimated_cost: Decimal,
        as_of: datetime | None = None,
    ) -> tuple[BudgetStatus, Decision]:
        """Return the decision together with the status snapshot it was made from."""

        status = await self.get_budget_status(user_id, as_of)
        decision = evaluate_action(status, estimated_cost, self._policy.pre_action_warn_ratio)
        BUDGET_DECISIONS_TOTAL.labels(decision=decision.kind.value).inc()
        return status, decision

    async def get_group_budget_statuses(
        self,
        business_group_id: str,
        as_of: datetime | None = None,
    ) -> list[BudgetStatus]:
        """Per-driver statuses for every driver in a business group."""

        try:
            drivers = await self._profiles.list_drivers(business_group_id)
        except StoreUnavailable:
            logger.exception(f"Driver listing failed for group {business_group_id}")
            raise

        statuses = await asyncio.gather(*(self._status_for(d, as_of) for d in drivers))
        return sorted(statuses, key=lambda s: s.usage_percentage, reverse=True)

    async def _usage_for(
        self,
        profile: UserProfile,
        as_of: datetime | None,
    ) -> tuple[Decimal, tuple[datetime, datetime]]:
        start, end = month_window(as_of or self._clock(), self._policy.tzinfo)
        try:
            trips = await self._trips.list_trips(profile.trip_scope(), start=start, end=end)
        except StoreUnavailable:
            logger.exception(f"Trip query failed for {profile.user_id}")
            raise

        usage = sum((trip.cost for trip in trips), ZERO)
        return usage, (start, end)

    async def _status_for(self, profile: UserProfile, as_of: datetime | None) -> BudgetStatus:
        started = time.perf_counter()
        limit = validate_limit(
            profile.budget_limit,
            allow_zero=True,
            currency_symbol=self._policy.currency_symbol,
        )
        usage, period = await self._usage_for(profile, as_of)

        status = build_status(
            user_id=profile.user_id,
            role=profile.role,
            monthly_usage=usage,
            limit=limit,
            period=period,
        )

        BUDGET_STATUS_TOTAL.labels(role=profile.role.value).inc()
        BUDGET_STATUS_DURATION_SECONDS.observe(time.perf_counter() - started)
        if status.is_over_budget:
            logger.info(
                f"User {profile.user_id} over budget",
                extra={"usage": str(usage), "limit": str(limit)},
            )
        return status
