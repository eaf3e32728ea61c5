from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from fleetfuel.core.logging import get_logger
from fleetfuel.domain.audit import AuditEvent
from fleetfuel.domain.errors import IdentityNotFound, RoleMismatch
from fleetfuel.domain.profiles import CitizenProfile, DriverProfile, ProfileStore, UserProfile
from fleetfuel.domain.validation import validate_limit

logger = get_logger(__name__)


class BudgetAdminService:
    """Edits the ceilings the reconciler reads: citizen budgets and driver fuel limits.

    Each change is saved together with its `budget_limit_updated` audit event,
    so a failed audit write leaves the previous limit in place.
    """

    def __init__(
        self,
        profiles: ProfileStore,
        *,
        max_budget: Decimal,
        currency_symbol: str = "E",
    ) -> None:
        self._profiles = profiles
        self._max_budget = max_budget
        self._currency_symbol = currency_symbol

    async def set_personal_budget(self, user_id: str, amount: object, *, actor_id: str) -> CitizenProfile:
        profile = await self._get(user_id)
        if not isinstance(profile, CitizenProfile):
            raise RoleMismatch(f"User {user_id} is not a citizen; set a monthly fuel limit instead")
        return await self._apply(profile, amount, actor_id=actor_id)

    async def set_monthly_fuel_limit(self, user_id: str, amount: object, *, actor_id: str) -> DriverProfile:
        profile = await self._get(user_id)
        if not isinstance(profile, DriverProfile):
            raise RoleMismatch(f"User {user_id} is not a driver; set a personal budget instead")
        return await self._apply(profile, amount, actor_id=actor_id)

    async def set_limit(self, user_id: str, amount: object, *, actor_id: str) -> UserProfile:
        """Update whichever ceiling applies to the user's role."""

        profile = await self._get(user_id)
        return await self._apply(profile, amount, actor_id=actor_id)

    async def _get(self, user_id: str) -> UserProfile:
        profile = await self._profiles.get_profile(user_id)
        if profile is None:
            raise IdentityNotFound(user_id)
        return profile

    def _validate(self, amount: object) -> Decimal:
        return validate_limit(
            amount,
            allow_zero=False,
            maximum=self._max_budget,
            currency_symbol=self._currency_symbol,
        )

    async def _apply(self, profile, amount: object, *, actor_id: str):
        limit = self._validate(amount)
        previous = profile.budget_limit
        if isinstance(profile, DriverProfile):
            updated = replace(profile, monthly_fuel_limit=limit)
        else:
            updated = replace(profile, personal_budget=limit)

        event = AuditEvent(
            event_type="budget_limit_updated",
            actor_id=actor_id,
            target_id=updated.user_id,
            target_type=updated.role.value,
            payload={"old_limit": str(previous), "new_limit": str(limit)},
        )
        await self._profiles.save_profile(updated, audit_event=event)
        logger.info(
            f"{updated.role.value} limit changed for {updated.user_id}: {previous} -> {limit}",
            extra={"actor_id": actor_id},
        )
        return updated
