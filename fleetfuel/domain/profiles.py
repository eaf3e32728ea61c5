from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol, Union, runtime_checkable

from fleetfuel.domain.audit import AuditEvent
from fleetfuel.domain.errors import TripGroupMismatch


class Role(str, Enum):
    """Kinds of users tracked against a monthly ceiling."""

    CITIZEN = "citizen"
    DRIVER = "driver"


@dataclass(frozen=True, slots=True)
class TripScope:
    """Which trip records count towards a user's monthly usage."""

    owner_id: str
    business_group_id: str | None = None


@dataclass(frozen=True, slots=True)
class CitizenProfile:
    """Individual tracking personal fuel spend against a self-set budget."""

    user_id: str
    personal_budget: Decimal
    name: str = ""
    email: str = ""
    created_at: datetime | None = None

    @property
    def role(self) -> Role:
        return Role.CITIZEN

    @property
    def budget_limit(self) -> Decimal:
        return self.personal_budget

    def trip_scope(self) -> TripScope:
        return TripScope(owner_id=self.user_id)

    def trip_group_for(self, requested: str | None) -> str | None:
        return requested


@dataclass(frozen=True, slots=True)
class DriverProfile:
    """Driver affiliated with a business group, tracked against a company-set limit.

    Usage counts only the driver's own trips. When the driver belongs to a
    business group the trips must also carry that group id.
    """

    user_id: str
    monthly_fuel_limit: Decimal
    business_group_id: str | None = None
    name: str = ""
    email: str = ""
    created_at: datetime | None = None

    @property
    def role(self) -> Role:
        return Role.DRIVER

    @property
    def budget_limit(self) -> Decimal:
        return self.monthly_fuel_limit

    def trip_scope(self) -> TripScope:
        return TripScope(owner_id=self.user_id, business_group_id=self.business_group_id)

    def trip_group_for(self, requested: str | None) -> str | None:
        """Business group to tag a new trip with so that it lands in this driver's scope."""

        if self.business_group_id is None:
            return requested
        if requested is None:
            return self.business_group_id
        if requested != self.business_group_id:
            raise TripGroupMismatch(self.user_id, self.business_group_id, requested)
        return requested


UserProfile = Union[CitizenProfile, DriverProfile]


@runtime_checkable
class ProfileStore(Protocol):
    """Resolves user ids to role-specific profiles."""

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile for `user_id`, or None when no identity resolves."""

    async def list_drivers(self, business_group_id: str) -> list[DriverProfile]:
        """Return every driver attached to a business group."""

    async def save_profile(self, profile: UserProfile, audit_event: AuditEvent | None = None) -> None:
        """Create or replace a profile.

        When `audit_event` is given it is recorded atomically with the write:
        either both are stored or neither is.
        """
