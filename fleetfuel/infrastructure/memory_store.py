from __future__ import annotations

import asyncio
from datetime import datetime

from fleetfuel.domain.audit import AuditEvent
from fleetfuel.domain.profiles import DriverProfile, TripScope, UserProfile
from fleetfuel.domain.trips import TripRecord


class InMemoryProfileStore:
    """Dict-backed ProfileStore for portable mode and tests."""

    def __init__(self, profiles: list[UserProfile] | None = None) -> None:
        self._profiles: dict[str, UserProfile] = {p.user_id: p for p in profiles or []}
        self.audit_events: list[AuditEvent] = []
        self._lock = asyncio.Lock()

    async def get_profile(self, user_id: str) -> UserProfile | None:
        async with self._lock:
            return self._profiles.get(user_id)

    async def list_drivers(self, business_group_id: str) -> list[DriverProfile]:
        async with self._lock:
            return [
                p
                for p in self._profiles.values()
                if isinstance(p, DriverProfile) and p.business_group_id == business_group_id
            ]

    async def save_profile(self, profile: UserProfile, audit_event: AuditEvent | None = None) -> None:
        async with self._lock:
            self._profiles[profile.user_id] = profile
            if audit_event is not None:
                self.audit_events.append(audit_event)


class InMemoryTripStore:
    """List-backed TripStore for portable mode and tests."""

    def __init__(self, trips: list[TripRecord] | None = None) -> None:
        self._trips: list[TripRecord] = list(trips or [])
        self._lock = asyncio.Lock()

    async def list_trips(
        self,
        scope: TripScope,
        *,
        start: datetime,
        end: datetime,
    ) -> list[TripRecord]:
        async with self._lock:
            return [
                t
                for t in self._trips
                if t.owner_id == scope.owner_id
                and (scope.business_group_id is None or t.business_group_id == scope.business_group_id)
                and start <= t.start_time < end
            ]

    async def add_trip(self, trip: TripRecord) -> None:
        async with self._lock:
            self._trips.append(trip)
