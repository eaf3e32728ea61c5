from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Protocol, runtime_checkable

from fleetfuel.domain.errors import InvalidTripCost
from fleetfuel.domain.profiles import TripScope


@dataclass(frozen=True, slots=True)
class TripRecord:
    """A logged vehicle trip and the fuel cost attributed to it.

    Args:
        id: Stable identifier of the trip.
        owner_id: The citizen or driver who made the trip.
        start_time: Timezone-aware start of the trip; decides which month it counts in.
        cost: Fuel cost of the trip, never negative.
        business_group_id: Fleet the trip is attributed to, for driver trips.
        vehicle_id: Vehicle used, if known.
        distance_km: Distance covered.
        fuel_used_l: Fuel consumed in litres.
    """

    id: str
    owner_id: str
    start_time: datetime
    cost: Decimal
    business_group_id: str | None = None
    vehicle_id: str | None = None
    distance_km: Decimal = Decimal("0")
    fuel_used_l: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        try:
            cost = Decimal(self.cost)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidTripCost(self.id, self.cost) from None
        if not cost.is_finite() or cost < 0:
            raise InvalidTripCost(self.id, self.cost)
        object.__setattr__(self, "cost", cost)
        if self.start_time.tzinfo is None:
            raise ValueError(f"Trip {self.id} start_time must be timezone-aware")


@runtime_checkable
class TripStore(Protocol):
    """Read access to trip records, plus recording for completed trips."""

    async def list_trips(
        self,
        scope: TripScope,
        *,
        start: datetime,
        end: datetime,
    ) -> list[TripRecord]:
        """Return trips matching `scope` with `start <= start_time < end`."""

    async def add_trip(self, trip: TripRecord) -> None:
        """Persist a completed trip."""
