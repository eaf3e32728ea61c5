from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fleetfuel.api.dependencies import get_budget_reconciler, get_trip_store
from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.domain.trips import TripRecord, TripStore

router = APIRouter(prefix="/v1/trips", tags=["trips"])


class TripCreate(BaseModel):
    owner_id: str
    start_time: datetime
    cost: Decimal
    business_group_id: str | None = None
    vehicle_id: str | None = None
    distance_km: Decimal = Field(default=Decimal("0"), ge=0)
    fuel_used_l: Decimal = Field(default=Decimal("0"), ge=0)


class TripCreated(BaseModel):
    id: str
    owner_id: str
    start_time: datetime
    cost: Decimal
    business_group_id: str | None = None


@router.post("", response_model=TripCreated, status_code=201)
async def record_trip(
    body: TripCreate,
    trips: TripStore = Depends(get_trip_store),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> TripCreated:
    """Record a completed trip for a known user.

    A grouped driver's trip is tagged with the driver's business group when the
    client omits it; a different group, or a negative cost, is rejected with 422.
    """

    owner = await reconciler.resolve_profile(body.owner_id)
    business_group_id = owner.trip_group_for(body.business_group_id)

    start_time = body.start_time
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)

    trip = TripRecord(
        id=str(uuid4()),
        owner_id=body.owner_id,
        start_time=start_time,
        cost=body.cost,
        business_group_id=business_group_id,
        vehicle_id=body.vehicle_id,
        distance_km=body.distance_km,
        fuel_used_l=body.fuel_used_l,
    )
    await trips.add_trip(trip)
    return TripCreated(
        id=trip.id,
        owner_id=trip.owner_id,
        start_time=trip.start_time,
        cost=trip.cost,
        business_group_id=trip.business_group_id,
    )
