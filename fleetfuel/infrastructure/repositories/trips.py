from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from fleetfuel.core.logging import get_logger
from fleetfuel.domain.errors import StoreUnavailable
from fleetfuel.domain.profiles import TripScope
from fleetfuel.domain.trips import TripRecord
from fleetfuel.infrastructure.models import TripModel
from fleetfuel.monitoring.metrics import STORE_ERRORS_TOTAL

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on write, so everything is stored and compared in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlAlchemyTripStore:
    """SQLAlchemy implementation of the TripStore protocol."""

    def __init__(self, session_factory: Any) -> None:
        self._session_factory = session_factory

    async def list_trips(
        self,
        scope: TripScope,
        *,
        start: datetime,
        end: datetime,
    ) -> list[TripRecord]:
        stmt = (
            select(TripModel)
            .where(TripModel.owner_id == scope.owner_id)
            .where(TripModel.start_time >= _as_utc(start))
            .where(TripModel.start_time < _as_utc(end))
            .order_by(TripModel.start_time)
        )
        if scope.business_group_id is not None:
            stmt = stmt.where(TripModel.business_group_id == scope.business_group_id)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            STORE_ERRORS_TOTAL.labels(store="trips").inc()
            logger.error(f"Trip query failed for {scope.owner_id}: {exc}")
            raise StoreUnavailable(store="trips", message="Failed to load trips") from exc

        return [self._to_domain(row) for row in rows]

    async def add_trip(self, trip: TripRecord) -> None:
        model = TripModel(
            id=trip.id,
            owner_id=trip.owner_id,
            business_group_id=trip.business_group_id,
            vehicle_id=trip.vehicle_id,
            start_time=_as_utc(trip.start_time),
            cost=trip.cost,
            distance_km=trip.distance_km,
            fuel_used_l=trip.fuel_used_l,
        )
        try:
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
        except SQLAlchemyError as exc:
            STORE_ERRORS_TOTAL.labels(store="trips").inc()
            logger.error(f"Failed to record trip {trip.id}: {exc}")
            raise StoreUnavailable(store="trips", message="Failed to record trip") from exc

    @staticmethod
    def _to_domain(row: TripModel) -> TripRecord:
        return TripRecord(
            id=row.id,
            owner_id=row.owner_id,
            business_group_id=row.business_group_id,
            vehicle_id=row.vehicle_id,
            start_time=_as_utc(row.start_time),
            cost=Decimal(row.cost),
            distance_km=Decimal(row.distance_km or 0),
            fuel_used_l=Decimal(row.fuel_used_l or 0),
        )
