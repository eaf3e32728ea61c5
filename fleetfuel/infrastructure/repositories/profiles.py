from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from fleetfuel.core.audit import AuditLogger
from fleetfuel.core.logging import get_logger
from fleetfuel.domain.audit import AuditEvent
from fleetfuel.domain.errors import StoreUnavailable
from fleetfuel.domain.profiles import CitizenProfile, DriverProfile, Role, UserProfile
from fleetfuel.infrastructure.models import ProfileModel
from fleetfuel.monitoring.metrics import STORE_ERRORS_TOTAL

logger = get_logger(__name__)


class SqlAlchemyProfileStore:
    """SQLAlchemy implementation of the ProfileStore protocol."""

    def __init__(self, session_factory: Any, audit: AuditLogger | None = None) -> None:
        self._session_factory = session_factory
        self._audit = audit or AuditLogger(session_factory)

    async def get_profile(self, user_id: str) -> UserProfile | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(ProfileModel, user_id)
        except SQLAlchemyError as exc:
            raise self._unavailable("Failed to load profile", exc) from exc

        if row is None:
            return None
        return self._to_domain(row)

    async def list_drivers(self, business_group_id: str) -> list[DriverProfile]:
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.role == Role.DRIVER.value)
            .where(ProfileModel.business_group_id == business_group_id)
            .order_by(ProfileModel.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise self._unavailable("Failed to list drivers", exc) from exc

        return [self._to_driver(row) for row in rows]

    async def save_profile(self, profile: UserProfile, audit_event: AuditEvent | None = None) -> None:
        try:
            async with self._session_factory() as session:
                existing = await session.get(ProfileModel, profile.user_id)
                if existing is None:
                    existing = ProfileModel(id=profile.user_id)
                    session.add(existing)

                existing.role = profile.role.value
                existing.name = profile.name
                existing.email = profile.email
                if isinstance(profile, DriverProfile):
                    existing.monthly_fuel_limit = profile.monthly_fuel_limit
                    existing.business_group_id = profile.business_group_id
                    existing.personal_budget = None
                else:
                    existing.personal_budget = profile.personal_budget
                    existing.monthly_fuel_limit = None
                    existing.business_group_id = None

                if audit_event is not None:
                    await self._audit.log(audit_event, session=session)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._unavailable("Failed to save profile", exc) from exc

    @staticmethod
    def _unavailable(message: str, exc: Exception) -> StoreUnavailable:
        STORE_ERRORS_TOTAL.labels(store="profiles").inc()
        logger.error(f"{message}: {exc}")
        return StoreUnavailable(store="profiles", message=message)

    def _to_domain(self, row: ProfileModel) -> UserProfile:
        if row.role == Role.DRIVER.value:
            return self._to_driver(row)
        return CitizenProfile(
            user_id=row.id,
            personal_budget=Decimal(row.personal_budget or 0),
            name=row.name,
            email=row.email,
            created_at=row.created_at,
        )

    @staticmethod
    def _to_driver(row: ProfileModel) -> DriverProfile:
        return DriverProfile(
            user_id=row.id,
            monthly_fuel_limit=Decimal(row.monthly_fuel_limit or 0),
            business_group_id=row.business_group_id,
            name=row.name,
            email=row.email,
            created_at=row.created_at,
        )
