from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Numeric, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """User profile row; the role column selects which limit column applies."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(length=64), primary_key=True)
    role: Mapped[str] = mapped_column(String(length=16), nullable=False)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(length=255), nullable=False, default="")

    # Citizens only
    personal_budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Drivers only
    monthly_fuel_limit: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    business_group_id: Mapped[str | None] = mapped_column(String(length=64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_profiles_role", "role"),
        Index("ix_profiles_business_group_id", "business_group_id"),
    )


class TripModel(Base):
    """Completed or logged trip carrying a fuel cost."""

    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(length=64), nullable=False)
    business_group_id: Mapped[str | None] = mapped_column(String(length=64), nullable=True)
    vehicle_id: Mapped[str | None] = mapped_column(String(length=64), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    distance_km: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    fuel_used_l: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_trips_owner_start", "owner_id", "start_time"),
        Index("idx_trips_group_start", "business_group_id", "start_time"),
    )


class AuditLogModel(Base):
    """Audit trail for budget and limit changes with tamper-evident chaining."""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    prev_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_audit_logs_target", "target_type", "target_id"),
        Index("ix_audit_logs_created_at", "created_at"),
    )
