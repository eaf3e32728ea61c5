import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.core.logging import get_logger
from fleetfuel.domain.audit import AuditEvent
from fleetfuel.domain.errors import StoreUnavailable
from fleetfuel.infrastructure.models import AuditLogModel
from fleetfuel.monitoring.metrics import STORE_ERRORS_TOTAL

logger = get_logger(__name__)


class AuditLogger:
    """
    Audit trail for budget and fuel-limit changes with tamper-evident chaining.
    """

    def __init__(self, session_factory: Any):
        self._session_factory = session_factory

    async def _get_last_hash(self, session: AsyncSession) -> str:
        """Retrieve the hash of the most recent audit log entry."""
        stmt = select(AuditLogModel.hash).order_by(AuditLogModel.created_at.desc()).limit(1)
        result = await session.execute(stmt)
        last_hash = result.scalar_one_or_none()
        return last_hash or "0" * 64

    @staticmethod
    def calculate_hash(prev_hash: str, event: Dict[str, Any]) -> str:
        """Calculate SHA-256 hash for tamper-evident chaining."""
        message = f"{prev_hash}|{json.dumps(event, sort_keys=True, default=str)}"
        return hashlib.sha256(message.encode("utf-8")).hexdigest()

    async def log(self, event: AuditEvent, session: Optional[AsyncSession] = None) -> str:
        """Record an audit event and return its chain hash.

        With `session`, the entry joins the caller's transaction and is
        committed (or rolled back) together with the change it describes.
        """
        if session is not None:
            return await self._append(session, event)

        try:
            async with self._session_factory() as own_session:
                current_hash = await self._append(own_session, event)
                await own_session.commit()
        except SQLAlchemyError as exc:
            STORE_ERRORS_TOTAL.labels(store="audit").inc()
            logger.error(f"Failed to write audit log: {exc}")
            raise StoreUnavailable(store="audit", message="Failed to write audit log") from exc

        logger.info(
            f"Audit log entry created: {event.event_type} by {event.actor_id}",
            extra={"audit_hash": current_hash, "event_type": event.event_type},
        )
        return current_hash

    async def _append(self, session: AsyncSession, event: AuditEvent) -> str:
        created_at = datetime.now(timezone.utc)
        prev_hash = await self._get_last_hash(session)

        current_hash = self.calculate_hash(
            prev_hash,
            self._event_data(
                event.event_type,
                event.actor_id,
                event.target_id,
                event.target_type,
                event.payload,
                created_at,
            ),
        )

        session.add(
            AuditLogModel(
                event_type=event.event_type,
                actor_id=event.actor_id,
                target_id=event.target_id,
                target_type=event.target_type,
                payload=event.payload,
                prev_hash=prev_hash,
                hash=current_hash,
                created_at=created_at,
            )
        )
        return current_hash

    async def verify_chain(self, limit: int = 100) -> bool:
        """Verify links and hashes of the most recent entries."""
        stmt = select(AuditLogModel).order_by(AuditLogModel.created_at.desc()).limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                entries = list(reversed(result.scalars().all()))
        except SQLAlchemyError as exc:
            STORE_ERRORS_TOTAL.labels(store="audit").inc()
            logger.error(f"Failed to read audit log: {exc}")
            raise StoreUnavailable(store="audit", message="Failed to read audit log") from exc

        for i, entry in enumerate(entries):
            if i > 0 and entry.prev_hash != entries[i - 1].hash:
                logger.error(f"Audit chain broken at {entry.id}")
                return False

            expected = self.calculate_hash(
                entry.prev_hash,
                self._event_data(
                    entry.event_type,
                    entry.actor_id,
                    entry.target_id,
                    entry.target_type,
                    entry.payload or {},
                    entry.created_at,
                ),
            )
            if expected != entry.hash:
                logger.error(f"Audit hash mismatch at {entry.id}")
                return False

        return True

    @staticmethod
    def _event_data(
        event_type: str,
        actor_id: Optional[str],
        target_id: str,
        target_type: str,
        payload: Dict[str, Any],
        created_at: datetime,
    ) -> Dict[str, Any]:
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "event_type": event_type,
            "actor_id": actor_id,
            "target_id": target_id,
            "target_type": target_type,
            "payload": payload,
            "timestamp": created_at.astimezone(timezone.utc).isoformat(),
        }
