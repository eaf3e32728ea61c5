from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """A change to be written to the audit trail together with the change itself."""

    event_type: str
    actor_id: str
    target_id: str
    target_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
