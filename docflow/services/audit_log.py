"""Append-only activity feed written by the lifecycle engines."""
from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional

from ..models import AuditEvent, Role
from .task_rules import now_utc

logger = logging.getLogger(__name__)


class AuditLog:
    def __init__(self, *, clock: Callable[[], datetime] = now_utc) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._events: list[AuditEvent] = []

    def record(
        self,
        *,
        action: str,
        entity_type: str,
        entity_id: int,
        entity_name: str,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        with self._lock:
            event = AuditEvent(
                id=next(self._ids),
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                role=role,
                department=department,
                at=self._clock(),
                details=dict(details or {}),
            )
            self._events.append(event)
        logger.debug("Audit %s %s#%s", action, entity_type, entity_id)
        return event

    def events(self) -> tuple[AuditEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def recent(self, limit: int) -> list[AuditEvent]:
        """Newest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(reversed(self._events[-limit:]))
