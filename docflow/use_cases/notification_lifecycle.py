"""Notification lifecycle: unread -> read, plus hard delete."""
from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..domain_errors import NotFoundError, ValidationError, validation_error_from_pydantic
from ..models import Notification, NotificationView, Priority, Role
from ..schemas import NotificationCreate
from ..security import filter_visible, is_visible
from ..services.audit_log import AuditLog
from ..services.task_rules import now_utc

logger = logging.getLogger(__name__)


def is_urgent_priority(priority: Priority) -> bool:
    """Shared by the urgent view and the urgent counter."""
    match priority:
        case Priority.URGENT | Priority.HIGH:
            return True
        case Priority.MEDIUM | Priority.LOW:
            return False


def parse_view(view: str | NotificationView) -> NotificationView:
    if isinstance(view, NotificationView):
        return view
    try:
        return NotificationView((view or "all").strip().lower())
    except ValueError:
        raise ValidationError(
            code="INVALID_FILTER",
            message=f"Unknown notification view: {view}",
            details={"view": view, "allowed": [item.value for item in NotificationView]},
        ) from None


def matches_view(notification: Notification, view: NotificationView) -> bool:
    match view:
        case NotificationView.ALL:
            return True
        case NotificationView.UNREAD:
            return not notification.read
        case NotificationView.URGENT:
            return is_urgent_priority(notification.priority)


class NotificationLifecycleEngine:
    """Owns notification records; read state only moves from unread to read."""

    def __init__(
        self,
        *,
        audit: Optional[AuditLog] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._lock = threading.RLock()
        self._notifications: dict[int, Notification] = {}
        self._last_id = 0
        self._audit = audit
        self._clock = clock

    def _get_notification_or_404(self, notification_id: int, role: Optional[Role]) -> Notification:
        notification = self._notifications.get(notification_id)
        if notification is None or (role is not None and not is_visible(role, notification.department)):
            raise NotFoundError(
                code="NOTIFICATION_NOT_FOUND",
                message="Notification not found",
                details={"notification_id": notification_id},
            )
        return notification

    def load(self, notifications: Iterable[Notification]) -> None:
        incoming = list(notifications)
        with self._lock:
            seen = set(self._notifications)
            for notification in incoming:
                if notification.id in seen:
                    raise ValidationError(
                        code="NOTIFICATION_DUPLICATE_ID",
                        message=f"Notification id {notification.id} already exists",
                        details={"notification_id": notification.id},
                    )
                seen.add(notification.id)
            for notification in incoming:
                self._notifications[notification.id] = notification
                self._last_id = max(self._last_id, notification.id)
        logger.info("Loaded %s notifications", len(incoming))

    def publish(self, payload: NotificationCreate | Mapping[str, Any]) -> Notification:
        """Accept an event-source notification as unread."""
        if isinstance(payload, NotificationCreate):
            data = payload
        else:
            try:
                data = NotificationCreate.model_validate(dict(payload))
            except PydanticValidationError as error:
                raise validation_error_from_pydantic(
                    error,
                    code="NOTIFICATION_VALIDATION_FAILED",
                    message="Invalid notification payload",
                ) from error

        with self._lock:
            self._last_id += 1
            notification = Notification(
                id=self._last_id,
                type=data.type,
                title=data.title,
                message=data.message,
                timestamp=data.timestamp or self._clock(),
                priority=data.priority,
                read=False,
                action_required=data.action_required,
                department=(data.department or "").strip() or None,
                related_id=data.related_id,
            )
            self._notifications[notification.id] = notification

        logger.info("Notification %s published (%s, %s)", notification.id, notification.type.value, notification.priority.value)
        return notification

    def mark_read(self, notification_id: int, *, role: Optional[Role] = None) -> Notification:
        with self._lock:
            notification = self._get_notification_or_404(notification_id, role)
            if notification.read:
                return notification
            updated = dataclasses.replace(notification, read=True)
            self._notifications[notification_id] = updated
        logger.debug("Notification %s marked read", notification_id)
        return updated

    def mark_all_read(self, role: Role) -> int:
        """Mark every notification visible to ``role``; returns how many changed."""
        with self._lock:
            changed = [
                notification.id
                for notification in self._notifications.values()
                if not notification.read and is_visible(role, notification.department)
            ]
            for notification_id in changed:
                self._notifications[notification_id] = dataclasses.replace(
                    self._notifications[notification_id], read=True
                )
        logger.info("Marked %s notifications read for role=%s", len(changed), role.value)
        return len(changed)

    def delete(self, notification_id: int, *, role: Optional[Role] = None) -> None:
        with self._lock:
            notification = self._get_notification_or_404(notification_id, role)
            del self._notifications[notification_id]
            if self._audit is not None:
                self._audit.record(
                    action="notification_deleted",
                    entity_type="notification",
                    entity_id=notification.id,
                    entity_name=notification.title,
                    role=role,
                    department=notification.department,
                )
        logger.info("Notification %s deleted", notification_id)

    def snapshot(self) -> tuple[Notification, ...]:
        with self._lock:
            return tuple(self._notifications.values())

    def list_notifications(self, role: Role, view: str | NotificationView = NotificationView.ALL) -> list[Notification]:
        mode = parse_view(view)
        return [
            notification
            for notification in filter_visible(role, self.snapshot())
            if matches_view(notification, mode)
        ]
