"""Application-state object the presentation layer talks to.

One ``DocumentConsole`` per session: it owns the identity context and the
three lifecycle engines, and every read goes through the visibility filter
for the active role.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Optional

from .auth import get_role_ui_permissions, require_permission, role_label
from .config import Settings, get_settings
from .identity import IdentityContext
from .models import Document, Notification, NotificationView, Role, Task, TaskStatus
from .schemas import (
    ActivityEntry,
    DashboardResponse,
    DocumentCreate,
    DocumentStats,
    NotificationCreate,
    NotificationStats,
    SearchFilters,
    TaskCreate,
    TaskResponse,
    TaskStats,
)
from .services import stats
from .services.audit_log import AuditLog
from .services.task_response_builder import tasks_to_response
from .services.task_rules import now_utc
from .use_cases.document_registry import DocumentRegistry
from .use_cases.notification_lifecycle import NotificationLifecycleEngine
from .use_cases.search import SearchCoordinator, SearchOutcome, search_records
from .use_cases.task_transitions import ALL, TaskLifecycleEngine


class DocumentConsole:
    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.settings = settings or get_settings()
        self._clock = clock
        self.identity = IdentityContext()
        self.audit = AuditLog(clock=clock)
        self.documents = DocumentRegistry(audit=self.audit, clock=clock)
        self.tasks = TaskLifecycleEngine(
            audit=self.audit,
            clock=clock,
            default_assigner=self.settings.DEFAULT_TASK_ASSIGNER,
        )
        self.notifications = NotificationLifecycleEngine(audit=self.audit, clock=clock)
        self._search = SearchCoordinator(
            lambda: self.list_documents(),
            latency_seconds=self.settings.SEARCH_LATENCY_SECONDS,
            clock=clock,
        )

    # ---- session ----

    def set_role(self, role: str | Role) -> Role:
        return self.identity.set_role(role)

    def current_role(self) -> Role:
        return self.identity.current_role()

    def logout(self) -> None:
        self._search.cancel()
        self.identity.clear()

    def ui_permissions(self) -> dict[str, bool]:
        return get_role_ui_permissions(self.current_role())

    def departments(self) -> list[str]:
        return self.settings.departments_list

    # ---- documents ----

    def list_documents(self, role_scoped: bool = True) -> list[Document]:
        role = self.current_role()
        if not role_scoped:
            require_permission(role, "canViewAllDepartments")
            return self.documents.list_documents(None)
        return self.documents.list_documents(role)

    def register_document(self, payload: DocumentCreate | Mapping[str, Any]) -> Document:
        return self.documents.register(payload, role=self.current_role())

    def complete_processing(self, document_id: int, *, succeeded: bool = True) -> Document:
        # Driven by the processing pipeline, not by a user action.
        return self.documents.complete_processing(document_id, succeeded=succeeded)

    # ---- tasks ----

    def list_tasks(self, department: str = ALL, status: str | TaskStatus = ALL) -> list[Task]:
        return self.tasks.list_tasks(self.current_role(), department=department, status=status)

    def task_views(self, department: str = ALL, status: str | TaskStatus = ALL) -> list[TaskResponse]:
        """Tasks with linked document titles resolved (only documents the role can see)."""
        role = self.current_role()
        tasks = self.tasks.list_tasks(role, department=department, status=status)
        return tasks_to_response(tasks, self.documents.snapshot(), role=role, now=self._clock())

    def create_task(self, fields: TaskCreate | Mapping[str, Any]) -> Task:
        return self.tasks.create_task(fields, role=self.current_role())

    def start_task(self, task_id: int) -> Task:
        return self.tasks.start_task(task_id, role=self.current_role())

    def complete_task(self, task_id: int) -> Task:
        return self.tasks.complete_task(task_id, role=self.current_role())

    def update_status(self, task_id: int, new_status: str | TaskStatus) -> Task:
        return self.tasks.update_status(task_id, new_status, role=self.current_role())

    # ---- notifications ----

    def list_notifications(self, view: str | NotificationView = NotificationView.ALL) -> list[Notification]:
        return self.notifications.list_notifications(self.current_role(), view)

    def publish_notification(self, payload: NotificationCreate | Mapping[str, Any]) -> Notification:
        return self.notifications.publish(payload)

    def mark_read(self, notification_id: int) -> Notification:
        return self.notifications.mark_read(notification_id, role=self.current_role())

    def mark_all_read(self) -> int:
        return self.notifications.mark_all_read(self.current_role())

    def delete_notification(self, notification_id: int) -> None:
        self.notifications.delete(notification_id, role=self.current_role())

    # ---- search ----

    def search(self, query: str = "", filters: SearchFilters | Mapping[str, Any] | None = None) -> list[Document]:
        return search_records(self.list_documents(), query, filters, now=self._clock())

    async def search_async(
        self,
        query: str = "",
        filters: SearchFilters | Mapping[str, Any] | None = None,
    ) -> SearchOutcome:
        self.current_role()  # no session, no search
        return await self._search.search(query, filters)

    def is_current_search(self, outcome: SearchOutcome) -> bool:
        return self._search.is_current(outcome)

    # ---- stats ----

    def task_stats(self, department: str = ALL, status: str | TaskStatus = ALL) -> TaskStats:
        return stats.task_stats(self.list_tasks(department, status), now=self._clock())

    def notification_stats(self, view: str | NotificationView = NotificationView.ALL) -> NotificationStats:
        return stats.notification_stats(self.list_notifications(view))

    def document_stats(self) -> DocumentStats:
        return stats.document_stats(self.list_documents())

    def dashboard(self) -> DashboardResponse:
        role = self.current_role()
        return DashboardResponse(
            role=role,
            role_label=role_label(role),
            documents=self.document_stats(),
            tasks=self.task_stats(),
            notifications=self.notification_stats(),
        )

    def recent_activity(self, limit: Optional[int] = None) -> list[ActivityEntry]:
        """Admin analytics feed, newest first."""
        role = self.current_role()
        require_permission(role, "canViewAnalytics")
        events = self.audit.recent(limit if limit is not None else self.settings.RECENT_ACTIVITY_LIMIT)
        return [ActivityEntry.model_validate(event) for event in events]