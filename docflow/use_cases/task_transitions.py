"""Task lifecycle: the single owner of the task collection."""
from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..domain_errors import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    validation_error_from_pydantic,
)
from ..models import Role, Task, TaskStatus
from ..schemas import TaskCreate
from ..security import filter_visible, is_visible
from ..services.audit_log import AuditLog
from ..services.task_rules import (
    effective_status,
    is_terminal_status,
    normalize_task_status,
    now_utc,
    validate_status_transition,
)

logger = logging.getLogger(__name__)

ALL = "all"


def _parse_task_payload(fields: TaskCreate | Mapping[str, Any]) -> TaskCreate:
    if isinstance(fields, TaskCreate):
        data = fields
    else:
        try:
            data = TaskCreate.model_validate(dict(fields))
        except PydanticValidationError as error:
            raise validation_error_from_pydantic(
                error,
                code="TASK_VALIDATION_FAILED",
                message="Please fill in all required fields",
            ) from error

    missing = [name for name in ("title", "assigned_to") if not getattr(data, name).strip()]
    if missing:
        raise ValidationError(
            code="TASK_VALIDATION_FAILED",
            message="Please fill in all required fields",
            details={"fields": missing},
        )
    return data


def parse_status_filter(status: str | TaskStatus) -> Optional[TaskStatus]:
    """None means "all"."""
    if isinstance(status, TaskStatus):
        return status
    if not status or status.strip().lower() == ALL:
        return None
    try:
        return normalize_task_status(status)
    except ValueError as error:
        raise ValidationError(
            code="INVALID_FILTER",
            message=str(error),
            details={"status": status},
        ) from error


def department_matches(selected: str, department: Optional[str]) -> bool:
    if not selected or selected.strip().lower() == ALL:
        return True
    return (department or "").strip().lower() == selected.strip().lower()


class TaskLifecycleEngine:
    """Owns task records and enforces legal status transitions.

    Every lookup-plus-change runs under the engine lock, and records are
    replaced whole, so readers only ever see complete transitions.
    """

    def __init__(
        self,
        *,
        audit: Optional[AuditLog] = None,
        clock: Callable[[], datetime] = now_utc,
        default_assigner: str = "Current User",
    ) -> None:
        self._lock = threading.RLock()
        self._tasks: dict[int, Task] = {}
        self._last_id = 0
        self._audit = audit
        self._clock = clock
        self._default_assigner = default_assigner

    # ---- helpers ----

    def _get_task_or_404(self, task_id: int, role: Optional[Role]) -> Task:
        task = self._tasks.get(task_id)
        # Records outside the caller's scope are indistinguishable from missing ones.
        if task is None or (role is not None and not is_visible(role, task.department)):
            raise NotFoundError(
                code="TASK_NOT_FOUND",
                message="Task not found",
                details={"task_id": task_id},
            )
        return task

    def _with_effective_status(self, task: Task, at: datetime) -> Task:
        status = effective_status(task, at=at)
        if status == task.status:
            return task
        return dataclasses.replace(task, status=status)

    def _audit_event(self, action: str, task: Task, role: Optional[Role], details: dict[str, Any]) -> None:
        if self._audit is None:
            return
        self._audit.record(
            action=action,
            entity_type="task",
            entity_id=task.id,
            entity_name=task.title,
            role=role,
            department=task.department or None,
            details=details,
        )

    # ---- bootstrap ----

    def load(self, tasks: Iterable[Task]) -> None:
        """Adopt pre-existing records (e.g. demo data) keeping their ids."""
        incoming = list(tasks)
        with self._lock:
            seen = set(self._tasks)
            for task in incoming:
                if task.id in seen:
                    raise ValidationError(
                        code="TASK_DUPLICATE_ID",
                        message=f"Task id {task.id} already exists",
                        details={"task_id": task.id},
                    )
                seen.add(task.id)
            for task in incoming:
                self._tasks[task.id] = task
                self._last_id = max(self._last_id, task.id)
        logger.info("Loaded %s tasks", len(incoming))

    # ---- commands ----

    def create_task(self, fields: TaskCreate | Mapping[str, Any], *, role: Optional[Role] = None) -> Task:
        """Create a pending task with the next id."""
        data = _parse_task_payload(fields)
        now = self._clock()

        with self._lock:
            self._last_id += 1
            task = Task(
                id=self._last_id,
                title=data.title.strip(),
                description=data.description,
                assigned_to=data.assigned_to.strip(),
                assigned_by=(data.assigned_by or "").strip() or self._default_assigner,
                department=data.department.strip(),
                priority=data.priority,
                status=TaskStatus.PENDING,
                due_date=data.due_date or now.date(),
                created_date=now,
                document_id=data.document_id,
                document_title=data.document_title,
                comments=0,
            )
            self._tasks[task.id] = task
            self._audit_event("task_created", task, role, {"assignedTo": task.assigned_to})

        logger.info("Task %s created: %r assigned to %s", task.id, task.title, task.assigned_to)
        return task

    def update_status(
        self,
        task_id: int,
        new_status: str | TaskStatus,
        *,
        role: Optional[Role] = None,
    ) -> Task:
        """Move a task along an allowed transition; same-status requests are no-ops."""
        try:
            requested = normalize_task_status(new_status)
        except ValueError as error:
            raise ValidationError(
                code="TASK_VALIDATION_FAILED",
                message=str(error),
                details={"fields": ["status"], "status": new_status},
            ) from error

        with self._lock:
            task = self._get_task_or_404(task_id, role)
            now = self._clock()
            current = effective_status(task, at=now)
            try:
                target = validate_status_transition(task=task, next_status=requested, at=now)
            except ValueError as error:
                logger.warning("Task %s: rejected transition to %s: %s", task_id, requested.value, error)
                raise InvalidTransitionError(
                    code="TASK_INVALID_TRANSITION",
                    message=str(error),
                    details={"task_id": task_id, "from": current.value, "to": requested.value},
                ) from error

            # Idempotent: already in the requested state.
            if target == current:
                return self._with_effective_status(task, now)

            updated = dataclasses.replace(task, status=target)
            self._tasks[task_id] = updated
            self._audit_event(
                "task_status_changed",
                updated,
                role,
                {"oldStatus": current.value, "newStatus": target.value},
            )

        logger.info("Task %s status %s -> %s", task_id, current.value, target.value)
        return updated

    def _command(self, task_id: int, target: TaskStatus, role: Optional[Role]) -> Task:
        with self._lock:
            task = self._get_task_or_404(task_id, role)
            current = effective_status(task, at=self._clock())
            if is_terminal_status(current):
                logger.warning("Task %s: %s requested on %s task", task_id, target.value, current.value)
                raise InvalidTransitionError(
                    code="TASK_INVALID_TRANSITION",
                    message=f"Task is {current.value} and cannot change status",
                    details={"task_id": task_id, "from": current.value, "to": target.value},
                )
            return self.update_status(task_id, target, role=role)

    def start_task(self, task_id: int, *, role: Optional[Role] = None) -> Task:
        """pending -> in-progress."""
        return self._command(task_id, TaskStatus.IN_PROGRESS, role)

    def complete_task(self, task_id: int, *, role: Optional[Role] = None) -> Task:
        """in-progress -> completed."""
        return self._command(task_id, TaskStatus.COMPLETED, role)

    # ---- reads ----

    def get_task(self, task_id: int, *, role: Optional[Role] = None) -> Task:
        with self._lock:
            task = self._get_task_or_404(task_id, role)
        return self._with_effective_status(task, self._clock())

    def snapshot(self) -> tuple[Task, ...]:
        """All tasks in insertion order with overdue applied."""
        with self._lock:
            tasks = tuple(self._tasks.values())
        now = self._clock()
        return tuple(self._with_effective_status(task, now) for task in tasks)

    def list_tasks(
        self,
        role: Role,
        *,
        department: str = ALL,
        status: str | TaskStatus = ALL,
    ) -> list[Task]:
        """Department filter AND status filter AND visibility."""
        wanted_status = parse_status_filter(status)
        visible = filter_visible(role, self.snapshot())
        tasks = [
            task
            for task in visible
            if department_matches(department, task.department)
            and (wanted_status is None or task.status == wanted_status)
        ]
        logger.debug("Listed %s tasks for role=%s", len(tasks), role.value)
        return tasks
