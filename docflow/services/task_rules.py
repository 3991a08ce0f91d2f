"""Task status invariant helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from ..models import Task, TaskStatus


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_task_status(status: str | TaskStatus | None) -> TaskStatus:
    if isinstance(status, TaskStatus):
        return status
    if not status:
        return TaskStatus.PENDING
    raw = status.strip().lower().replace("_", "-")
    try:
        return TaskStatus(raw)
    except ValueError:
        raise ValueError(f"Unknown task status: {status}") from None


def allowed_targets(status: TaskStatus) -> frozenset[TaskStatus]:
    """Statuses reachable in one step from ``status`` (deadline permitting)."""
    match status:
        case TaskStatus.PENDING:
            return frozenset({TaskStatus.IN_PROGRESS, TaskStatus.OVERDUE})
        case TaskStatus.IN_PROGRESS:
            return frozenset({TaskStatus.COMPLETED, TaskStatus.OVERDUE})
        case TaskStatus.COMPLETED | TaskStatus.OVERDUE:
            return frozenset()


def is_terminal_status(status: TaskStatus) -> bool:
    return not allowed_targets(status)


def is_past_due(task: Task, *, at: datetime) -> bool:
    return at.date() > task.due_date


def effective_status(task: Task, *, at: datetime) -> TaskStatus:
    """Stored status with the deadline applied: open tasks past due read as overdue."""
    if task.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS) and is_past_due(task, at=at):
        return TaskStatus.OVERDUE
    return task.status


def validate_status_transition(
    *,
    task: Task,
    next_status: str | TaskStatus,
    at: datetime,
) -> TaskStatus:
    """Return the normalized target or raise ValueError.

    Re-requesting the current status is accepted (the caller treats it as a no-op).
    """
    current = effective_status(task, at=at)
    nxt = normalize_task_status(next_status)

    if nxt == current:
        return nxt

    if nxt not in allowed_targets(current):
        raise ValueError(f"Invalid task status transition: {current.value} -> {nxt.value}")
    if nxt == TaskStatus.OVERDUE and not is_past_due(task, at=at):
        raise ValueError(f"Task cannot become overdue before its due date {task.due_date.isoformat()}")
    return nxt
