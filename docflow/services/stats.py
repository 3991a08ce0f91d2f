"""Read-only counters derived on demand from already-filtered collections."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from ..models import Document, DocumentStatus, Notification, Task, TaskStatus
from ..schemas import DocumentStats, NotificationStats, TaskStats
from ..security import DepartmentScoped
from ..use_cases.notification_lifecycle import is_urgent_priority
from .task_rules import effective_status, now_utc


def count_by_status(tasks: Iterable[Task], *, now: Optional[datetime] = None) -> dict[TaskStatus, int]:
    """Every status is present, zero when unused. Overdue is derived from the deadline."""
    at = now or now_utc()
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[effective_status(task, at=at)] += 1
    return counts


def count_unread(notifications: Iterable[Notification]) -> int:
    return sum(1 for notification in notifications if not notification.read)


def count_urgent(notifications: Iterable[Notification]) -> int:
    return sum(1 for notification in notifications if is_urgent_priority(notification.priority))


def processing_rate(total: int, processed: int) -> int:
    """Percent processed, halves rounded up; 0 for an empty collection."""
    if total <= 0:
        return 0
    return (processed * 200 + total) // (total * 2)


def count_by_department(records: Iterable[DepartmentScoped]) -> dict[str, int]:
    """Department name -> count, in first-seen order; records without one are skipped."""
    counter: Counter[str] = Counter()
    for record in records:
        if record.department and record.department.strip():
            counter[record.department.strip()] += 1
    return dict(counter)


def task_stats(tasks: Sequence[Task], *, now: Optional[datetime] = None) -> TaskStats:
    counts = count_by_status(tasks, now=now)
    return TaskStats(
        total=len(tasks),
        pending=counts[TaskStatus.PENDING],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
        overdue=counts[TaskStatus.OVERDUE],
    )


def notification_stats(notifications: Sequence[Notification]) -> NotificationStats:
    return NotificationStats(
        total=len(notifications),
        unread=count_unread(notifications),
        urgent=count_urgent(notifications),
        action_required=sum(1 for notification in notifications if notification.action_required),
    )


def document_stats(documents: Sequence[Document]) -> DocumentStats:
    processed = sum(1 for document in documents if document.status == DocumentStatus.PROCESSED)
    return DocumentStats(
        total=len(documents),
        pending_review=sum(1 for document in documents if document.status == DocumentStatus.PENDING),
        processed=processed,
        errors=sum(1 for document in documents if document.status == DocumentStatus.ERROR),
        departments=len(count_by_department(documents)),
        processing_rate=processing_rate(len(documents), processed),
    )
