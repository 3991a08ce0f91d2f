from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from docflow.models import (
    Document,
    DocumentStatus,
    Notification,
    NotificationType,
    Priority,
    Task,
    TaskStatus,
)
from docflow.services.stats import (
    count_by_department,
    count_by_status,
    document_stats,
    notification_stats,
    processing_rate,
    task_stats,
)

NOW = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)


def _task(task_id: int, status: TaskStatus, *, due: date = date(2026, 3, 1)) -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        description="",
        assigned_to="Someone",
        assigned_by="Manager",
        department="Engineering",
        priority=Priority.MEDIUM,
        status=status,
        due_date=due,
        created_date=NOW - timedelta(days=1),
    )


def _notification(notification_id: int, priority: Priority, *, read: bool = False, action: bool = False) -> Notification:
    return Notification(
        id=notification_id,
        type=NotificationType.TASK,
        title="Task Assignment",
        message="",
        timestamp=NOW,
        priority=priority,
        read=read,
        action_required=action,
    )


def _document(document_id: int, status: DocumentStatus, department: str) -> Document:
    return Document(
        id=document_id,
        title="Doc",
        summary="",
        department=department,
        language="English",
        status=status,
        priority=Priority.LOW,
        deadline=None,
        upload_date=NOW.date(),
    )


@pytest.mark.parametrize(
    ("total", "processed", "expected"),
    [
        (0, 0, 0),
        (3, 0, 0),
        (3, 1, 33),
        (3, 2, 67),
        (4, 4, 100),
        (8, 1, 13),
        (8, 5, 63),
        (40, 1, 3),
    ],
)
def test_processing_rate_rounds_halves_up_and_guards_empty_collection(total: int, processed: int, expected: int) -> None:
    assert processing_rate(total, processed) == expected


def test_count_by_status_reports_every_status_and_derives_overdue() -> None:
    tasks = [
        _task(1, TaskStatus.PENDING),
        _task(2, TaskStatus.IN_PROGRESS, due=date(2026, 2, 10)),
        _task(3, TaskStatus.COMPLETED, due=date(2026, 2, 10)),
    ]

    counts = count_by_status(tasks, now=NOW)

    assert counts == {
        TaskStatus.PENDING: 1,
        TaskStatus.IN_PROGRESS: 0,
        TaskStatus.COMPLETED: 1,
        TaskStatus.OVERDUE: 1,
    }
    assert sum(counts.values()) == len(tasks)


def test_empty_collections_produce_zero_stats() -> None:
    assert task_stats([], now=NOW).model_dump() == {
        "total": 0,
        "pending": 0,
        "in_progress": 0,
        "completed": 0,
        "overdue": 0,
    }
    assert notification_stats([]).total == 0
    assert document_stats([]).processing_rate == 0


def test_notification_stats_urgent_counts_urgent_and_high() -> None:
    stats = notification_stats(
        [
            _notification(1, Priority.URGENT),
            _notification(2, Priority.HIGH, read=True, action=True),
            _notification(3, Priority.MEDIUM, action=True),
            _notification(4, Priority.LOW, read=True),
        ]
    )

    assert stats.model_dump() == {"total": 4, "unread": 2, "urgent": 2, "action_required": 2}


def test_document_stats_counts_statuses_and_distinct_departments() -> None:
    stats = document_stats(
        [
            _document(1, DocumentStatus.PROCESSED, "Engineering"),
            _document(2, DocumentStatus.PENDING, "Engineering"),
            _document(3, DocumentStatus.ERROR, "HR"),
            _document(4, DocumentStatus.PROCESSED, "Finance"),
        ]
    )

    assert stats.total == 4
    assert stats.pending_review == 1
    assert stats.processed == 2
    assert stats.errors == 1
    assert stats.departments == 3
    assert stats.processing_rate == 50


def test_count_by_department_skips_blank_departments() -> None:
    records = [
        SimpleNamespace(department="HR"),
        SimpleNamespace(department=None),
        SimpleNamespace(department=" "),
        SimpleNamespace(department="HR"),
        SimpleNamespace(department="Finance"),
    ]

    assert count_by_department(records) == {"HR": 2, "Finance": 1}
