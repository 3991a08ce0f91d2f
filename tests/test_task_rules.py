from datetime import date, datetime, timezone

import pytest

from docflow.models import Priority, Task, TaskStatus
from docflow.services.task_rules import (
    allowed_targets,
    effective_status,
    is_terminal_status,
    normalize_task_status,
    validate_status_transition,
)

NOW = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)


def _task(*, status: TaskStatus = TaskStatus.PENDING, due: date = date(2026, 2, 20)) -> Task:
    return Task(
        id=1,
        title="Review safety protocol",
        description="",
        assigned_to="Safety Team Lead",
        assigned_by="Station Manager",
        department="Engineering",
        priority=Priority.HIGH,
        status=status,
        due_date=due,
        created_date=datetime(2026, 2, 10, 9, 0, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("pending", TaskStatus.PENDING),
        ("in-progress", TaskStatus.IN_PROGRESS),
        ("in_progress", TaskStatus.IN_PROGRESS),
        (" Completed ", TaskStatus.COMPLETED),
        (None, TaskStatus.PENDING),
        (TaskStatus.OVERDUE, TaskStatus.OVERDUE),
    ],
)
def test_normalize_task_status_accepts_known_spellings(raw, expected: TaskStatus) -> None:
    assert normalize_task_status(raw) == expected


def test_normalize_task_status_rejects_unknown_value() -> None:
    with pytest.raises(ValueError, match="Unknown task status"):
        normalize_task_status("archived")


def test_terminal_statuses_have_no_outgoing_transitions() -> None:
    assert is_terminal_status(TaskStatus.COMPLETED)
    assert is_terminal_status(TaskStatus.OVERDUE)
    assert allowed_targets(TaskStatus.PENDING) == {TaskStatus.IN_PROGRESS, TaskStatus.OVERDUE}
    assert allowed_targets(TaskStatus.IN_PROGRESS) == {TaskStatus.COMPLETED, TaskStatus.OVERDUE}


def test_open_task_past_due_reads_as_overdue() -> None:
    task = _task(due=date(2026, 2, 15))
    assert effective_status(task, at=NOW) == TaskStatus.OVERDUE


def test_task_due_today_is_not_overdue_yet() -> None:
    task = _task(due=NOW.date())
    assert effective_status(task, at=NOW) == TaskStatus.PENDING


def test_completed_task_never_reads_as_overdue() -> None:
    task = _task(status=TaskStatus.COMPLETED, due=date(2026, 1, 1))
    assert effective_status(task, at=NOW) == TaskStatus.COMPLETED


def test_pending_to_completed_is_rejected() -> None:
    with pytest.raises(ValueError, match="pending -> completed"):
        validate_status_transition(task=_task(), next_status="completed", at=NOW)


def test_completed_to_pending_is_rejected() -> None:
    task = _task(status=TaskStatus.COMPLETED)
    with pytest.raises(ValueError, match="completed -> pending"):
        validate_status_transition(task=task, next_status=TaskStatus.PENDING, at=NOW)


def test_overdue_before_due_date_is_rejected() -> None:
    with pytest.raises(ValueError, match="before its due date 2026-02-20"):
        validate_status_transition(task=_task(), next_status="overdue", at=NOW)


def test_same_status_is_accepted_as_no_op() -> None:
    task = _task(status=TaskStatus.IN_PROGRESS)
    assert validate_status_transition(task=task, next_status="in_progress", at=NOW) == TaskStatus.IN_PROGRESS
