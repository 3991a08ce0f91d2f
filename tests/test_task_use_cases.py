from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from docflow.domain_errors import DomainError, InvalidTransitionError, NotFoundError, ValidationError
from docflow.models import Priority, Role, Task, TaskStatus
from docflow.services.audit_log import AuditLog
from docflow.use_cases.task_transitions import TaskLifecycleEngine


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _engine(now: datetime | None = None) -> tuple[TaskLifecycleEngine, AuditLog, _Clock]:
    clock = _Clock(now or datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc))
    audit = AuditLog(clock=clock)
    return TaskLifecycleEngine(audit=audit, clock=clock, default_assigner="Current User"), audit, clock


def _payload(**overrides) -> dict:
    payload = {
        "title": "Review safety protocol",
        "description": "Check the evacuation section",
        "assigned_to": "Safety Team Lead",
        "department": "Engineering",
        "priority": "high",
        "due_date": "2026-02-20",
    }
    payload.update(overrides)
    return payload


def _stored_task(task_id: int, *, department: str = "Engineering", status: TaskStatus = TaskStatus.PENDING) -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        description="",
        assigned_to="Someone",
        assigned_by="Manager",
        department=department,
        priority=Priority.MEDIUM,
        status=status,
        due_date=date(2026, 3, 1),
        created_date=datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc),
    )


def test_create_task_starts_pending_with_defaults_and_audits() -> None:
    engine, audit, clock = _engine()

    task = engine.create_task(_payload(), role=Role.ENGINEER)

    assert task.id == 1
    assert task.status == TaskStatus.PENDING
    assert task.assigned_by == "Current User"
    assert task.priority == Priority.HIGH
    assert task.created_date == clock.now
    assert task.comments == 0
    events = audit.events()
    assert len(events) == 1
    assert events[0].action == "task_created"
    assert events[0].role == Role.ENGINEER


def test_create_task_defaults_due_date_to_creation_day() -> None:
    engine, _, clock = _engine()
    payload = _payload()
    del payload["due_date"]

    task = engine.create_task(payload)

    assert task.due_date == clock.now.date()


def test_create_task_rejects_blank_required_fields_with_stable_code() -> None:
    engine, audit, _ = _engine()

    with pytest.raises(ValidationError, match="Please fill in all required fields") as exc:
        engine.create_task(_payload(title="   ", assigned_to=""))

    assert exc.value.http_status == 422
    assert exc.value.code == "TASK_VALIDATION_FAILED"
    assert exc.value.details == {"fields": ["title", "assigned_to"]}
    assert engine.snapshot() == ()
    assert audit.events() == ()


def test_create_task_reports_missing_keys_from_payload_validation() -> None:
    engine, _, _ = _engine()
    payload = _payload()
    del payload["assigned_to"]

    with pytest.raises(ValidationError) as exc:
        engine.create_task(payload)

    assert exc.value.code == "TASK_VALIDATION_FAILED"
    assert "assigned_to" in exc.value.details["fields"]


def test_start_then_complete_moves_forward_and_audits_each_step() -> None:
    engine, audit, _ = _engine()
    task = engine.create_task(_payload())

    started = engine.start_task(task.id)
    completed = engine.complete_task(task.id)

    assert started.status == TaskStatus.IN_PROGRESS
    assert completed.status == TaskStatus.COMPLETED
    changes = [event for event in audit.events() if event.action == "task_status_changed"]
    assert [event.details for event in changes] == [
        {"oldStatus": "pending", "newStatus": "in-progress"},
        {"oldStatus": "in-progress", "newStatus": "completed"},
    ]


def test_start_completed_task_is_rejected() -> None:
    engine, _, _ = _engine()
    task = engine.create_task(_payload())
    engine.start_task(task.id)
    engine.complete_task(task.id)

    with pytest.raises(DomainError, match="Task is completed and cannot change status") as exc:
        engine.start_task(task.id)

    assert isinstance(exc.value, InvalidTransitionError)
    assert exc.value.http_status == 409
    assert exc.value.code == "TASK_INVALID_TRANSITION"
    assert engine.get_task(task.id).status == TaskStatus.COMPLETED


def test_complete_pending_task_is_rejected() -> None:
    engine, _, _ = _engine()
    task = engine.create_task(_payload())

    with pytest.raises(InvalidTransitionError, match="pending -> completed") as exc:
        engine.complete_task(task.id)

    assert exc.value.details == {"task_id": task.id, "from": "pending", "to": "completed"}


def test_start_is_idempotent_for_in_progress_task() -> None:
    engine, audit, _ = _engine()
    task = engine.create_task(_payload())
    engine.start_task(task.id)
    events_before = len(audit.events())

    again = engine.start_task(task.id)

    assert again.status == TaskStatus.IN_PROGRESS
    assert len(audit.events()) == events_before


def test_update_status_rejects_backwards_move() -> None:
    engine, _, _ = _engine()
    task = engine.create_task(_payload())
    engine.update_status(task.id, "in-progress")

    with pytest.raises(InvalidTransitionError):
        engine.update_status(task.id, "pending")


def test_update_status_rejects_unknown_status_as_bad_input() -> None:
    engine, audit, _ = _engine()
    task = engine.create_task(_payload())

    with pytest.raises(ValidationError, match="Unknown task status") as exc:
        engine.update_status(task.id, "bogus")

    assert exc.value.http_status == 422
    assert exc.value.code == "TASK_VALIDATION_FAILED"
    assert exc.value.details == {"fields": ["status"], "status": "bogus"}
    assert engine.get_task(task.id).status == TaskStatus.PENDING
    assert [event.action for event in audit.events()] == ["task_created"]


def test_unknown_task_id_is_not_found() -> None:
    engine, _, _ = _engine()

    with pytest.raises(NotFoundError, match="Task not found") as exc:
        engine.start_task(99)

    assert exc.value.http_status == 404
    assert exc.value.code == "TASK_NOT_FOUND"


def test_task_outside_role_scope_is_not_found() -> None:
    engine, _, _ = _engine()
    task = engine.create_task(_payload(department="Engineering"))

    with pytest.raises(NotFoundError):
        engine.start_task(task.id, role=Role.HR)

    assert engine.get_task(task.id).status == TaskStatus.PENDING


def test_open_task_past_due_reads_as_overdue_and_is_terminal() -> None:
    engine, _, clock = _engine()
    task = engine.create_task(_payload(due_date="2026-02-17"))

    clock.now = clock.now + timedelta(days=2)

    assert engine.get_task(task.id).status == TaskStatus.OVERDUE
    assert [item.id for item in engine.list_tasks(Role.ADMIN, status="overdue")] == [task.id]
    with pytest.raises(InvalidTransitionError, match="Task is overdue"):
        engine.start_task(task.id)


def test_explicit_overdue_before_deadline_is_rejected() -> None:
    engine, _, _ = _engine()
    task = engine.create_task(_payload(due_date="2026-02-20"))

    with pytest.raises(InvalidTransitionError, match="before its due date"):
        engine.update_status(task.id, TaskStatus.OVERDUE)


def test_load_keeps_ids_and_continues_numbering() -> None:
    engine, _, _ = _engine()
    engine.load([_stored_task(3), _stored_task(7)])

    created = engine.create_task(_payload())

    assert created.id == 8
    assert [task.id for task in engine.snapshot()] == [3, 7, 8]


def test_load_rejects_duplicate_ids() -> None:
    engine, _, _ = _engine()
    engine.load([_stored_task(1)])

    with pytest.raises(ValidationError) as exc:
        engine.load([_stored_task(2), _stored_task(1)])

    assert exc.value.code == "TASK_DUPLICATE_ID"
    assert [task.id for task in engine.snapshot()] == [1]


def test_list_tasks_combines_department_status_and_visibility() -> None:
    engine, _, _ = _engine()
    engine.load(
        [
            _stored_task(1, department="Engineering"),
            _stored_task(2, department="HR"),
            _stored_task(3, department="HR", status=TaskStatus.COMPLETED),
            _stored_task(4, department="Finance"),
        ]
    )

    assert [task.id for task in engine.list_tasks(Role.HR)] == [2, 3]
    assert [task.id for task in engine.list_tasks(Role.HR, status="completed")] == [3]
    assert [task.id for task in engine.list_tasks(Role.ADMIN, department="hr")] == [2, 3]
    assert engine.list_tasks(Role.FINANCE, department="HR") == []


def test_list_tasks_rejects_unknown_status_filter() -> None:
    engine, _, _ = _engine()

    with pytest.raises(ValidationError) as exc:
        engine.list_tasks(Role.ADMIN, status="archived")

    assert exc.value.code == "INVALID_FILTER"
