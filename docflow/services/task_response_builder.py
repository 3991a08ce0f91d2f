"""Task response serialization with batched weak-reference resolution."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from ..models import Document, Role, Task
from ..schemas import DocumentBrief, TaskResponse
from ..security import is_visible
from .task_rules import effective_status, now_utc


def build_task_response_context(
    tasks: Sequence[Task],
    documents: Iterable[Document],
    role: Optional[Role] = None,
) -> dict[int, Document]:
    """Index only the documents the page links to (and the role may see)."""
    wanted = {task.document_id for task in tasks if task.document_id is not None}
    if not wanted:
        return {}
    return {
        document.id: document
        for document in documents
        if document.id in wanted and (role is None or is_visible(role, document.department))
    }


def task_to_response(
    task: Task,
    *,
    documents_by_id: dict[int, Document],
    now: Optional[datetime] = None,
) -> TaskResponse:
    document = documents_by_id.get(task.document_id) if task.document_id is not None else None
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        assigned_to=task.assigned_to,
        assigned_by=task.assigned_by,
        department=task.department,
        priority=task.priority,
        status=effective_status(task, at=now or now_utc()).value,
        due_date=task.due_date,
        created_date=task.created_date,
        document_id=task.document_id,
        document_title=document.title if document is not None else task.document_title,
        document=(
            DocumentBrief(id=document.id, title=document.title, status=document.status.value)
            if document is not None
            else None
        ),
        comments=task.comments,
    )


def tasks_to_response(
    tasks: Sequence[Task],
    documents: Iterable[Document],
    *,
    role: Optional[Role] = None,
    now: Optional[datetime] = None,
) -> list[TaskResponse]:
    documents_by_id = build_task_response_context(tasks, documents, role)
    at = now or now_utc()
    return [task_to_response(task, documents_by_id=documents_by_id, now=at) for task in tasks]
