"""In-memory workflow records.

Records are frozen: engines swap a whole record on mutation, so a reader
holding a record (or a tuple snapshot of them) never observes a half-applied
change. Immutable fields (ids, creation timestamps) are never passed to
``dataclasses.replace`` by the engines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    ENGINEER = "engineer"
    HR = "hr"
    FINANCE = "finance"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    ERROR = "error"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class NotificationType(str, Enum):
    DOCUMENT = "document"
    TASK = "task"
    SYSTEM = "system"
    DEADLINE = "deadline"
    APPROVAL = "approval"


class NotificationView(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    URGENT = "urgent"


class DateRange(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


@dataclass(frozen=True)
class Document:
    id: int
    title: str
    summary: str
    department: str
    language: str
    status: DocumentStatus
    priority: Priority
    deadline: Optional[date]
    upload_date: date
    keywords: frozenset[str] = field(default_factory=frozenset)
    assigned_to: str = ""
    file_type: str = ""
    snippet: str = ""
    score: Optional[float] = None  # static metadata supplied by the indexer


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    description: str
    assigned_to: str
    assigned_by: str
    department: str
    priority: Priority
    status: TaskStatus
    due_date: date
    created_date: datetime
    document_id: Optional[int] = None  # weak reference, lookup only
    document_title: Optional[str] = None
    comments: int = 0


@dataclass(frozen=True)
class Notification:
    id: int
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    priority: Priority
    read: bool = False
    action_required: bool = False
    department: Optional[str] = None
    related_id: Optional[int] = None  # weak reference, lookup only


@dataclass(frozen=True)
class AuditEvent:
    """One entry of the in-process activity feed."""

    id: int
    action: str
    entity_type: str
    entity_id: int
    entity_name: str
    role: Optional[Role]
    department: Optional[str]
    at: datetime
    details: dict = field(default_factory=dict)
