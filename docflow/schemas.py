"""Pydantic schemas for creation payloads and read projections."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from .models import DateRange, NotificationType, Priority, Role


# Creation payloads (external producers)
class TaskCreate(BaseModel):
    title: str
    description: str = ""
    assigned_to: str
    assigned_by: Optional[str] = None
    department: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None  # defaults to the creation date
    document_id: Optional[int] = None
    document_title: Optional[str] = None


class DocumentCreate(BaseModel):
    """Upload pipeline payload."""
    title: str = Field(min_length=1)
    summary: str = ""
    department: str
    language: str = "English"
    priority: Priority = Priority.MEDIUM
    deadline: Optional[date] = None
    keywords: list[str] = Field(default_factory=list)
    assigned_to: str = ""
    file_type: str = ""
    snippet: str = ""
    score: Optional[float] = Field(default=None, ge=0, le=1)
    upload_date: Optional[date] = None


class NotificationCreate(BaseModel):
    """Event source payload."""
    type: NotificationType
    title: str = Field(min_length=1)
    message: str = ""
    priority: Priority = Priority.MEDIUM
    action_required: bool = False
    department: Optional[str] = None
    related_id: Optional[int] = None
    timestamp: Optional[datetime] = None


# Query filters
class SearchFilters(BaseModel):
    department: str = "all"
    date_range: DateRange = DateRange.ALL
    status: str = "all"

    model_config = ConfigDict(frozen=True)


# Read projections
class TaskStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    overdue: int


class NotificationStats(BaseModel):
    total: int
    unread: int
    urgent: int
    action_required: int


class DocumentStats(BaseModel):
    total: int
    pending_review: int
    processed: int
    errors: int
    departments: int
    processing_rate: int


class DocumentBrief(BaseModel):
    """Brief document info for nested responses."""
    id: int
    title: str
    status: str
    model_config = ConfigDict(from_attributes=True)


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    assigned_to: str
    assigned_by: str
    department: str
    priority: Priority
    status: str  # effective status, overdue already derived
    due_date: date
    created_date: datetime
    document_id: Optional[int] = None
    document_title: Optional[str] = None
    document: Optional[DocumentBrief] = None  # None when the link no longer resolves
    comments: int = 0


class ActivityEntry(BaseModel):
    action: str
    entity_type: str
    entity_id: int
    entity_name: str
    role: Optional[Role] = None
    department: Optional[str] = None
    at: datetime
    model_config = ConfigDict(from_attributes=True)


class DashboardResponse(BaseModel):
    role: Role
    role_label: str
    documents: DocumentStats
    tasks: TaskStats
    notifications: NotificationStats
