"""Seed a console with demo data."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Optional

from .models import (
    Document,
    DocumentStatus,
    Notification,
    NotificationType,
    Priority,
    Task,
    TaskStatus,
)
from .services.task_rules import now_utc

if TYPE_CHECKING:
    from .console import DocumentConsole

logger = logging.getLogger(__name__)


def demo_documents(today: date) -> list[Document]:
    return [
        Document(
            id=1,
            title="Metro Safety Protocol Update - Emergency Response Procedures",
            summary=(
                "Comprehensive update to platform safety protocols including new emergency evacuation "
                "procedures, crowd management strategies, and coordination with emergency services."
            ),
            department="Engineering",
            language="Malayalam + English",
            status=DocumentStatus.PROCESSED,
            priority=Priority.HIGH,
            deadline=today + timedelta(days=5),
            upload_date=today - timedelta(days=3),
            keywords=frozenset({"safety", "emergency", "evacuation", "protocol"}),
            assigned_to="Safety Team",
            file_type="pdf",
            snippet="In case of emergency evacuation, all platform staff must follow the updated protocol...",
            score=0.95,
        ),
        Document(
            id=2,
            title="Annual Track Maintenance Contract - Vendor Selection",
            summary=(
                "Detailed analysis of vendor proposals for annual track maintenance including cost "
                "comparison, technical specifications, and compliance requirements."
            ),
            department="Engineering",
            language="English",
            status=DocumentStatus.PENDING,
            priority=Priority.MEDIUM,
            deadline=today + timedelta(days=10),
            upload_date=today - timedelta(days=20),
            keywords=frozenset({"maintenance", "contract", "vendor", "track"}),
            assigned_to="Procurement Team",
            file_type="docx",
            snippet="The selected vendor must demonstrate at least 5 years of experience in metro rail track maintenance...",
            score=0.87,
        ),
        Document(
            id=3,
            title="Employee Leave Policy Amendment - Maternity Benefits",
            summary=(
                "Revised employee leave policies including enhanced maternity and paternity benefits, "
                "flexible working arrangements, and updated approval processes."
            ),
            department="HR",
            language="English",
            status=DocumentStatus.PROCESSED,
            priority=Priority.LOW,
            deadline=today + timedelta(days=15),
            upload_date=today - timedelta(days=60),
            keywords=frozenset({"policy", "leave", "maternity", "benefits"}),
            assigned_to="HR Department",
            file_type="pdf",
            snippet="The new maternity leave policy extends the benefit period to 26 weeks...",
            score=0.82,
        ),
        Document(
            id=4,
            title="Quarterly Budget Reconciliation",
            summary="Reconciliation of operating expenses against the approved quarterly budget.",
            department="Finance",
            language="English",
            status=DocumentStatus.PENDING,
            priority=Priority.HIGH,
            deadline=today + timedelta(days=7),
            upload_date=today,
            keywords=frozenset({"budget", "reconciliation", "expenses"}),
            assigned_to="Finance Analyst",
            file_type="xlsx",
            score=0.78,
        ),
    ]


def demo_tasks(now: datetime) -> list[Task]:
    today = now.date()
    return [
        Task(
            id=1,
            title="Review Safety Protocol Implementation",
            description=(
                "Review and approve the new safety protocols for platform operations. "
                "Ensure compliance with latest safety standards."
            ),
            assigned_to="Safety Team Lead",
            assigned_by="Station Manager",
            department="Engineering",
            priority=Priority.HIGH,
            status=TaskStatus.PENDING,
            due_date=today + timedelta(days=5),
            created_date=now - timedelta(days=5),
            document_id=1,
            document_title="Metro Safety Protocol Update - Emergency Response Procedures",
            comments=3,
        ),
        Task(
            id=2,
            title="Vendor Contract Analysis",
            description="Analyze vendor proposals and prepare recommendation report for track maintenance contract.",
            assigned_to="Procurement Officer",
            assigned_by="Engineering Head",
            department="Engineering",
            priority=Priority.MEDIUM,
            status=TaskStatus.IN_PROGRESS,
            due_date=today + timedelta(days=10),
            created_date=now - timedelta(days=7),
            document_id=2,
            document_title="Annual Track Maintenance Contract - Vendor Selection",
            comments=1,
        ),
        Task(
            id=3,
            title="HR Policy Communication",
            description="Communicate new leave policy changes to all departments and update employee handbook.",
            assigned_to="HR Coordinator",
            assigned_by="HR Manager",
            department="HR",
            priority=Priority.LOW,
            status=TaskStatus.COMPLETED,
            due_date=today + timedelta(days=15),
            created_date=now - timedelta(days=10),
            document_id=3,
            document_title="Employee Leave Policy Amendment - Maternity Benefits",
            comments=5,
        ),
    ]


def demo_notifications(now: datetime) -> list[Notification]:
    return [
        Notification(
            id=1,
            type=NotificationType.DEADLINE,
            title="Urgent: Safety Protocol Review Due",
            message="Safety protocol document review is due in 2 days. Immediate action required for compliance.",
            timestamp=now - timedelta(minutes=30),
            priority=Priority.URGENT,
            read=False,
            action_required=True,
            department="Engineering",
            related_id=1,
        ),
        Notification(
            id=2,
            type=NotificationType.DOCUMENT,
            title="New Document Processed",
            message="Malayalam safety manual has been successfully processed and is ready for review.",
            timestamp=now - timedelta(hours=2),
            priority=Priority.MEDIUM,
            read=False,
            department="Engineering",
            related_id=2,
        ),
        Notification(
            id=3,
            type=NotificationType.TASK,
            title="Task Assignment",
            message="You have been assigned a new task: 'Vendor Contract Analysis' by Engineering Head.",
            timestamp=now - timedelta(hours=4),
            priority=Priority.MEDIUM,
            read=True,
            action_required=True,
            department="Engineering",
            related_id=2,
        ),
        Notification(
            id=4,
            type=NotificationType.APPROVAL,
            title="Document Approval Required",
            message="HR Policy Amendment requires your approval before implementation.",
            timestamp=now - timedelta(days=1),
            priority=Priority.HIGH,
            read=True,
            action_required=True,
            department="HR",
            related_id=3,
        ),
        Notification(
            id=5,
            type=NotificationType.SYSTEM,
            title="System Update Complete",
            message="Document intelligence system has been updated with improved Malayalam translation capabilities.",
            timestamp=now - timedelta(days=2),
            priority=Priority.LOW,
            read=True,
        ),
    ]


def seed(console: DocumentConsole, *, now: Optional[datetime] = None) -> None:
    """Seed console engines with demo data."""
    at = now or now_utc()
    console.documents.load(demo_documents(at.date()))
    console.tasks.load(demo_tasks(at))
    console.notifications.load(demo_notifications(at))
    logger.info("Console seeded with demo documents, tasks and notifications")


if __name__ == "__main__":
    from .main import create_console

    demo = create_console()
    demo.set_role("admin")
    logger.info("Demo dashboard: %s", demo.dashboard().model_dump_json())
