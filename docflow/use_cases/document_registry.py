"""Document intake from the upload pipeline and processing-completion updates."""
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
from ..models import Document, DocumentStatus, Role
from ..schemas import DocumentCreate
from ..security import filter_visible, is_visible
from ..services.audit_log import AuditLog
from ..services.task_rules import now_utc

logger = logging.getLogger(__name__)


def _document_transition_allowed(current: DocumentStatus, nxt: DocumentStatus) -> bool:
    match current:
        case DocumentStatus.PENDING:
            return nxt in (DocumentStatus.PROCESSED, DocumentStatus.ERROR)
        case DocumentStatus.PROCESSED | DocumentStatus.ERROR:
            return False


class DocumentRegistry:
    """Owns document records. Documents are never deleted here."""

    def __init__(
        self,
        *,
        audit: Optional[AuditLog] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._lock = threading.RLock()
        self._documents: dict[int, Document] = {}
        self._last_id = 0
        self._audit = audit
        self._clock = clock

    def _get_document_or_404(self, document_id: int, role: Optional[Role]) -> Document:
        document = self._documents.get(document_id)
        if document is None or (role is not None and not is_visible(role, document.department)):
            raise NotFoundError(
                code="DOCUMENT_NOT_FOUND",
                message="Document not found",
                details={"document_id": document_id},
            )
        return document

    def load(self, documents: Iterable[Document]) -> None:
        incoming = list(documents)
        with self._lock:
            seen = set(self._documents)
            for document in incoming:
                if document.id in seen:
                    raise ValidationError(
                        code="DOCUMENT_DUPLICATE_ID",
                        message=f"Document id {document.id} already exists",
                        details={"document_id": document.id},
                    )
                seen.add(document.id)
            for document in incoming:
                self._documents[document.id] = document
                self._last_id = max(self._last_id, document.id)
        logger.info("Loaded %s documents", len(incoming))

    def register(self, payload: DocumentCreate | Mapping[str, Any], *, role: Optional[Role] = None) -> Document:
        """Register an uploaded document; it waits in ``pending`` until processed."""
        if isinstance(payload, DocumentCreate):
            data = payload
        else:
            try:
                data = DocumentCreate.model_validate(dict(payload))
            except PydanticValidationError as error:
                raise validation_error_from_pydantic(
                    error,
                    code="DOCUMENT_VALIDATION_FAILED",
                    message="Invalid document metadata",
                ) from error
        blank = [name for name in ("title", "department") if not getattr(data, name).strip()]
        if blank:
            raise ValidationError(
                code="DOCUMENT_VALIDATION_FAILED",
                message="Invalid document metadata",
                details={"fields": blank},
            )

        with self._lock:
            self._last_id += 1
            document = Document(
                id=self._last_id,
                title=data.title.strip(),
                summary=data.summary,
                department=data.department.strip(),
                language=data.language,
                status=DocumentStatus.PENDING,
                priority=data.priority,
                deadline=data.deadline,
                upload_date=data.upload_date or self._clock().date(),
                keywords=frozenset(keyword.strip() for keyword in data.keywords if keyword.strip()),
                assigned_to=data.assigned_to,
                file_type=data.file_type,
                snippet=data.snippet,
                score=data.score,
            )
            self._documents[document.id] = document
            if self._audit is not None:
                self._audit.record(
                    action="document_uploaded",
                    entity_type="document",
                    entity_id=document.id,
                    entity_name=document.title,
                    role=role,
                    department=document.department,
                )

        logger.info("Document %s registered for %s", document.id, document.department)
        return document

    def complete_processing(self, document_id: int, *, succeeded: bool = True) -> Document:
        """Apply the processing outcome: pending -> processed | error."""
        target = DocumentStatus.PROCESSED if succeeded else DocumentStatus.ERROR
        with self._lock:
            document = self._get_document_or_404(document_id, None)
            if document.status == target:
                return document
            if not _document_transition_allowed(document.status, target):
                logger.warning("Document %s: rejected %s -> %s", document_id, document.status.value, target.value)
                raise InvalidTransitionError(
                    code="DOCUMENT_INVALID_TRANSITION",
                    message=f"Invalid document status transition: {document.status.value} -> {target.value}",
                    details={"document_id": document_id, "from": document.status.value, "to": target.value},
                )
            updated = dataclasses.replace(document, status=target)
            self._documents[document_id] = updated
            if self._audit is not None:
                self._audit.record(
                    action="document_processed" if succeeded else "document_failed",
                    entity_type="document",
                    entity_id=updated.id,
                    entity_name=updated.title,
                    department=updated.department,
                    details={"oldStatus": document.status.value, "newStatus": target.value},
                )

        logger.info("Document %s status %s -> %s", document_id, document.status.value, target.value)
        return updated

    def get_document(self, document_id: int, *, role: Optional[Role] = None) -> Document:
        with self._lock:
            return self._get_document_or_404(document_id, role)

    def snapshot(self) -> tuple[Document, ...]:
        with self._lock:
            return tuple(self._documents.values())

    def list_documents(self, role: Optional[Role]) -> list[Document]:
        """Insertion order; ``role=None`` returns the unscoped collection."""
        documents = self.snapshot()
        if role is None:
            return list(documents)
        return filter_visible(role, documents)
