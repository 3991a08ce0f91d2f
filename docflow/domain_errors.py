"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError


@dataclass(eq=False)
class DomainError(Exception):
    """Workflow-core error with stable code and HTTP-style status mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Operation referenced an id absent from its collection."""

    def __init__(self, *, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=404, message=message, details=details)


class InvalidTransitionError(DomainError):
    """Status change not permitted from the record's current state."""

    def __init__(self, *, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=409, message=message, details=details)


class ValidationError(DomainError):
    """Required field missing/empty or malformed input."""

    def __init__(self, *, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=422, message=message, details=details)


class NotAuthenticatedError(DomainError):
    def __init__(self, *, code: str = "NO_ACTIVE_SESSION", message: str = "No active session") -> None:
        super().__init__(code=code, http_status=401, message=message)


class PermissionDeniedError(DomainError):
    def __init__(self, *, permission: str) -> None:
        super().__init__(
            code="PERMISSION_DENIED",
            http_status=403,
            message=f"Permission denied: {permission} required",
            details={"permission": permission},
        )


def validation_error_from_pydantic(error: PydanticValidationError, *, code: str, message: str) -> ValidationError:
    """Convert a pydantic payload failure into a domain ValidationError listing field paths."""
    fields = [".".join(str(part) for part in item["loc"]) for item in error.errors()]
    return ValidationError(code=code, message=message, details={"fields": fields})
