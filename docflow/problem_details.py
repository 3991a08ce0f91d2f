"""RFC 7807 Problem Details helpers."""
from __future__ import annotations

from http import HTTPStatus

from .domain_errors import DomainError


def build_problem_details(exc: DomainError) -> dict[str, object]:
    """Render DomainError as an RFC 7807 payload with stable domain code."""
    try:
        title = HTTPStatus(exc.http_status).phrase
    except ValueError:
        title = "Domain Error"

    payload: dict[str, object] = {
        "type": f"urn:docflow:problem:{exc.code.lower()}",
        "title": title,
        "status": exc.http_status,
        "detail": exc.message,
        "code": exc.code,
    }
    if exc.details is not None:
        payload["details"] = exc.details

    return payload
