"""Session identity: the single active role every read is scoped by."""
from __future__ import annotations

import logging
import threading
from typing import Optional

from .auth import parse_role
from .domain_errors import NotAuthenticatedError
from .models import Role

logger = logging.getLogger(__name__)


class IdentityContext:
    """Holds the active role. Set at login, cleared at logout."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._role: Optional[Role] = None

    def set_role(self, role: str | Role) -> Role:
        parsed = parse_role(role)
        with self._lock:
            self._role = parsed
        logger.info("Session role set to %s", parsed.value)
        return parsed

    def clear(self) -> None:
        with self._lock:
            previous, self._role = self._role, None
        if previous is not None:
            logger.info("Session for role %s closed", previous.value)

    def current_role(self) -> Role:
        with self._lock:
            role = self._role
        if role is None:
            raise NotAuthenticatedError()
        return role

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return self._role is not None
