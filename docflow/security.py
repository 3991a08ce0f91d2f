"""Visibility policy: which records a role may see.

This is the only place the role/department scoping rule lives; every listing,
search and stats read goes through ``filter_visible``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional, Protocol, TypeVar

from .models import Role


class DepartmentScoped(Protocol):
    @property
    def department(self) -> Optional[str]: ...


R = TypeVar("R", bound=DepartmentScoped)


def is_visible(role: Role, department: Optional[str]) -> bool:
    """Role/department visibility predicate."""
    if not department or not department.strip():
        # System-origin records carry no department.
        return True
    match role:
        case Role.ADMIN:
            return True
        case Role.ENGINEER:
            # Observed behaviour: engineers see every department, not only
            # "Engineering". Pending product clarification.
            return True
        case Role.HR | Role.FINANCE:
            return department.strip().lower() == role.value


def can_view(role: Role, record: DepartmentScoped) -> bool:
    return is_visible(role, record.department)


def filter_visible(role: Role, records: Iterable[R]) -> list[R]:
    """Stable filter: keeps the input's relative order."""
    return [record for record in records if is_visible(role, record.department)]
