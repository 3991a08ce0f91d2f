"""Role parsing, role labels and UI permissions.

Credential verification is out of scope: anything that produces a ``Role``
satisfies the login contract.
"""
from __future__ import annotations

from .domain_errors import PermissionDeniedError, ValidationError
from .models import Role


UI_PERMISSION_KEYS: tuple[str, ...] = (
    "canViewDashboard",
    "canViewDocuments",
    "canSearch",
    "canUpload",
    "canViewAnalytics",
    "canManageSettings",
    "canViewAllDepartments",
)


def parse_role(raw: str | Role) -> Role:
    """Parse a role name coming from the presentation layer."""
    if isinstance(raw, Role):
        return raw
    try:
        return Role((raw or "").strip().lower())
    except ValueError:
        raise ValidationError(
            code="UNKNOWN_ROLE",
            message=f"Unknown role: {raw!r}",
            details={"role": raw, "allowed": [role.value for role in Role]},
        ) from None


def role_label(role: Role) -> str:
    match role:
        case Role.ADMIN:
            return "Administrator"
        case Role.ENGINEER:
            return "Engineering"
        case Role.HR:
            return "Human Resources"
        case Role.FINANCE:
            return "Finance"


# Role permissions matrix
ROLE_PERMISSIONS: dict[Role, dict[str, bool]] = {
    Role.ADMIN: {
        "canViewDashboard": True,
        "canViewDocuments": True,
        "canSearch": True,
        "canUpload": True,
        "canViewAnalytics": True,
        "canManageSettings": True,
        "canViewAllDepartments": True,
    },
    Role.ENGINEER: {
        "canViewDashboard": True,
        "canViewDocuments": True,
        "canSearch": True,
        "canUpload": True,
        "canViewAnalytics": False,
        "canManageSettings": False,
        "canViewAllDepartments": True,
    },
    Role.HR: {
        "canViewDashboard": True,
        "canViewDocuments": True,
        "canSearch": True,
        "canUpload": True,
        "canViewAnalytics": False,
        "canManageSettings": False,
        "canViewAllDepartments": False,
    },
    Role.FINANCE: {
        "canViewDashboard": True,
        "canViewDocuments": True,
        "canSearch": True,
        "canUpload": True,
        "canViewAnalytics": False,
        "canManageSettings": False,
        "canViewAllDepartments": False,
    },
}


def get_role_ui_permissions(role: str | Role) -> dict[str, bool]:
    """Return the exact UI permission key set for a role; unknown roles get nothing."""
    try:
        parsed = parse_role(role)
    except ValidationError:
        parsed = None
    permissions = ROLE_PERMISSIONS.get(parsed, {}) if parsed is not None else {}
    return {key: bool(permissions.get(key, False)) for key in UI_PERMISSION_KEYS}


def check_permission(role: str | Role, permission: str) -> bool:
    """Check if role has specific permission; unknown keys are denied."""
    return get_role_ui_permissions(role).get(permission, False)


def require_permission(role: Role, permission: str) -> None:
    if not check_permission(role, permission):
        raise PermissionDeniedError(permission=permission)
