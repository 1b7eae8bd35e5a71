"""
Role and permission catalogue for the admin panel.

Defines which permissions each role grants by default. The seeders persist
this catalogue and the user policy checks permissions by name.
"""

from typing import Dict, FrozenSet, List


ROLE_ADMIN = "admin"
ROLE_REGISTERED = "registered"
ROLE_OWNER = "owner"
ROLE_AGENT = "agent"

PERMISSION_VIEW_ANY_USER = "view any user"
PERMISSION_VIEW_USER = "view user"
PERMISSION_CREATE_USER = "create user"
PERMISSION_UPDATE_USER = "update user"
PERMISSION_DELETE_USER = "delete user"

ROLES: List[str] = [ROLE_ADMIN, ROLE_REGISTERED, ROLE_OWNER, ROLE_AGENT]

USER_PERMISSIONS: List[str] = [
    PERMISSION_VIEW_ANY_USER,
    PERMISSION_VIEW_USER,
    PERMISSION_CREATE_USER,
    PERMISSION_UPDATE_USER,
    PERMISSION_DELETE_USER,
]

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    ROLE_ADMIN: list(USER_PERMISSIONS),
    ROLE_REGISTERED: [PERMISSION_VIEW_USER, PERMISSION_UPDATE_USER],
    ROLE_OWNER: [PERMISSION_VIEW_ANY_USER, PERMISSION_VIEW_USER, PERMISSION_UPDATE_USER],
    ROLE_AGENT: [PERMISSION_VIEW_ANY_USER, PERMISSION_VIEW_USER, PERMISSION_UPDATE_USER],
}

# Roles allowed into the administration area at all
PANEL_ROLES: FrozenSet[str] = frozenset({ROLE_ADMIN})


def get_role_permissions(role: str) -> List[str]:
    """
    Get the default permissions for a given role.

    Raises:
        ValueError: If role is not recognized
    """
    if role not in ROLE_PERMISSIONS:
        raise ValueError(f"Unknown role: {role}. Allowed roles: {ROLES}")

    return list(ROLE_PERMISSIONS[role])


def role_allows_panel(role: str) -> bool:
    """Return True if the role may access the administration area."""
    return role in PANEL_ROLES
