"""
Authorization policy for user administration.

Each check receives the acting user and, where relevant, the target user.
Permissions come from the acting user's roles.
"""
from admin_panel.db import models
from admin_panel.utils.role_permissions import (
    PERMISSION_CREATE_USER,
    PERMISSION_DELETE_USER,
    PERMISSION_UPDATE_USER,
    PERMISSION_VIEW_ANY_USER,
    PERMISSION_VIEW_USER,
)


def _is_self(user: models.User, target: models.User) -> bool:
    return user is not None and target is not None and user.id == target.id


def can_view_any(user: models.User) -> bool:
    return user.has_permission_to(PERMISSION_VIEW_ANY_USER)


def can_view(user: models.User, target: models.User) -> bool:
    return _is_self(user, target) or user.has_permission_to(PERMISSION_VIEW_USER)


def can_create(user: models.User) -> bool:
    return user.has_permission_to(PERMISSION_CREATE_USER)


def can_update(user: models.User, target: models.User) -> bool:
    return _is_self(user, target) or user.has_permission_to(PERMISSION_UPDATE_USER)


def can_delete(user: models.User, target: models.User) -> bool:
    # Nobody deletes their own account from the panel
    if _is_self(user, target):
        return False
    return user.has_permission_to(PERMISSION_DELETE_USER)


def can_restore(user: models.User, target: models.User) -> bool:
    return user.has_permission_to(PERMISSION_DELETE_USER)


def can_force_delete(user: models.User, target: models.User) -> bool:
    return user.has_permission_to(PERMISSION_DELETE_USER)
