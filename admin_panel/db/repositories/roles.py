"""
Role and permission repository functions.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from admin_panel.db import models


def get_roles_map(db: Session) -> Dict[str, int]:
    """Return ``{role name: role id}`` ordered by id, as used by the user form."""
    return {role.name: role.id for role in db.query(models.Role).order_by(models.Role.id).all()}


def get_role_by_name(db: Session, name: str) -> Optional[models.Role]:
    return db.query(models.Role).filter(models.Role.name == name).first()


def get_or_create_permission(db: Session, name: str) -> models.Permission:
    permission = db.query(models.Permission).filter(models.Permission.name == name).first()
    if permission is None:
        permission = models.Permission(name=name)
        db.add(permission)
        db.flush()
    return permission


def get_or_create_role(db: Session, name: str, permission_names: Iterable[str] = ()) -> models.Role:
    """Ensure the role exists and holds exactly ``permission_names``."""
    role = get_role_by_name(db, name)
    if role is None:
        role = models.Role(name=name)
        db.add(role)
    role.permissions = [get_or_create_permission(db, permission) for permission in permission_names]
    db.flush()
    return role
