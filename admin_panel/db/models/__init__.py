"""
Domain-split SQLAlchemy models with a compatibility aggregator.

This package exposes `Base`, `now_utc`, the association tables and all ORM
classes from a single import location.
"""

from .base import Base, now_utc  # re-export

# Domain models
from .users import User, Role, Permission, UserSession, user_roles, role_permissions
from .countries import Country

__all__ = [
    # base
    "Base",
    "now_utc",
    # users/access control
    "User",
    "Role",
    "Permission",
    "UserSession",
    "user_roles",
    "role_permissions",
    # reference data
    "Country",
]
