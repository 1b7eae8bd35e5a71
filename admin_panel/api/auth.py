"""
Authentication helpers and identity resolution.

Parses oauth2-proxy headers and normalizes emails. Panel users are never
created implicitly; an identity must match an existing user.
"""
from typing import Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from admin_panel.db import models


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower() or None


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def get_user_by_identity(db: Session, email: str) -> Optional[models.User]:
    """Load the user for an authenticated email with roles and permissions."""
    return (
        db.query(models.User)
        .options(selectinload(models.User.roles).selectinload(models.Role.permissions))
        .filter(models.User.email == _normalize_email(email))
        .first()
    )
