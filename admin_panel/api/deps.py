"""
API dependency helpers.

Resolves the current panel user from proxy headers (or DEV_MODE) and
guards the administration routes by role.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from admin_panel.api.auth import get_user_by_identity, resolve_identity_from_headers
from admin_panel.db import models
from admin_panel.db.database import get_db
from admin_panel.utils.role_permissions import role_allows_panel
from admin_panel.utils.runtime import DEV_USER_EMAIL, dev_mode_active

logger = logging.getLogger(__name__)

# Contract:
# Returns the SQLAlchemy User model of the caller.
# Raises 401 if identity cannot be resolved to an existing user.

def get_current_user(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> models.User:
    if dev_mode_active():
        email = DEV_USER_EMAIL
    else:
        _name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = get_user_by_identity(db, email)
    if user is None:
        logger.warning("auth_unknown_identity: email=%s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    """Only users holding a panel role may reach the administration routes."""
    if not any(role_allows_panel(role) for role in user.role_names):
        logger.info("admin_access_denied: user_id=%s roles=%s", user.id, user.role_names)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
