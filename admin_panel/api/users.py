"""
User administration API endpoints.

Listing goes through the users data table; create, update and delete
enforce the user policy on top of the admin role guard.
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from admin_panel.api import permissions
from admin_panel.api.deps import require_admin
from admin_panel.api.tables import render_table
from admin_panel.datatable.registry import USERS_TABLE
from admin_panel.db import models, schemas
from admin_panel.db.database import get_db
from admin_panel.db.repositories import roles as role_repo
from admin_panel.db.repositories import users as user_repo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _get_user_or_404(db: Session, user_id: int) -> models.User:
    user = user_repo.get_user(db, user_id)
    if not user:
        logger.error("user_not_found: id=%s", user_id)
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users", response_model=schemas.TablePage)
def list_users(
    search: Optional[str] = Query(default=None, max_length=255),
    sort_by: Optional[str] = Query(default=None),
    sort_direction: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    if not permissions.can_view_any(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")
    return render_table(
        db,
        USERS_TABLE,
        search=search,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
    )


@router.post("/users", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    if not permissions.can_create(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")
    try:
        return user_repo.create_user(db, payload)
    except user_repo.DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (user_repo.UnknownRoleError, user_repo.UnknownCountryError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/users/{user_id}", response_model=schemas.User)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = _get_user_or_404(db, user_id)
    if not permissions.can_view(current_user, user):
        raise HTTPException(status_code=403, detail="Forbidden")
    return user


@router.put("/users/{user_id}", response_model=schemas.User)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = _get_user_or_404(db, user_id)
    if not permissions.can_update(current_user, user):
        raise HTTPException(status_code=403, detail="Forbidden")
    try:
        return user_repo.update_user(db, user_id, payload)
    except user_repo.DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (user_repo.UnknownRoleError, user_repo.UnknownCountryError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_admin),
):
    user = _get_user_or_404(db, user_id)
    if not permissions.can_delete(current_user, user):
        raise HTTPException(status_code=403, detail="Forbidden")
    user_repo.delete_user(db, user_id)
    return None


@router.get("/roles", response_model=Dict[str, int])
def list_roles(
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    return role_repo.get_roles_map(db)
