"""
User repository functions.

Implements CRUD for panel users, including role synchronisation. Missing
rows are reported as ``None``/``False``; invalid input raises ``ValueError``
subclasses so routes can translate them to HTTP errors.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from admin_panel.db import models, schemas
from admin_panel.utils.passwords import hash_password

logger = logging.getLogger(__name__)


class DuplicateEmailError(ValueError):
    """The email address is already used by another user."""


class UnknownRoleError(ValueError):
    """One or more role ids do not exist."""


class UnknownCountryError(ValueError):
    """The country id does not exist."""


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return (
        db.query(models.User)
        .options(selectinload(models.User.roles))
        .filter(models.User.id == user_id)
        .first()
    )


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    if not email:
        return None
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def _email_taken(db: Session, email: str, ignore_user_id: Optional[int] = None) -> bool:
    query = db.query(models.User.id).filter(models.User.email == email.strip().lower())
    if ignore_user_id is not None:
        query = query.filter(models.User.id != ignore_user_id)
    return query.first() is not None


def _resolve_roles(db: Session, role_ids: List[int]) -> List[models.Role]:
    wanted = list(dict.fromkeys(role_ids))
    roles = db.query(models.Role).filter(models.Role.id.in_(wanted)).order_by(models.Role.id).all()
    missing = set(wanted) - {role.id for role in roles}
    if missing:
        raise UnknownRoleError(f"Unknown role ids: {sorted(missing)}")
    return roles


def _check_country(db: Session, country_id: Optional[int]) -> None:
    if country_id is None:
        return
    if db.query(models.Country.id).filter(models.Country.id == country_id).first() is None:
        raise UnknownCountryError(f"Unknown country id: {country_id}")


def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    """Create a user with a hashed password and the given roles in one transaction.

    Raises:
        DuplicateEmailError: If the email is already registered.
        UnknownRoleError: If a role id does not exist.
        UnknownCountryError: If the country id does not exist.
    """
    if _email_taken(db, user.email):
        raise DuplicateEmailError(f"The email {user.email} has already been taken.")
    roles = _resolve_roles(db, user.roles)
    _check_country(db, user.country_id)

    db_user = models.User(
        name=user.name,
        email=user.email.lower(),
        password=hash_password(user.password),
        country_id=user.country_id,
    )
    db_user.roles = roles
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error("Error creating user %s: %s", user.email, e)
        raise DuplicateEmailError(f"The email {user.email} has already been taken.") from e
    db.refresh(db_user)
    logger.info("user_created: id=%s email=%s roles=%s", db_user.id, db_user.email, db_user.role_names)
    return db_user


def update_user(db: Session, user_id: int, user: schemas.UserUpdate) -> Optional[models.User]:
    """Update a user; the password changes only when a new one is given."""
    db_user = get_user(db, user_id)
    if db_user is None:
        return None

    if _email_taken(db, user.email, ignore_user_id=user_id):
        raise DuplicateEmailError(f"The email {user.email} has already been taken.")
    roles = _resolve_roles(db, user.roles)
    _check_country(db, user.country_id)

    db_user.name = user.name
    db_user.email = user.email.lower()
    db_user.country_id = user.country_id
    if user.password:
        db_user.password = hash_password(user.password)
    db_user.roles = roles
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error("Error updating user %s: %s", user_id, e)
        raise DuplicateEmailError(f"The email {user.email} has already been taken.") from e
    db.refresh(db_user)
    logger.info("user_updated: id=%s roles=%s", db_user.id, db_user.role_names)
    return db_user


def delete_user(db: Session, user_id: int) -> bool:
    db_user = db.query(models.User).filter(models.User.id == user_id).first()
    if db_user:
        db.delete(db_user)
        db.commit()
        logger.info("user_deleted: id=%s", user_id)
        return True
    return False
