"""
Database seeders.

Seeds the role/permission catalogue, a handful of countries, the local
administrator and sample users for each role. Catalogue, countries and the
administrator are idempotent; every run adds a fresh batch of sample users.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from sqlalchemy.orm import Session

from admin_panel.db import models
from admin_panel.db.repositories import roles as role_repo
from admin_panel.utils.passwords import hash_password
from admin_panel.utils.role_permissions import (
    ROLE_ADMIN,
    ROLE_AGENT,
    ROLE_OWNER,
    ROLE_REGISTERED,
    ROLES,
    USER_PERMISSIONS,
    get_role_permissions,
)
from admin_panel.utils.runtime import DEV_USER_EMAIL

logger = logging.getLogger(__name__)

ADMIN_USER = {
    "name": "Admin",
    "email": DEV_USER_EMAIL,
    "password": "password",
}

SAMPLE_USER_PASSWORD = "password"

# (count, roles)
SAMPLE_USER_BATCHES: Sequence[Tuple[int, Tuple[str, ...]]] = (
    (10, (ROLE_REGISTERED,)),
    (10, (ROLE_OWNER,)),
    (10, (ROLE_AGENT,)),
    (5, (ROLE_OWNER, ROLE_AGENT)),
)

# (iso_code, en_name, es_name, phone_code)
COUNTRIES: Sequence[Tuple[str, str, str, str]] = (
    ("ARG", "Argentina", "Argentina", "+54"),
    ("BRA", "Brazil", "Brasil", "+55"),
    ("DEU", "Germany", "Alemania", "+49"),
    ("ESP", "Spain", "España", "+34"),
    ("MEX", "Mexico", "México", "+52"),
    ("USA", "United States", "Estados Unidos", "+1"),
)


@dataclass
class SeedSummary:
    permissions: int = 0
    roles: int = 0
    countries: int = 0
    admin_created: bool = False
    sample_users: int = 0


def seed_permissions(db: Session) -> Dict[str, models.Role]:
    """Create every permission and role and attach the catalogue permissions."""
    for permission in USER_PERMISSIONS:
        role_repo.get_or_create_permission(db, permission)

    roles = {
        role_name: role_repo.get_or_create_role(db, role_name, get_role_permissions(role_name))
        for role_name in ROLES
    }
    db.commit()
    logger.info("seed_permissions: permissions=%s roles=%s", len(USER_PERMISSIONS), len(roles))
    return roles


def seed_countries(db: Session) -> List[models.Country]:
    countries = []
    for iso_code, en_name, es_name, phone_code in COUNTRIES:
        country = db.query(models.Country).filter(models.Country.iso_code == iso_code).first()
        if country is None:
            country = models.Country(iso_code=iso_code)
            db.add(country)
        country.en_name = en_name
        country.es_name = es_name
        country.phone_code = phone_code
        countries.append(country)
    db.commit()
    return countries


def seed_admin(db: Session, roles: Dict[str, models.Role]) -> Tuple[models.User, bool]:
    """Create or refresh the local administrator; returns (user, created)."""
    user = db.query(models.User).filter(models.User.email == ADMIN_USER["email"]).first()
    created = user is None
    if created:
        user = models.User(email=ADMIN_USER["email"])
        db.add(user)
    user.name = ADMIN_USER["name"]
    user.password = hash_password(ADMIN_USER["password"])
    if roles[ROLE_ADMIN] not in user.roles:
        user.roles.append(roles[ROLE_ADMIN])
    db.commit()
    logger.info("seed_admin: email=%s created=%s", user.email, created)
    return user, created


def seed_sample_users(
    db: Session,
    roles: Dict[str, models.Role],
    countries: Sequence[models.Country] = (),
    batches: Sequence[Tuple[int, Tuple[str, ...]]] = SAMPLE_USER_BATCHES,
) -> List[models.User]:
    # One hash shared by every sample user
    password_hash = hash_password(SAMPLE_USER_PASSWORD)
    batch_id = uuid.uuid4().hex[:8]

    users = []
    for count, role_names in batches:
        label = "-".join(role_names)
        for index in range(1, count + 1):
            user = models.User(
                name=f"{label.replace('-', ' & ').title()} User {index}",
                email=f"{label}.{index}.{batch_id}@example.com",
                password=password_hash,
            )
            if countries:
                user.country = countries[(len(users)) % len(countries)]
            user.roles = [roles[name] for name in role_names]
            db.add(user)
            users.append(user)
    db.commit()
    logger.info("seed_sample_users: created=%s batch=%s", len(users), batch_id)
    return users


def run(db: Session, with_samples: bool = True) -> SeedSummary:
    """Run every seeder in dependency order."""
    summary = SeedSummary()
    roles = seed_permissions(db)
    summary.permissions = len(USER_PERMISSIONS)
    summary.roles = len(roles)

    countries = seed_countries(db)
    summary.countries = len(countries)

    _admin, summary.admin_created = seed_admin(db, roles)

    if with_samples:
        summary.sample_users = len(seed_sample_users(db, roles, countries))
    return summary
