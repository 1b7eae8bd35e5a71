import datetime as dt
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import admin_panel.db.database as db_module
from admin_panel.api.main import app
from admin_panel.db import models, seeders
from admin_panel.utils.settings import refresh_settings

# Factories store a placeholder hash; argon2 is exercised in its own tests
TEST_PASSWORD_HASH = "$argon2id$v=19$m=102400,t=2,p=8$placeholder$placeholder"

_engine = db_module.engine
_SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False)

models.Base.metadata.create_all(bind=_engine)

_GLOBAL_SESSION = None


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for var in ("APP_LOCALE", "APP_SUPPORTED_LOCALES", "DATATABLE_PER_PAGE", "DATATABLE_MAX_PER_PAGE", "DEV_MODE"):
        monkeypatch.delenv(var, raising=False)
    refresh_settings()
    yield
    refresh_settings()


# Per-test transactional session (fast cleanup without truncation)
@pytest.fixture(autouse=True)
def db_session():
    connection = _engine.connect()
    trans = connection.begin()
    session = _SessionLocal(bind=connection)
    global _GLOBAL_SESSION
    _GLOBAL_SESSION = session
    try:
        yield session
    finally:
        _GLOBAL_SESSION = None
        try:
            trans.rollback()
        finally:
            session.close()
            connection.close()


# FastAPI dependency override so app endpoints use our transactional session
def _override_get_db():
    if _GLOBAL_SESSION is not None:
        yield _GLOBAL_SESSION
        return
    session = _SessionLocal()
    try:
        yield session
    finally:
        session.close()


app.dependency_overrides[db_module.get_db] = _override_get_db


@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def roles(db_session):
    """Seeded role catalogue keyed by name."""
    return seeders.seed_permissions(db_session)


@pytest.fixture
def country_factory(db_session):
    def _create(en_name: str, es_name: str = None, iso_code: str = None, phone_code: str = None):
        country = models.Country(
            en_name=en_name,
            es_name=es_name or en_name,
            iso_code=iso_code,
            phone_code=phone_code,
        )
        db_session.add(country)
        db_session.commit()
        db_session.refresh(country)
        return country
    return _create


@pytest.fixture
def user_factory(db_session, roles):
    def _create(
        name: str,
        email: str = None,
        role_names=(),
        country=None,
        created_at: dt.datetime = None,
    ):
        user = models.User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}-{uuid.uuid4().hex[:6]}@example.com",
            password=TEST_PASSWORD_HASH,
            country=country,
        )
        if created_at is not None:
            user.created_at = created_at
        user.roles = [roles[role_name] for role_name in role_names]
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def session_factory(db_session):
    def _create(user, ip_address: str, user_agent: str = "pytest"):
        user_session = models.UserSession(user_id=user.id, ip_address=ip_address, user_agent=user_agent)
        db_session.add(user_session)
        db_session.commit()
        return user_session
    return _create


@pytest.fixture
def admin_user(user_factory):
    return user_factory("Admin", email="admin@example.com", role_names=("admin",))


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers(admin_user):
    return {"X-Auth-Request-Email": admin_user.email}
