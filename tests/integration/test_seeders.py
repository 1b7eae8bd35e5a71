from admin_panel.db import models, seeders
from admin_panel.utils.passwords import verify_password


def _role_counts(db_session):
    return {role.name: len(role.users) for role in db_session.query(models.Role).all()}


def test_seed_permissions_catalogue(db_session):
    roles = seeders.seed_permissions(db_session)
    assert set(roles) == {"admin", "registered", "owner", "agent"}
    assert db_session.query(models.Permission).count() == 5
    assert sorted(p.name for p in roles["registered"].permissions) == ["update user", "view user"]
    assert len(roles["admin"].permissions) == 5

    # idempotent
    seeders.seed_permissions(db_session)
    assert db_session.query(models.Role).count() == 4
    assert db_session.query(models.Permission).count() == 5


def test_run_seeds_admin_and_samples(db_session):
    summary = seeders.run(db_session)
    assert summary.admin_created is True
    assert summary.sample_users == 35
    assert summary.countries == len(seeders.COUNTRIES)

    admin = db_session.query(models.User).filter(models.User.email == "admin@localhost").one()
    assert admin.role_names == ["admin"]
    assert admin.has_permission_to("delete user")
    assert verify_password("password", admin.password)

    assert _role_counts(db_session) == {"admin": 1, "registered": 10, "owner": 15, "agent": 15}
    both = [u for u in db_session.query(models.User).all() if set(u.role_names) == {"owner", "agent"}]
    assert len(both) == 5
    assert all(u.country is not None for u in both)


def test_rerun_without_samples_is_idempotent(db_session):
    seeders.run(db_session, with_samples=False)
    summary = seeders.run(db_session, with_samples=False)
    assert summary.admin_created is False
    assert summary.sample_users == 0
    assert db_session.query(models.User).count() == 1
    assert db_session.query(models.Country).count() == len(seeders.COUNTRIES)
    spain = db_session.query(models.Country).filter(models.Country.iso_code == "ESP").one()
    assert spain.es_name == "España"
