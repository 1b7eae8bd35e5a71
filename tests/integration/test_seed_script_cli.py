import runpy
from pathlib import Path

from sqlalchemy.orm import sessionmaker

from admin_panel.db import database, models


SCRIPT_GLOBALS = runpy.run_path(
    str(Path(__file__).resolve().parents[2] / "scripts" / "seed_database.py")
)
MAIN = SCRIPT_GLOBALS["main"]


def test_seed_script_without_samples(db_session, monkeypatch, capsys):
    # Reuse the test transaction so the script's commits are rolled back
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(bind=db_session.get_bind()))

    assert MAIN(["--no-samples"]) == 0
    out = capsys.readouterr().out
    assert "Seeded 5 permissions, 4 roles" in out
    assert "0 sample users" in out
    assert "administrator created" in out
    assert db_session.query(models.User).filter(models.User.email == "admin@localhost").count() == 1
