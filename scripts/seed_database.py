"""Seed roles, permissions, countries, the local administrator and sample users."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import suppress

from admin_panel.db import database, seeders


logger = logging.getLogger("admin_panel.scripts.seed_database")


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the admin panel database")
    parser.add_argument(
        "--no-samples",
        action="store_true",
        help="Only seed roles, permissions, countries and the administrator",
    )
    return parser.parse_args(argv)


def seed(with_samples: bool) -> int:
    session = SessionLocal()
    try:
        summary = seeders.run(session, with_samples=with_samples)
        print(
            f"Seeded {summary.permissions} permissions, {summary.roles} roles, "
            f"{summary.countries} countries and {summary.sample_users} sample users "
            f"(administrator {'created' if summary.admin_created else 'updated'})."
        )
        return 0
    finally:
        with suppress(Exception):
            session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return seed(with_samples=not args.no_samples)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
