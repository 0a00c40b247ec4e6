"""Seed the database with a dev reading group, its admin and a second user.

Run from the project root:
    uv run python scripts/seed_db.py

The second user has no membership, so it can be used to try the join-request
flow (``POST /api/v1/auth/dev-token`` with ``reader@dev.local``).
"""

import sys
from pathlib import Path

# Ensure the api src is on the path when running standalone
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "apps" / "api" / "src"))

import bcrypt  # noqa: E402

from shelfy.core.config import settings  # noqa: E402
from shelfy.db.base import Base  # noqa: E402
from shelfy.db.models import Group, Membership, User  # noqa: E402
from shelfy.db.session import SessionLocal, engine  # noqa: E402
from shelfy.domain.enums import MembershipRole  # noqa: E402

DEV_GROUP_NAME = "Club de lecture"


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def seed() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        existing = db.query(Group).filter_by(name=DEV_GROUP_NAME).first()
        if existing:
            print(f"Seed already applied — group '{existing.name}' exists. Skipping.")
            return

        group = Group(name=DEV_GROUP_NAME, description="Groupe de développement")
        db.add(group)
        db.flush()

        admin = User(
            email="admin@dev.local",
            name="Dev Admin",
            hashed_password=_hash_password("password123"),
        )
        reader = User(
            email="reader@dev.local",
            name="Dev Reader",
            hashed_password=_hash_password("password123"),
        )
        db.add_all([admin, reader])
        db.flush()

        db.add(Membership(group_id=group.id, user_id=admin.id, role=MembershipRole.admin))

        db.commit()
        print(f"Seeded group='{group.name}' (id={group.id})")
        print(f"Seeded user='{admin.email}' (id={admin.id}) with role=admin")
        print(f"Seeded user='{reader.email}' (id={reader.id}) without membership")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print(f"DATABASE_URL = {settings.DATABASE_URL}")
    seed()
    print("Done.")
