import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shelfy.core.security import create_access_token, hash_password
from shelfy.db.base import Base
from shelfy.db.models.group import Group
from shelfy.db.models.membership import Membership
from shelfy.db.models.user import User
from shelfy.db.session import get_db
from shelfy.domain.enums import MembershipRole
from shelfy.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    session = TestSession()
    app.dependency_overrides[get_db] = lambda: session
    yield session
    session.close()
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session_factory():
    return TestSession


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def make_user(db):
    def _make(email: str, name: str | None = None, password: str = "password123") -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            hashed_password=hash_password(password),
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def seed_user(db, make_user):
    """A group "BookClub" administered by Alice."""
    group = Group(id=uuid.uuid4(), name="BookClub")
    db.add(group)
    db.flush()

    user = make_user("alice@x.com", "Alice")

    membership = Membership(
        id=uuid.uuid4(), group_id=group.id, user_id=user.id, role=MembershipRole.admin
    )
    db.add(membership)
    db.commit()

    return user, group


@pytest.fixture()
def requester(make_user):
    return make_user("bob@x.com", "Bob")


def token_header(user: User) -> dict:
    token = create_access_token(subject=str(user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_header(seed_user):
    user, _ = seed_user
    return token_header(user)


@pytest.fixture()
def requester_header(requester):
    return token_header(requester)


@pytest.fixture()
def header_for():
    return token_header
