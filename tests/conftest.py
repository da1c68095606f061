import os
import tempfile
from itertools import count

import pytest

# The application module builds its global engine at import time
os.environ.setdefault(
    "DATABASE_URL", "sqlite:///" + os.path.join(tempfile.mkdtemp(), "app.db")
)

from fastapi.testclient import TestClient

from mentor_matching.database import create_db_and_tables, get_db, get_engine, make_session_factory
from mentor_matching.models import User, UserRole
from mentor_matching.schemas import Actor
from mentor_matching.security import create_access_token
from mentor_matching.services import MatchingRequestService

_emails = count(1)


@pytest.fixture
def engine(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'matching.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def service(db):
    return MatchingRequestService(db)


@pytest.fixture
def make_user(db):
    def _make_user(role: UserRole, name: str = None) -> User:
        user = User(email=f"user{next(_emails)}@example.com", name=name, role=role.value)
        db.add(user)
        db.commit()
        return user

    return _make_user


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=UserRole(user.role))


@pytest.fixture
def mentee(make_user):
    return make_user(UserRole.MENTEE, "Mina")


@pytest.fixture
def other_mentee(make_user):
    return make_user(UserRole.MENTEE, "Jun")


@pytest.fixture
def mentor(make_user):
    return make_user(UserRole.MENTOR, "Taylor")


@pytest.fixture
def other_mentor(make_user):
    return make_user(UserRole.MENTOR, "Sam")


@pytest.fixture
def client(session_factory):
    from mentor_matching.main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, UserRole(user.role))
    return {"Authorization": f"Bearer {token}"}
