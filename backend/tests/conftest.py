"""
Faculty Achievement Portal - test configuration and fixtures
"""
import os
from typing import Callable, Generator

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.achievement import Achievement, AchievementStatus
from models.users import User, UserRole
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

fake = Faker()

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Test client whose requests each get their own session on the test database"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    """Factory creating a user with a hashed password"""
    def _make(teacher_id: str, role: str = UserRole.TEACHER.value, password: str = DEFAULT_PASSWORD, **fields) -> User:
        user = User(
            teacher_id=teacher_id,
            name=fields.pop("name", fake.name()),
            phone=fields.pop("phone", fake.numerify("##########")),
            designation=fields.pop("designation", "Assistant Professor"),
            role=role,
            password_hash=get_password_hash(password),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_achievement(db_session) -> Callable[..., Achievement]:
    def _make(teacher_id: str, status: AchievementStatus = AchievementStatus.UNDER_REVIEW, **fields) -> Achievement:
        achievement = Achievement(
            teacher_id=teacher_id,
            academic_year=fields.pop("academic_year", "2023-2024"),
            certificate_year=fields.pop("certificate_year", 2023),
            title=fields.pop("title", "Best Paper Award"),
            description=fields.pop("description", "Awarded at the national conference on systems."),
            certificate_link=fields.pop("certificate_link", "https://drive.google.com/file/d/abc123/view"),
            status=status.value,
            **fields,
        )
        db_session.add(achievement)
        db_session.commit()
        db_session.refresh(achievement)
        return achievement
    return _make


def headers_for(user: User) -> dict:
    """Bearer headers for a user, as issued by /auth/login"""
    token = create_access_token({"sub": user.teacher_id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def teacher(make_user) -> User:
    return make_user("T001", UserRole.TEACHER.value, name="Anil Sharma")


@pytest.fixture
def other_teacher(make_user) -> User:
    return make_user("T002", UserRole.TEACHER.value, name="Priya Nair")


@pytest.fixture
def hod(make_user) -> User:
    return make_user("H001", UserRole.HOD.value, name="Suresh Menon")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("A001", UserRole.ADMIN.value, name="Kavita Rao")


def assert_no_credentials(payload) -> None:
    """Fail if any key in a JSON payload looks like a credential"""
    if isinstance(payload, dict):
        for key, value in payload.items():
            assert "password" not in key.lower(), f"credential field {key!r} leaked"
            assert_no_credentials(value)
    elif isinstance(payload, list):
        for item in payload:
            assert_no_credentials(item)
