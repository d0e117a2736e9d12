"""Pytest configuration for the HR portal tests.

The database URL is pointed at a throwaway SQLite file before any
``hr_portal`` module is imported, because the engine is built at import time.
"""

import os
import tempfile
import uuid
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

_DB_DIR = Path(tempfile.mkdtemp(prefix="hr_portal_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["JWT_ALGORITHM"] = "HS256"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from hr_portal.core.dates import get_today  # noqa: E402
from hr_portal.core.jwt import create_access_token  # noqa: E402
from hr_portal.core.security import hash_password  # noqa: E402
from hr_portal.database import engine  # noqa: E402
from hr_portal.main import app  # noqa: E402
from hr_portal.models.minijob_setting import MinijobSetting  # noqa: E402
from hr_portal.models.user import Role, User  # noqa: E402


TODAY = date(2024, 2, 1)
PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def client(today):
    app.dependency_overrides[get_today] = lambda: today
    return TestClient(app)


def _create_user(email: str, role: Role, is_active: bool = True) -> User:
    with Session(engine) as s:
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=email.split("@")[0].title(),
            hashed_password=hash_password(PASSWORD),
            role=role.value,
            is_active=is_active,
        )
        s.add(user)
        s.commit()
        s.refresh(user)
        return user


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role, "name": user.name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def create_user():
    return _create_user


@pytest.fixture
def admin():
    return _create_user("admin@example.com", Role.ADMIN)


@pytest.fixture
def employee():
    return _create_user("employee@example.com", Role.EMPLOYEE)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee)


@pytest.fixture
def make_setting():
    """Insert a setting row directly, bypassing the timeline rules."""

    def _make(valid_from: str, valid_until=None, limit="538.00", description=None) -> int:
        with Session(engine) as s:
            setting = MinijobSetting(
                monthly_limit=Decimal(limit),
                description=description or f"Limit from {valid_from}",
                valid_from=date.fromisoformat(valid_from),
                valid_until=date.fromisoformat(valid_until) if valid_until else None,
                created_at=datetime.utcnow(),
                updated_at=datetime.utcnow(),
            )
            s.add(setting)
            s.commit()
            s.refresh(setting)
            return setting.id

    return _make
