"""
Shared fixtures: an isolated SQLite database per test session, fresh tables
per test, an httpx client bound to the ASGI app and helpers to create users
and obtain Bearer tokens.
"""
import os
import tempfile

_tmp_dir = tempfile.mkdtemp(prefix="helpdesk-tests-")

os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'test.sqlite')}"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["APP_ENV"] = "testing"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import httpx  # noqa: E402
import pytest  # noqa: E402

from helpdesk.core.constants import UserRole  # noqa: E402
from helpdesk.core.users import password_helper  # noqa: E402
from helpdesk.db.engine import (  # noqa: E402
    async_session_maker,
    create_db_and_tables,
    drop_db_and_tables,
)
from helpdesk.main import app  # noqa: E402
from helpdesk.models.user import User  # noqa: E402

DEFAULT_PASSWORD = "secreto123"


@pytest.fixture(autouse=True)
async def database():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac


@pytest.fixture
def make_user():
    async def _make_user(email, role=UserRole.USER, name=None, password=DEFAULT_PASSWORD):
        async with async_session_maker() as session:
            user = User(
                email=email,
                name=name or email.split("@")[0].title(),
                hashed_password=password_helper.hash(password),
                role=role.value,
                is_superuser=role == UserRole.ADMIN,
                is_verified=True,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


@pytest.fixture
def login(client):
    async def _login(email, password=DEFAULT_PASSWORD):
        response = await client.post(
            "/auth/jwt/login", data={"username": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
async def requester(make_user, login):
    user = await make_user("ana@example.com", UserRole.USER, name="Ana")
    return user, await login(user.email)


@pytest.fixture
async def other_requester(make_user, login):
    user = await make_user("bruno@example.com", UserRole.USER, name="Bruno")
    return user, await login(user.email)


@pytest.fixture
async def agent(make_user, login):
    user = await make_user("carla@example.com", UserRole.AGENT, name="Carla")
    return user, await login(user.email)


@pytest.fixture
async def other_agent(make_user, login):
    user = await make_user("diego@example.com", UserRole.AGENT, name="Diego")
    return user, await login(user.email)


@pytest.fixture
async def admin(make_user, login):
    user = await make_user("admin@example.com", UserRole.ADMIN, name="Admin")
    return user, await login(user.email)


@pytest.fixture
def create_ticket(client):
    async def _create_ticket(headers, **overrides):
        payload = {"title": "No anda la impresora", "description": "Tira papel atascado"}
        payload.update(overrides)
        response = await client.post("/api/tickets", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_ticket
