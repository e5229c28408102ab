# tests/conftest.py
"""
In-process test harness.

The settings object is built at import time, so the environment is set up
before anything from school_saas is imported: a throwaway SQLite file and
cheap bcrypt rounds.
"""
import logging
import os
import sys
import tempfile
from typing import Optional, Tuple

_DB_DIR = tempfile.mkdtemp(prefix="school_saas_tests_")
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from httpx import AsyncClient, ASGITransport

from school_saas import create_app
from school_saas.core.config import settings
from school_saas.core.database import AsyncSessionLocal, close_db, reset_db

PASSWORD = "secret123"

app = create_app()


# =========================
# Logging -> stdout
# =========================
@pytest.fixture(scope="session", autouse=True)
def _tests_log_to_stdout():
    root = logging.getLogger()
    if not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(os.getenv("TEST_LOG_LEVEL", "WARNING").upper())


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def database():
    """Fresh tables for every test"""
    await reset_db()
    yield
    await close_db()


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class Api:
    """Thin wrapper adding the API prefix and bearer tokens"""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def request(self, method: str, path: str, token: Optional[str] = None, **kwargs):
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self.client.request(method, f"{settings.API_PREFIX}{path}", headers=headers, **kwargs)

    async def get(self, path, token=None, **kwargs):
        return await self.request("GET", path, token, **kwargs)

    async def post(self, path, token=None, **kwargs):
        return await self.request("POST", path, token, **kwargs)

    async def put(self, path, token=None, **kwargs):
        return await self.request("PUT", path, token, **kwargs)

    async def delete(self, path, token=None, **kwargs):
        return await self.request("DELETE", path, token, **kwargs)

    async def login(self, role: str, email: str, password: str = PASSWORD) -> str:
        response = await self.post(f"/{role}/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["access_token"]

    async def admin(self, email: str = "admin@platform.example.com") -> str:
        response = await self.post(
            "/admin/register", json={"name": "Platform Admin", "email": email, "password": PASSWORD}
        )
        assert response.status_code == 201, response.text
        return await self.login("admin", email)

    async def school(self, admin_token: str, name: str) -> Tuple[dict, str]:
        email = f"{name.lower().replace(' ', '.')}@school.example.com"
        response = await self.post(
            "/school/register", admin_token,
            json={"name": name, "email": email, "password": PASSWORD}
        )
        assert response.status_code == 201, response.text
        return response.json(), await self.login("school", email)

    async def member(self, token: str, path: str, role: Optional[str], name: str, **fields) -> Tuple[dict, Optional[str]]:
        """Create an account under a school and, when role is given, log it in"""
        email = f"{name.lower().replace(' ', '.')}@people.example.com"
        payload = {"name": name, "email": email, "password": PASSWORD, **fields}
        response = await self.post(path, token, json=payload)
        assert response.status_code == 201, response.text
        member_token = await self.login(role, email) if role else None
        return response.json(), member_token


@pytest.fixture
def api(client) -> Api:
    return Api(client)


@pytest.fixture
async def two_schools(api):
    """An admin and two independent schools, each with its own token"""
    admin_token = await api.admin()
    school_a, token_a = await api.school(admin_token, "North High")
    school_b, token_b = await api.school(admin_token, "South High")
    return {
        "admin": admin_token,
        "a": school_a, "a_token": token_a,
        "b": school_b, "b_token": token_b,
    }
