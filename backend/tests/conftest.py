import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Database
from app.main import create_app
from app.models.user import User
from app.services.auth import hash_password


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def run_db(db_url):
    """在全新数据库上同步运行一个协程场景 scenario(database)"""
    def runner(scenario):
        async def main():
            database = Database(db_url)
            await database.init_models()
            try:
                return await scenario(database)
            finally:
                await database.dispose()
        return asyncio.run(main())
    return runner


@pytest.fixture
def test_settings(tmp_path, db_url):
    return Settings(
        DATABASE_URL=db_url,
        SCHEDULER_ENABLED=False,
        LOG_DIR=str(tmp_path / "logs"),
        JWT_SECRET="test-secret",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="admin123",
        ADMIN_NAME="管理员",
    )


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as c:
        yield c


async def make_user(session, username: str, name: str, role: str = "user", status: str = "active") -> User:
    user = User(
        username=username,
        password=hash_password("password123"),
        name=name,
        role=role,
        status=status,
        created_at=datetime(2026, 1, 1, 8, 0),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def login(client, username: str, password: str = "password123"):
    resp = client.post("/api/auth/login", json={"usernameOrEmail": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


def register_and_login(client, username: str, name: str, password: str = "password123"):
    resp = client.post("/api/auth/register", json={"username": username, "password": password, "name": name})
    assert resp.status_code == 200, resp.text
    return login(client, username, password)
