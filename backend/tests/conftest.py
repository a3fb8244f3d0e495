import os

# Настройки читаются при импорте social_api, поэтому окружение задаем до импортов
os.environ.setdefault("DB__DB_HOST", "localhost")
os.environ.setdefault("DB__DB_NAME", "social_test")
os.environ.setdefault("DB__DB_USER", "social")
os.environ.setdefault("DB__DB_PASSWORD", "social")
os.environ.setdefault("SECURITY__JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("RATE_LIMIT__ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from social_api.core.database import DatabaseHelper, db_helper
from social_api.core.storage import get_object_store
from social_api.models import Base
from social_api.repositories.object_store import ObjectStore
from social_api.services.rate_limiter import login_rate_limiter

TEST_PASSWORD = "Str0ng!Passw0rd"
# маленький чанк, чтобы даже короткие файлы делились на несколько частей
TEST_CHUNK_SIZE = 16


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    Отдельная SQLite-база в файле на каждый тест.
    Файл, а не :memory:, чтобы у конкурентных загрузок были свои соединения.
    """
    helper = DatabaseHelper(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield helper
    await helper.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def object_store(database) -> ObjectStore:
    store = ObjectStore(
        engine=database.engine,
        session_factory=database.session_factory,
        bucket_name="test-uploads",
        chunk_size=TEST_CHUNK_SIZE,
    )
    await store.initialize()
    return store


@pytest.fixture(autouse=True)
def _reset_login_attempts():
    login_rate_limiter.attempts.clear()
    yield
    login_rate_limiter.attempts.clear()


@pytest_asyncio.fixture
async def client(database, object_store):
    """HTTP-клиент к приложению с подмененной БД и хранилищем"""
    from main import app

    app.dependency_overrides[db_helper.session_getter] = database.session_getter
    app.dependency_overrides[get_object_store] = lambda: object_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client: AsyncClient, email: str) -> dict:
    """Регистрирует пользователя и возвращает заголовки с токеном и id"""
    response = await client.post("/api/user/signup", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['token']}"},
    }


@pytest_asyncio.fixture
async def alice(client):
    return await signup(client, "alice@example.com")


@pytest_asyncio.fixture
async def bob(client):
    return await signup(client, "bob@example.com")
