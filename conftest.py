import os

# Тесты работают с базой в памяти, без миграций и Rollbar
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RUN_MIGRATIONS"] = "False"
os.environ["ROLLBAR_ACCESS_TOKEN"] = ""
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from task_manager.db.database import create_engine_for_url, create_session_factory, get_async_session
from task_manager.db.models import Base
from task_manager.main import app
from task_manager.services.label_service import LabelService
from task_manager.services.security_service import SecurityService
from task_manager.services.status_service import StatusService
from task_manager.services.user_service import UserService


@pytest_asyncio.fixture
async def engine():
    test_engine = create_engine_for_url("sqlite+aiosqlite:///:memory:")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


def override_session(session_factory):
    async def override_get_async_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_session] = override_get_async_session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP-клиент к приложению с тестовой сессией БД"""
    override_session(session_factory)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def server_error_client(session_factory):
    """Клиент, который получает ответ 500 вместо исключения из приложения"""
    override_session(session_factory)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user(db_session):
    return await UserService.create(
        db_session,
        first_name="Anna",
        last_name="Smith",
        email="anna@example.com",
        password="secret",
    )


@pytest_asyncio.fixture
async def other_user(db_session):
    return await UserService.create(
        db_session,
        first_name="Boris",
        last_name="Ivanov",
        email="boris@example.com",
        password="secret",
    )


@pytest_asyncio.fixture
async def task_status(db_session):
    return await StatusService.create(db_session, name="new")


@pytest_asyncio.fixture
async def label(db_session):
    return await LabelService.create(db_session, name="bug")


def login(test_client: AsyncClient, user_id: int) -> None:
    """Кладём в клиент cookie сессии нужного пользователя"""
    test_client.cookies.set("session", SecurityService.create_session_token(user_id))
