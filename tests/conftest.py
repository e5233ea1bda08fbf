import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from socialapi.config import Settings
from socialapi.context import build_services
from socialapi.database import build_engine, build_session_factory, init_db
from socialapi.main import create_app
from socialapi.schemas import UserCreate


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        tracing_enabled=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture()
async def sessions(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture()
def services(sessions, settings):
    return build_services(sessions, settings)


@pytest.fixture()
def make_user(services):
    async def _make(username: str, password: str = "password123"):
        return await services.users.register(
            UserCreate(username=username, email=f"{username}@example.com", password=password)
        )

    return _make


@pytest.fixture()
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class UnreachableStoreSession:
    """Session stand-in whose every round-trip fails like a dropped connection."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def add(self, instance):
        pass

    async def _fail(self, *args, **kwargs):
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    execute = _fail
    commit = _fail

    async def rollback(self):
        pass


@pytest.fixture()
def unreachable_store():
    return lambda: UnreachableStoreSession()
