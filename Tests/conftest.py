# Tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import create_engine, create_sessionmaker, init_db
from main import create_app
from Services.customer_service import CustomerService


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'customers.db'}",
        request_timeout=5.0,
        create_tables=True,
        sql_echo=False,
        log_level="DEBUG",
        cors_origins=["*"],
        host="127.0.0.1",
        port=8000,
    )


@pytest.fixture
async def engine(anyio_backend, settings):
    engine = create_engine(settings.database_url)
    yield engine
    await engine.dispose()


@pytest.fixture
async def service(engine):
    await init_db(engine)
    return CustomerService(create_sessionmaker(engine))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
