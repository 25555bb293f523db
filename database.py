# database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from config import Settings
from paths import DATA_DIR
from Services.customer_service import CustomerService

logger = logging.getLogger(__name__)


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Säkerställ att Data-katalogen finns
        DATA_DIR.mkdir(exist_ok=True)
        connect_args["check_same_thread"] = False  # Behövs för SQLite
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    from Models import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database initialized at: {engine.url.render_as_string(hide_password=True)}")


@asynccontextmanager
async def open_customer_service(settings: Settings) -> AsyncIterator[CustomerService]:
    """Own the engine for the lifetime of the process and hand out the service."""
    engine = create_engine(settings.database_url, echo=settings.sql_echo)
    try:
        if settings.create_tables:
            await init_db(engine)
        yield CustomerService(create_sessionmaker(engine))
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")
