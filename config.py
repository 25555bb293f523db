# config.py
import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

from paths import data_file

# Ladda miljövariabler från .env
load_dotenv()

DEFAULT_DATABASE_URL = f"sqlite+aiosqlite:///{data_file('customers.db')}"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str
    request_timeout: float
    create_tables: bool
    sql_echo: bool
    log_level: str
    cors_origins: List[str]
    host: str
    port: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getbool(name: str, default: bool) -> bool:
    value = _getenv(name)
    if not value:
        return default
    return value.lower() in _TRUTHY


def async_database_url(url: str) -> str:
    """Point plain PostgreSQL/SQLite URLs at the asyncio drivers."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://"):]
    return url


def load_settings() -> Settings:
    origins = _getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=async_database_url(_getenv("DATABASE_URL", DEFAULT_DATABASE_URL)),
        request_timeout=float(_getenv("REQUEST_TIMEOUT", "30")),
        create_tables=_getbool("CREATE_TABLES", True),
        sql_echo=_getbool("SQL_ECHO", False),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        host=_getenv("HOST", "0.0.0.0"),
        port=int(_getenv("PORT", "8000")),
    )
