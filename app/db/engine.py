import os
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Registers the tables on SQLModel.metadata
from app.domain import models  # noqa: F401

logger = logging.getLogger("db")

DEFAULT_SQLITE_URL = "sqlite:///./helpdesk.db"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def database_url_from_env() -> str | URL:
    """
    DATABASE_URL wins; otherwise the DB_SERVER/DB_NAME/DB_USER/DB_PASSWORD parts
    build a SQL Server URL; otherwise a local SQLite file.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    server = os.getenv("DB_SERVER")
    if not server:
        return DEFAULT_SQLITE_URL

    return URL.create(
        "mssql+pyodbc",
        username=os.getenv("DB_USER"),
        password=os.getenv("DB_PASSWORD"),
        host=server,
        database=os.getenv("DB_NAME"),
        query={
            "driver": os.getenv("DB_DRIVER", "ODBC Driver 18 for SQL Server"),
            "Encrypt": "yes" if _flag("DB_ENCRYPT", "true") else "no",
            "TrustServerCertificate": "no",
        },
    )


def build_engine(url: str | URL, *, echo: bool = False) -> Engine:
    backend = url.get_backend_name() if isinstance(url, URL) else url.split(":", 1)[0].split("+", 1)[0]

    if backend == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if str(url) in {"sqlite://", "sqlite:///:memory:"}:
            # Single shared connection, otherwise every checkout sees an empty DB
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,
        pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        pool_pre_ping=True,
    )


class Database:
    """Data-access context: owns the engine, opened at startup and disposed at shutdown."""

    def __init__(self, url: str | URL | None = None, *, echo: bool | None = None):
        self.url = url if url is not None else database_url_from_env()
        self.engine = build_engine(self.url, echo=_flag("DB_ECHO", "false") if echo is None else echo)

    def open(self) -> None:
        SQLModel.metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections released")

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as s:
            yield s
