"""
Persistence adapter.

The backend is resolved once at startup into a ``DatabaseType`` (explicit
``DATABASE_TYPE`` override first, URL prefix otherwise). Each type has a
small strategy that turns the configured URL into a SQLAlchemy driver URL
and engine options. The resulting ``Database`` owns the engine and the
session factory and is handed to whoever needs a session.
"""
import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from academia.core.config import Settings
from academia.db.base_class import Base

logger = logging.getLogger(__name__)


class DatabaseType(str, enum.Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


def detect_database_type(url: str) -> DatabaseType:
    if url.startswith(("postgres://", "postgresql://", "postgresql+")):
        return DatabaseType.POSTGRESQL
    if url.startswith(("mysql://", "mysql+")):
        return DatabaseType.MYSQL
    if url.startswith(("file:", "sqlite:")) or ".db" in url:
        return DatabaseType.SQLITE
    return DatabaseType.POSTGRESQL


def resolve_database_type(settings: Settings) -> DatabaseType:
    if settings.DATABASE_TYPE:
        try:
            return DatabaseType(settings.DATABASE_TYPE.strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported database type: {settings.DATABASE_TYPE}") from None
    return detect_database_type(settings.DATABASE_URL)


@dataclass
class DatabaseConfig:
    type: DatabaseType
    url: str
    engine_options: Dict[str, Any] = field(default_factory=dict)


def _postgres_config(url: str) -> DatabaseConfig:
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return DatabaseConfig(DatabaseType.POSTGRESQL, url, {"pool_pre_ping": True})


def _mysql_config(url: str) -> DatabaseConfig:
    if url.startswith("mysql://"):
        url = "mysql+pymysql://" + url[len("mysql://"):]
    return DatabaseConfig(DatabaseType.MYSQL, url, {"pool_pre_ping": True, "pool_recycle": 1800})


def _sqlite_config(url: str) -> DatabaseConfig:
    if url.startswith("file:"):
        path = url[len("file:"):] or "./dev.db"
        url = f"sqlite:///{path}"
    elif not url.startswith("sqlite:"):
        url = f"sqlite:///{url}"

    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty database
        options["poolclass"] = StaticPool
    return DatabaseConfig(DatabaseType.SQLITE, url, options)


_STRATEGIES = {
    DatabaseType.POSTGRESQL: _postgres_config,
    DatabaseType.MYSQL: _mysql_config,
    DatabaseType.SQLITE: _sqlite_config,
}


def build_database_config(settings: Settings) -> DatabaseConfig:
    if not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL must be set. Please configure your database connection.")
    db_type = resolve_database_type(settings)
    return _STRATEGIES[db_type](settings.DATABASE_URL)


class Database:
    def __init__(self, config: DatabaseConfig, echo: bool = False):
        self.config = config
        self.engine: Engine = create_engine(config.url, echo=echo, **config.engine_options)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        config = build_database_config(settings)
        logger.info("using %s database", config.type.value)
        return cls(config, echo=settings.DB_ECHO)

    @property
    def type(self) -> DatabaseType:
        return self.config.type

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        with self.session() as db:
            try:
                yield db
                db.commit()
            except Exception:
                db.rollback()
                raise

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("database connection check failed")
            return False

    def create_all(self) -> None:
        # import models so SQLAlchemy registers them
        from academia.models import ai_artifact, assignment, course, enrollment, password_reset, submission, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
