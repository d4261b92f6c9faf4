import os
import sqlite3
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings

Base = declarative_base()


def get_engine(database_url: str | None = None):
    url = make_url(database_url or settings.database_url)
    connect_args = {}
    kwargs = {"future": True, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": 10}
        if url.database and url.database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
        else:
            # one shared connection, otherwise each session sees an empty in-memory db
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, connect_args=connect_args, **kwargs)

    if url.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.close()

    return engine


def make_session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,
    )


def run_with_retry(fn, retries: int = 3, delay: float = 0.2):
    last_exc = None
    for _ in range(retries):
        try:
            return fn()
        except sqlite3.OperationalError as exc:  # pragma: no cover
            last_exc = exc
            if "locked" not in str(exc).lower():
                raise
            time.sleep(delay)
    if last_exc:
        raise last_exc


def init_db(engine):
    """Create all tables if they do not exist yet."""
    from core import db_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
