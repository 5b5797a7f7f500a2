from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def database_url(cache_file: Optional[str]) -> str:
    if not cache_file:
        return "sqlite://"
    return f"sqlite:///{cache_file}"


def make_engine(cache_file: Optional[str]) -> Engine:
    engine = create_engine(database_url(cache_file), future=True)

    # pysqlite defers BEGIN until the first DML statement, which would turn a
    # leading SAVEPOINT into the outer transaction. Emit BEGIN ourselves.
    @event.listens_for(engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)
