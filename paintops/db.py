from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from paintops.config import settings
from paintops.models import Base


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own; take it over so SAVEPOINT nests correctly.
    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def _on_begin(connection):
        connection.exec_driver_sql('BEGIN')


def build_engine(url: str) -> Engine:
    if url.startswith('sqlite'):
        kwargs: dict = {'connect_args': {'check_same_thread': False}}
        if ':memory:' in url or url in {'sqlite://', 'sqlite+pysqlite://'}:
            kwargs['poolclass'] = StaticPool
        engine = create_engine(url, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.database_url_normalized)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Iterator[Session]:
    with SessionLocal() as db:
        yield db


def init_db(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind=bind or engine)
