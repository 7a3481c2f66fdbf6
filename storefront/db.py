"""Storage driver built on a SQLAlchemy engine.

The driver is created once at process start and handed to request handlers
explicitly. Calls are synchronous; async callers wrap them with
``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import Table, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

from .schema import create_all

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _find_in_set(needle: Any, haystack: Any) -> Optional[int]:
    """SQLite port of MySQL ``FIND_IN_SET``: 1-based position or 0."""
    if needle is None or haystack is None:
        return None
    items = str(haystack).split(",")
    try:
        return items.index(str(needle)) + 1
    except ValueError:
        return 0


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    dbapi_connection.create_function("FIND_IN_SET", 2, _find_in_set, deterministic=True)


def get_engine(database_url: str) -> Engine:
    kwargs: Dict[str, Any] = {"future": True}
    if database_url in {"sqlite://", "sqlite:///:memory:"}:
        # A single shared connection keeps the in-memory database alive
        # across worker threads.
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    elif not database_url.startswith("sqlite"):
        kwargs["pool_pre_ping"] = True
    engine = create_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _register_sqlite_functions)
    return engine


class StorageDriver:
    """Executes statements and returns rows as plain dicts."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @property
    def dialect(self):
        return self.engine.dialect

    def execute(
        self,
        statement: Union[str, Executable],
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Row]:
        if isinstance(statement, str):
            statement = text(statement)
        with self.engine.connect() as conn:
            result = conn.execute(statement, dict(params or {}))
            return [dict(row) for row in result.mappings()]

    def insert(self, table: Table, values: Mapping[str, Any]) -> Any:
        """Insert one row in its own transaction and return the primary key."""
        with self.engine.begin() as conn:
            result = conn.execute(table.insert().values(**values))
            return result.inserted_primary_key[0]

    def insert_many(self, table: Table, rows: List[Mapping[str, Any]]) -> int:
        if not rows:
            return 0
        with self.engine.begin() as conn:
            conn.execute(table.insert(), [dict(row) for row in rows])
        return len(rows)

    def ping(self) -> bool:
        self.execute("SELECT 1")
        return True

    def dispose(self) -> None:
        logger.info("Disposing database engine %s", self.engine.url.render_as_string(hide_password=True))
        self.engine.dispose()


def create_driver(database_url: str) -> StorageDriver:
    engine = get_engine(database_url)
    logger.info("Connecting to database at %s", engine.url.render_as_string(hide_password=True))
    create_all(engine)
    return StorageDriver(engine)
