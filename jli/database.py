from typing import TYPE_CHECKING, Annotated

from fastapi import Path, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from jli.store import Store

Base = declarative_base()

# SQLite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def fits_sqlite_int(value: int) -> bool:
    return SQLITE_INT_MIN <= value <= SQLITE_INT_MAX


# -------------------------------------------------------
# ENGINE
# -------------------------------------------------------
def create_sqlite_engine(path: str) -> Engine:
    """
    Build an engine bound to exactly one SQLite connection.

    The connection runs in WAL mode with foreign keys enforced. pysqlite's own
    transaction handling is switched off and BEGIN is emitted explicitly, so
    DDL and PRAGMA user_version take part in the surrounding transaction.
    """
    url = "sqlite://" if path == ":memory:" else f"sqlite:///{path}"

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# -------------------------------------------------------
# DEPENDENCY
# -------------------------------------------------------
def get_store(request: Request) -> "Store":
    return request.app.state.store


# Row id path parameter, rejected with 422 outside the INTEGER range
RowId = Annotated[int, Path(ge=1, le=SQLITE_INT_MAX)]
