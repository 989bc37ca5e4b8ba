import logging
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.engine import Connection, Engine

from jli.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

Migration = Callable[[Connection], None]


def _create_catalogue_tables(conn: Connection) -> None:
    statements = [
        """
        CREATE TABLE media_files (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            path TEXT NOT NULL UNIQUE,
            media_type TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
        """
        CREATE TABLE labels (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        )
        """,
        """
        CREATE TABLE media_labels (
            media_file_id INTEGER NOT NULL REFERENCES media_files(id) ON DELETE CASCADE,
            label_id INTEGER NOT NULL REFERENCES labels(id) ON DELETE CASCADE,
            PRIMARY KEY (media_file_id, label_id)
        )
        """,
        """
        CREATE TABLE keyframes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            media_file_id INTEGER NOT NULL REFERENCES media_files(id) ON DELETE CASCADE,
            timestamp_ms INTEGER NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            pinned INTEGER NOT NULL DEFAULT 0
        )
        """,
        """
        CREATE TABLE keyframe_labels (
            keyframe_id INTEGER NOT NULL REFERENCES keyframes(id) ON DELETE CASCADE,
            label_id INTEGER NOT NULL REFERENCES labels(id) ON DELETE CASCADE,
            PRIMARY KEY (keyframe_id, label_id)
        )
        """,
    ]
    for statement in statements:
        conn.exec_driver_sql(statement)


def _add_keyframe_indexes(conn: Connection) -> None:
    conn.exec_driver_sql(
        "CREATE INDEX idx_keyframes_media_file ON keyframes (media_file_id, timestamp_ms)"
    )
    # At most one pinned keyframe per media file
    conn.exec_driver_sql(
        "CREATE UNIQUE INDEX uq_keyframes_pinned ON keyframes (media_file_id) WHERE pinned = 1"
    )


MIGRATIONS: List[Tuple[int, Migration]] = [
    (1, _create_catalogue_tables),
    (2, _add_keyframe_indexes),
]

CURRENT_VERSION = MIGRATIONS[-1][0]


def get_schema_version(conn: Connection) -> int:
    return int(conn.exec_driver_sql("PRAGMA user_version").scalar() or 0)


def _set_schema_version(conn: Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters
    conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")


def migrate(engine: Engine, migrations: Optional[Sequence[Tuple[int, Migration]]] = None) -> int:
    """Bring the database up to the newest version in *migrations*.

    Returns the schema version the database is at afterwards. Raises
    :class:`StorageUnavailableError` when the version cannot be read or any
    step fails; in that case nothing from this attempt is persisted.
    """

    steps = sorted(MIGRATIONS if migrations is None else migrations, key=lambda step: step[0])
    target = steps[-1][0] if steps else 0

    try:
        with engine.begin() as conn:
            current = get_schema_version(conn)
            if current >= target:
                if current > target:
                    logger.warning(
                        "Database schema v%d is newer than this release (v%d); not downgrading",
                        current,
                        target,
                    )
                return current

            for version, step in steps:
                if version <= current:
                    continue
                logger.info("Applying schema migration v%d", version)
                step(conn)

            _set_schema_version(conn, target)
    except Exception as exc:
        logger.error("Schema migration failed, rolled back: %s", exc)
        raise StorageUnavailableError(f"running migrations: {exc}") from exc

    logger.info("Database schema migrated from v%d to v%d", current, target)
    return target
