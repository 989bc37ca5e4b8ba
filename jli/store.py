import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from jli.core import keyframes as keyframe_store
from jli.core import labels as label_store
from jli.core import media_files as media_store
from jli.database import create_sqlite_engine
from jli.errors import ConstraintViolationError, StorageUnavailableError
from jli.migrations import Migration, migrate
from jli.schemas.keyframe_schema import KeyframeOut
from jli.schemas.label_schema import LabelOut
from jli.schemas.media_schema import MediaFileOut, NavigationOut

logger = logging.getLogger(__name__)


class Store:
    """
    Catalogue store bound to one database file.

    Owns the engine (one SQLite connection) and a lock that serializes every
    operation, reads included. Each public method is one unit of work that
    commits on success, rolls back on any error, and returns pydantic records.
    """

    def __init__(
        self,
        database_path: str,
        migrations: Optional[Sequence[Tuple[int, Migration]]] = None,
    ) -> None:
        self.database_path = database_path
        self._lock = threading.RLock()
        self._closed = False

        self._engine = create_sqlite_engine(database_path)
        try:
            self.schema_version = migrate(self._engine, migrations)
        except StorageUnavailableError:
            self._engine.dispose()
            raise
        except SQLAlchemyError as exc:
            self._engine.dispose()
            raise StorageUnavailableError(f"opening database {database_path!r}: {exc}") from exc

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("Opened catalogue %s (schema v%d)", database_path, self.schema_version)

    # -------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------
    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._engine.dispose()
        logger.info("Closed catalogue %s", self.database_path)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            if self._closed:
                raise StorageUnavailableError("store is closed")
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except IntegrityError as exc:
                logger.warning("Constraint violated, rolling back: %s", exc.orig)
                db.rollback()
                raise ConstraintViolationError(str(exc.orig)) from exc
            except SQLAlchemyError:
                logger.exception("Database error, rolling back")
                db.rollback()
                raise
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    # -------------------------------------------------------
    # Media files
    # -------------------------------------------------------
    def upsert_media_file(self, path: str, media_type) -> bool:
        with self._session() as db:
            return media_store.upsert_media_file(db, path, media_type)

    def upsert_media_files(self, files: Iterable[Tuple[str, object]]) -> int:
        with self._session() as db:
            return media_store.upsert_media_files(db, files)

    def get_media_file(self, media_file_id: int) -> Optional[MediaFileOut]:
        with self._session() as db:
            media_file = media_store.get_media_file(db, media_file_id)
            return MediaFileOut.model_validate(media_file) if media_file else None

    def get_media_file_by_path(self, path: str) -> Optional[MediaFileOut]:
        with self._session() as db:
            media_file = media_store.get_media_file_by_path(db, path)
            return MediaFileOut.model_validate(media_file) if media_file else None

    def first_media_file(self) -> Optional[MediaFileOut]:
        with self._session() as db:
            media_file = media_store.first_media_file(db)
            return MediaFileOut.model_validate(media_file) if media_file else None

    def media_file_count(self) -> int:
        with self._session() as db:
            return media_store.media_file_count(db)

    def update_media_description(self, media_file_id: int, description: str) -> MediaFileOut:
        with self._session() as db:
            media_file = media_store.update_media_description(db, media_file_id, description)
            return MediaFileOut.model_validate(media_file)

    def navigation(self, media_file_id: int) -> NavigationOut:
        with self._session() as db:
            return media_store.get_navigation(db, media_file_id)

    def delete_media_file(self, media_file_id: int) -> None:
        with self._session() as db:
            media_store.delete_media_file(db, media_file_id)

    # -------------------------------------------------------
    # Labels
    # -------------------------------------------------------
    def find_or_create_label(self, name: str) -> LabelOut:
        with self._session() as db:
            return LabelOut.model_validate(label_store.find_or_create_label(db, name))

    def search_labels(self, query: str) -> List[LabelOut]:
        with self._session() as db:
            return [LabelOut.model_validate(lbl) for lbl in label_store.search_labels(db, query)]

    def attach_label_to_file(self, media_file_id: int, label_id: int) -> None:
        with self._session() as db:
            label_store.attach_label_to_file(db, media_file_id, label_id)

    def detach_label_from_file(self, media_file_id: int, label_id: int) -> None:
        with self._session() as db:
            label_store.detach_label_from_file(db, media_file_id, label_id)

    def labels_for_file(self, media_file_id: int) -> List[LabelOut]:
        with self._session() as db:
            return [LabelOut.model_validate(lbl) for lbl in label_store.labels_for_file(db, media_file_id)]

    def add_label_to_file(self, media_file_id: int, name: str) -> LabelOut:
        """Find-or-create *name* and attach it to the file in one unit of work."""
        with self._session() as db:
            label = label_store.find_or_create_label(db, name)
            label_store.attach_label_to_file(db, media_file_id, label.id)
            return LabelOut.model_validate(label)

    def attach_label_to_keyframe(self, keyframe_id: int, label_id: int) -> None:
        with self._session() as db:
            label_store.attach_label_to_keyframe(db, keyframe_id, label_id)

    def detach_label_from_keyframe(self, keyframe_id: int, label_id: int) -> None:
        with self._session() as db:
            label_store.detach_label_from_keyframe(db, keyframe_id, label_id)

    def labels_for_keyframe(self, keyframe_id: int) -> List[LabelOut]:
        with self._session() as db:
            return [LabelOut.model_validate(lbl) for lbl in label_store.labels_for_keyframe(db, keyframe_id)]

    def add_label_to_keyframe(self, keyframe_id: int, name: str) -> LabelOut:
        with self._session() as db:
            label = label_store.find_or_create_label(db, name)
            label_store.attach_label_to_keyframe(db, keyframe_id, label.id)
            return LabelOut.model_validate(label)

    # -------------------------------------------------------
    # Keyframes
    # -------------------------------------------------------
    def ensure_pinned_keyframe(self, media_file_id: int) -> Optional[KeyframeOut]:
        with self._session() as db:
            pinned = keyframe_store.ensure_pinned_keyframe(db, media_file_id)
            return KeyframeOut.model_validate(pinned) if pinned else None

    def create_keyframe(self, media_file_id: int, timestamp_ms: int) -> KeyframeOut:
        with self._session() as db:
            return KeyframeOut.model_validate(
                keyframe_store.create_keyframe(db, media_file_id, timestamp_ms)
            )

    def get_keyframe(self, keyframe_id: int) -> Optional[KeyframeOut]:
        with self._session() as db:
            kf = keyframe_store.get_keyframe(db, keyframe_id)
            return KeyframeOut.model_validate(kf) if kf else None

    def keyframes_for_file(self, media_file_id: int) -> List[KeyframeOut]:
        with self._session() as db:
            return [
                KeyframeOut.model_validate(kf)
                for kf in keyframe_store.keyframes_for_file(db, media_file_id)
            ]

    def update_keyframe_timestamp(self, keyframe_id: int, timestamp_ms: int) -> KeyframeOut:
        with self._session() as db:
            return KeyframeOut.model_validate(
                keyframe_store.update_keyframe_timestamp(db, keyframe_id, timestamp_ms)
            )

    def update_keyframe_description(self, keyframe_id: int, description: str) -> KeyframeOut:
        with self._session() as db:
            return KeyframeOut.model_validate(
                keyframe_store.update_keyframe_description(db, keyframe_id, description)
            )

    def delete_keyframe(self, keyframe_id: int) -> None:
        with self._session() as db:
            keyframe_store.delete_keyframe(db, keyframe_id)
