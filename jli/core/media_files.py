import logging
from datetime import timedelta
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from jli.database import fits_sqlite_int
from jli.errors import ConstraintViolationError, NotFoundError
from jli.models.media import MediaFile, MediaType, utcnow
from jli.schemas.media_schema import NavigationOut

logger = logging.getLogger(__name__)


def _media_type_value(media_type) -> str:
    try:
        return MediaType(media_type).value
    except ValueError:
        raise ConstraintViolationError(f"unknown media type {media_type!r}") from None


# =====================================================================
# UPSERT (idempotent: an existing path is left untouched)
# =====================================================================
def upsert_media_file(db: Session, path: str, media_type) -> bool:
    """
    Insert a file record for an unseen path. Returns True if a row was added.
    """
    stmt = (
        sqlite_insert(MediaFile)
        .values(path=path, media_type=_media_type_value(media_type))
        .on_conflict_do_nothing(index_elements=["path"])
    )
    result = db.execute(stmt)
    return result.rowcount == 1


def upsert_media_files(db: Session, files: Iterable[Tuple[str, object]]) -> int:
    """
    Feed scanner output into the catalogue. Duplicates and ordering are
    irrelevant; entries with an unknown media type are skipped.
    """
    added = 0
    for path, media_type in files:
        try:
            if upsert_media_file(db, path, media_type):
                added += 1
        except ConstraintViolationError as exc:
            logger.warning("Skipping %s: %s", path, exc)
    return added


# =====================================================================
# LOOKUPS
# =====================================================================
def get_media_file(db: Session, media_file_id: int) -> Optional[MediaFile]:
    if not fits_sqlite_int(media_file_id):
        return None
    return db.query(MediaFile).filter(MediaFile.id == media_file_id).first()


def get_media_file_by_path(db: Session, path: str) -> Optional[MediaFile]:
    return db.query(MediaFile).filter(MediaFile.path == path).first()


def require_media_file(db: Session, media_file_id: int) -> MediaFile:
    media_file = get_media_file(db, media_file_id)
    if media_file is None:
        raise NotFoundError("media file", media_file_id)
    return media_file


def first_media_file(db: Session) -> Optional[MediaFile]:
    return db.query(MediaFile).order_by(MediaFile.path.asc()).first()


def media_file_count(db: Session) -> int:
    return db.query(func.count(MediaFile.id)).scalar() or 0


# =====================================================================
# UPDATE DESCRIPTION
# =====================================================================
def update_media_description(db: Session, media_file_id: int, description: str) -> MediaFile:
    media_file = require_media_file(db, media_file_id)

    now = utcnow()
    if media_file.updated_at is not None and now <= media_file.updated_at:
        now = media_file.updated_at + timedelta(microseconds=1)

    media_file.description = description
    media_file.updated_at = now
    db.flush()
    return media_file


# =====================================================================
# DELETE (database cascades to keyframes and label links)
# =====================================================================
def delete_media_file(db: Session, media_file_id: int) -> None:
    require_media_file(db, media_file_id)
    db.query(MediaFile).filter(MediaFile.id == media_file_id).delete(synchronize_session=False)


# =====================================================================
# NAVIGATION
# =====================================================================
def _neighbour_id(db: Session, path: str, forward: bool) -> Optional[int]:
    query = db.query(MediaFile.id)
    if forward:
        query = query.filter(MediaFile.path > path).order_by(MediaFile.path.asc())
    else:
        query = query.filter(MediaFile.path < path).order_by(MediaFile.path.desc())
    return query.limit(1).scalar()


def _edge_id(db: Session, last: bool) -> Optional[int]:
    order = MediaFile.path.desc() if last else MediaFile.path.asc()
    return db.query(MediaFile.id).order_by(order).limit(1).scalar()


def get_navigation(db: Session, media_file_id: int) -> NavigationOut:
    """
    Previous/next by path with wrap-around, plus the 1-based rank of the file.
    """
    current = require_media_file(db, media_file_id)

    total = media_file_count(db)
    index = (
        db.query(func.count(MediaFile.id))
        .filter(MediaFile.path <= current.path)
        .scalar()
    )

    prev_id = _neighbour_id(db, current.path, forward=False)
    if prev_id is None:
        prev_id = _edge_id(db, last=True)

    next_id = _neighbour_id(db, current.path, forward=True)
    if next_id is None:
        next_id = _edge_id(db, last=False)

    return NavigationOut(prev_id=prev_id, next_id=next_id, index=index, total=total)
