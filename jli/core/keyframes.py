import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from jli.core.media_files import require_media_file
from jli.database import SQLITE_INT_MAX, fits_sqlite_int
from jli.errors import ConstraintViolationError, NotFoundError, PinnedKeyframeError
from jli.models.keyframe import Keyframe
from jli.models.media import MediaType

logger = logging.getLogger(__name__)


def _check_timestamp(timestamp_ms: int) -> None:
    if timestamp_ms < 0:
        raise ConstraintViolationError(f"timestamp_ms must be non-negative, got {timestamp_ms}")
    if timestamp_ms > SQLITE_INT_MAX:
        raise ConstraintViolationError(f"timestamp_ms out of range, got {timestamp_ms}")


def get_keyframe(db: Session, keyframe_id: int) -> Optional[Keyframe]:
    if not fits_sqlite_int(keyframe_id):
        return None
    return (
        db.query(Keyframe)
        .options(selectinload(Keyframe.labels))
        .filter(Keyframe.id == keyframe_id)
        .first()
    )


def require_keyframe(db: Session, keyframe_id: int) -> Keyframe:
    keyframe = get_keyframe(db, keyframe_id)
    if keyframe is None:
        raise NotFoundError("keyframe", keyframe_id)
    return keyframe


def _pinned_keyframe(db: Session, media_file_id: int) -> Optional[Keyframe]:
    return (
        db.query(Keyframe)
        .filter(Keyframe.media_file_id == media_file_id, Keyframe.pinned.is_(True))
        .first()
    )


# =====================================================================
# PINNED ORIGIN KEYFRAME
# =====================================================================
def ensure_pinned_keyframe(db: Session, media_file_id: int) -> Optional[Keyframe]:
    """
    Make sure a temporal media file has its pinned keyframe at 0 ms.

    Returns the pinned keyframe, or None for images, which never get one.
    Safe to call any number of times.
    """
    media_file = require_media_file(db, media_file_id)
    if not MediaType(media_file.media_type).is_temporal:
        return None

    pinned = _pinned_keyframe(db, media_file_id)
    if pinned is not None:
        return pinned

    try:
        with db.begin_nested():
            pinned = Keyframe(media_file_id=media_file_id, timestamp_ms=0, pinned=True)
            db.add(pinned)
    except IntegrityError:
        # uq_keyframes_pinned: someone else created it first
        pinned = _pinned_keyframe(db, media_file_id)
        if pinned is None:
            raise

    logger.debug("Pinned keyframe %s ready for media file %s", pinned.id, media_file_id)
    return pinned


# =====================================================================
# CREATE / LIST
# =====================================================================
def create_keyframe(db: Session, media_file_id: int, timestamp_ms: int) -> Keyframe:
    """Always creates an unpinned keyframe; timestamps may repeat."""
    _check_timestamp(timestamp_ms)
    require_media_file(db, media_file_id)

    keyframe = Keyframe(media_file_id=media_file_id, timestamp_ms=timestamp_ms, pinned=False)
    db.add(keyframe)
    db.flush()
    return keyframe


def keyframes_for_file(db: Session, media_file_id: int) -> List[Keyframe]:
    if not fits_sqlite_int(media_file_id):
        return []
    return (
        db.query(Keyframe)
        .options(selectinload(Keyframe.labels))
        .filter(Keyframe.media_file_id == media_file_id)
        .order_by(Keyframe.timestamp_ms.asc(), Keyframe.id.asc())
        .all()
    )


# =====================================================================
# UPDATE
# =====================================================================
def update_keyframe_timestamp(db: Session, keyframe_id: int, timestamp_ms: int) -> Keyframe:
    keyframe = require_keyframe(db, keyframe_id)
    if keyframe.pinned:
        raise PinnedKeyframeError(keyframe_id, "move")
    _check_timestamp(timestamp_ms)

    keyframe.timestamp_ms = timestamp_ms
    db.flush()
    return keyframe


def update_keyframe_description(db: Session, keyframe_id: int, description: str) -> Keyframe:
    # Allowed on the pinned keyframe: only its position is protected
    keyframe = require_keyframe(db, keyframe_id)
    keyframe.description = description
    db.flush()
    return keyframe


# =====================================================================
# DELETE
# =====================================================================
def delete_keyframe(db: Session, keyframe_id: int) -> None:
    keyframe = require_keyframe(db, keyframe_id)
    if keyframe.pinned:
        raise PinnedKeyframeError(keyframe_id, "delete")

    db.query(Keyframe).filter(Keyframe.id == keyframe_id).delete(synchronize_session=False)
