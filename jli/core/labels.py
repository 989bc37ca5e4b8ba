import logging
from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jli.config import settings
from jli.core.keyframes import require_keyframe
from jli.core.media_files import require_media_file
from jli.database import fits_sqlite_int
from jli.errors import ConstraintViolationError, NotFoundError
from jli.models.label import Label, keyframe_labels, media_labels

logger = logging.getLogger(__name__)


def _label_by_name(db: Session, name: str) -> Optional[Label]:
    return db.query(Label).filter(Label.name == name).first()


def require_label(db: Session, label_id: int) -> Label:
    if not fits_sqlite_int(label_id):
        raise NotFoundError("label", label_id)
    label = db.query(Label).filter(Label.id == label_id).first()
    if label is None:
        raise NotFoundError("label", label_id)
    return label


# =====================================================================
# FIND OR CREATE
# =====================================================================
def find_or_create_label(db: Session, name: str) -> Label:
    """
    Return the label called *name* (exact, case-sensitive), creating it on
    first use. A concurrent insert of the same name is resolved by reading
    the row that won.
    """
    if not name:
        raise ConstraintViolationError("label name must not be empty")

    label = _label_by_name(db, name)
    if label is not None:
        return label

    try:
        with db.begin_nested():
            label = Label(name=name)
            db.add(label)
    except IntegrityError:
        logger.debug("Label %r created concurrently, reading it back", name)
        label = _label_by_name(db, name)
        if label is None:
            raise ConstraintViolationError(f"could not create label {name!r}")

    return label


# =====================================================================
# PREFIX SEARCH
# =====================================================================
def search_labels(db: Session, query: str, limit: Optional[int] = None) -> List[Label]:
    """
    Case-sensitive prefix match ordered by name. An empty query matches
    nothing.
    """
    if not query:
        return []

    return (
        db.query(Label)
        .filter(func.substr(Label.name, 1, len(query)) == query)
        .order_by(Label.name.asc())
        .limit(settings.LABEL_SEARCH_LIMIT if limit is None else limit)
        .all()
    )


# =====================================================================
# MEDIA FILE LABELS
# =====================================================================
def attach_label_to_file(db: Session, media_file_id: int, label_id: int) -> None:
    require_media_file(db, media_file_id)
    require_label(db, label_id)
    db.execute(
        sqlite_insert(media_labels)
        .values(media_file_id=media_file_id, label_id=label_id)
        .on_conflict_do_nothing()
    )


def detach_label_from_file(db: Session, media_file_id: int, label_id: int) -> None:
    if not (fits_sqlite_int(media_file_id) and fits_sqlite_int(label_id)):
        return
    db.execute(
        delete(media_labels).where(
            media_labels.c.media_file_id == media_file_id,
            media_labels.c.label_id == label_id,
        )
    )


def labels_for_file(db: Session, media_file_id: int) -> List[Label]:
    if not fits_sqlite_int(media_file_id):
        return []
    return (
        db.query(Label)
        .join(media_labels, media_labels.c.label_id == Label.id)
        .filter(media_labels.c.media_file_id == media_file_id)
        .order_by(Label.name.asc())
        .all()
    )


# =====================================================================
# KEYFRAME LABELS
# =====================================================================
def attach_label_to_keyframe(db: Session, keyframe_id: int, label_id: int) -> None:
    require_keyframe(db, keyframe_id)
    require_label(db, label_id)
    db.execute(
        sqlite_insert(keyframe_labels)
        .values(keyframe_id=keyframe_id, label_id=label_id)
        .on_conflict_do_nothing()
    )


def detach_label_from_keyframe(db: Session, keyframe_id: int, label_id: int) -> None:
    if not (fits_sqlite_int(keyframe_id) and fits_sqlite_int(label_id)):
        return
    db.execute(
        delete(keyframe_labels).where(
            keyframe_labels.c.keyframe_id == keyframe_id,
            keyframe_labels.c.label_id == label_id,
        )
    )


def labels_for_keyframe(db: Session, keyframe_id: int) -> List[Label]:
    if not fits_sqlite_int(keyframe_id):
        return []
    return (
        db.query(Label)
        .join(keyframe_labels, keyframe_labels.c.label_id == Label.id)
        .filter(keyframe_labels.c.keyframe_id == keyframe_id)
        .order_by(Label.name.asc())
        .all()
    )
