# jli/routers/keyframes_router.py

from fastapi import APIRouter, Depends, HTTPException, Response

from jli.database import RowId, get_store
from jli.errors import ConstraintViolationError, NotFoundError, PinnedKeyframeError
from jli.store import Store

from jli.schemas.keyframe_schema import KeyframeMove
from jli.schemas.label_schema import LabelCreate, LabelOut
from jli.schemas.media_schema import DescriptionUpdate


router = APIRouter(prefix="/keyframes", tags=["Keyframes"])


# =====================================================================
# MOVE KEYFRAME
# =====================================================================
@router.put("/{keyframe_id}", status_code=204)
def move_keyframe(
    keyframe_id: RowId,
    payload: KeyframeMove,
    store: Store = Depends(get_store),
):
    try:
        store.update_keyframe_timestamp(keyframe_id, payload.timestamp_ms)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Keyframe not found")
    except PinnedKeyframeError:
        raise HTTPException(status_code=403, detail="Cannot move pinned keyframe")
    except ConstraintViolationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(status_code=204)


# =====================================================================
# DELETE KEYFRAME
# =====================================================================
@router.delete("/{keyframe_id}", status_code=204)
def delete_keyframe(keyframe_id: RowId, store: Store = Depends(get_store)):
    try:
        store.delete_keyframe(keyframe_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Keyframe not found")
    except PinnedKeyframeError:
        raise HTTPException(status_code=403, detail="Cannot delete pinned keyframe")
    return Response(status_code=204)


# =====================================================================
# KEYFRAME LABELS
# =====================================================================
@router.post("/{keyframe_id}/labels", response_model=LabelOut, status_code=201)
def add_keyframe_label(
    keyframe_id: RowId,
    payload: LabelCreate,
    store: Store = Depends(get_store),
):
    try:
        return store.add_label_to_keyframe(keyframe_id, payload.name)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Keyframe not found")


@router.delete("/{keyframe_id}/labels/{label_id}", status_code=204)
def remove_keyframe_label(
    keyframe_id: RowId,
    label_id: RowId,
    store: Store = Depends(get_store),
):
    store.detach_label_from_keyframe(keyframe_id, label_id)
    return Response(status_code=204)


# =====================================================================
# KEYFRAME DESCRIPTION (allowed on the pinned keyframe too)
# =====================================================================
@router.put("/{keyframe_id}/description", status_code=204)
def update_keyframe_description(
    keyframe_id: RowId,
    payload: DescriptionUpdate,
    store: Store = Depends(get_store),
):
    try:
        store.update_keyframe_description(keyframe_id, payload.description)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Keyframe not found")
    return Response(status_code=204)
