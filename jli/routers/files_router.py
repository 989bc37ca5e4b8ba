# jli/routers/files_router.py

from fastapi import APIRouter, Depends, HTTPException, Response
from typing import List

from jli.database import RowId, get_store
from jli.errors import ConstraintViolationError, NotFoundError
from jli.store import Store

from jli.schemas.keyframe_schema import KeyframeCreate, KeyframeOut
from jli.schemas.label_schema import LabelCreate, LabelOut
from jli.schemas.media_schema import (
    CatalogueOut,
    DescriptionUpdate,
    FileViewOut,
)


router = APIRouter(tags=["Media Files"])


# =====================================================================
# CATALOGUE SUMMARY (entry point for the first file)
# =====================================================================
@router.get("/", response_model=CatalogueOut)
def catalogue(store: Store = Depends(get_store)):
    first = store.first_media_file()
    return CatalogueOut(
        total=store.media_file_count(),
        first_id=first.id if first else None,
    )


# =====================================================================
# VIEW FILE (labels, keyframes, navigation)
# =====================================================================
@router.get("/files/{file_id}", response_model=FileViewOut)
def view_file(file_id: RowId, store: Store = Depends(get_store)):
    media_file = store.get_media_file(file_id)
    if not media_file:
        raise HTTPException(status_code=404, detail="File not found")

    try:
        labels = store.labels_for_file(file_id)
        navigation = store.navigation(file_id)

        keyframes: List[KeyframeOut] = []
        if media_file.media_type.is_temporal:
            store.ensure_pinned_keyframe(file_id)
            keyframes = store.keyframes_for_file(file_id)
    except NotFoundError:
        # Deleted between the lookups above
        raise HTTPException(status_code=404, detail="File not found")

    return FileViewOut(
        file=media_file,
        labels=labels,
        keyframes=keyframes,
        navigation=navigation,
    )


# =====================================================================
# FILE LABELS
# =====================================================================
@router.post("/files/{file_id}/labels", response_model=LabelOut, status_code=201)
def add_file_label(
    file_id: RowId,
    payload: LabelCreate,
    store: Store = Depends(get_store),
):
    try:
        return store.add_label_to_file(file_id, payload.name)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="File not found")


@router.delete("/files/{file_id}/labels/{label_id}", status_code=204)
def remove_file_label(
    file_id: RowId,
    label_id: RowId,
    store: Store = Depends(get_store),
):
    store.detach_label_from_file(file_id, label_id)
    return Response(status_code=204)


# =====================================================================
# FILE DESCRIPTION
# =====================================================================
@router.put("/files/{file_id}/description", status_code=204)
def update_file_description(
    file_id: RowId,
    payload: DescriptionUpdate,
    store: Store = Depends(get_store),
):
    try:
        store.update_media_description(file_id, payload.description)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    return Response(status_code=204)


# =====================================================================
# CREATE KEYFRAME
# =====================================================================
@router.post("/files/{file_id}/keyframes", response_model=KeyframeOut, status_code=201)
def create_keyframe(
    file_id: RowId,
    payload: KeyframeCreate,
    store: Store = Depends(get_store),
):
    try:
        return store.create_keyframe(file_id, payload.timestamp_ms)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    except ConstraintViolationError as e:
        raise HTTPException(status_code=409, detail=str(e))
