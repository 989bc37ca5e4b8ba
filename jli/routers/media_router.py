# jli/routers/media_router.py

import os

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse


router = APIRouter(prefix="/media", tags=["Media"])


# ==========================================================
# RESOLVE PATH INSIDE THE SCAN ROOT
# ==========================================================
def resolve_media_path(media_root: str, rel_path: str) -> str | None:
    """
    Absolute path for *rel_path* under *media_root*, or None if it escapes it.
    """
    root = os.path.abspath(media_root)
    target = os.path.abspath(os.path.join(root, rel_path))

    if os.path.commonpath([root, target]) != root:
        return None
    return target


# ==========================================================
# SERVE MEDIA FILE
# ==========================================================
@router.get("/{rel_path:path}")
def serve_media(rel_path: str, request: Request):
    if not rel_path:
        raise HTTPException(status_code=400, detail="Missing path")

    target = resolve_media_path(request.app.state.media_root, rel_path)
    if target is None:
        raise HTTPException(status_code=403, detail="Forbidden")

    if not os.path.isfile(target):
        raise HTTPException(status_code=404, detail="Media file not found")

    return FileResponse(target)
