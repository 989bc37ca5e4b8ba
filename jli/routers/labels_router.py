# jli/routers/labels_router.py

from fastapi import APIRouter, Depends
from typing import List

from jli.database import get_store
from jli.store import Store
from jli.schemas.label_schema import LabelOut


router = APIRouter(prefix="/api/labels", tags=["Labels"])


# =====================================================================
# SEARCH LABELS (prefix, for autocomplete)
# =====================================================================
@router.get("", response_model=List[LabelOut])
def search_labels(q: str = "", store: Store = Depends(get_store)):
    if not q:
        return []
    return store.search_labels(q)
