from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from jli.models.media import MediaType

from .label_schema import LabelOut
from .keyframe_schema import KeyframeOut


# -----------------------------------------------------
# MEDIA FILE OUTPUT
# -----------------------------------------------------
class MediaFileOut(BaseModel):
    id: int
    path: str
    media_type: MediaType
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# -----------------------------------------------------
# NAVIGATION (alphabetical, wraps at both ends)
# -----------------------------------------------------
class NavigationOut(BaseModel):
    prev_id: int
    next_id: int
    index: int      # 1-based rank by path
    total: int


# -----------------------------------------------------
# UPDATE DESCRIPTION (files and keyframes)
# -----------------------------------------------------
class DescriptionUpdate(BaseModel):
    description: str


# -----------------------------------------------------
# FULL FILE VIEW
# -----------------------------------------------------
class FileViewOut(BaseModel):
    file: MediaFileOut
    labels: List[LabelOut] = []
    keyframes: List[KeyframeOut] = []
    navigation: NavigationOut


# -----------------------------------------------------
# CATALOGUE SUMMARY
# -----------------------------------------------------
class CatalogueOut(BaseModel):
    total: int
    first_id: Optional[int] = None
