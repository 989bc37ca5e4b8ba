from pydantic import BaseModel, Field
from typing import List

from jli.database import SQLITE_INT_MAX

from .label_schema import LabelOut


# ------------------------------------------------------
# KEYFRAME OUTPUT (with its labels)
# ------------------------------------------------------
class KeyframeOut(BaseModel):
    id: int
    media_file_id: int
    timestamp_ms: int
    description: str = ""
    pinned: bool = False

    labels: List[LabelOut] = []

    model_config = {
        "from_attributes": True
    }


# ------------------------------------------------------
# CREATE / MOVE KEYFRAME
# ------------------------------------------------------
class KeyframeCreate(BaseModel):
    timestamp_ms: int = Field(ge=0, le=SQLITE_INT_MAX)


class KeyframeMove(BaseModel):
    timestamp_ms: int = Field(ge=0, le=SQLITE_INT_MAX)
