from pydantic import BaseModel, field_validator


# ------------------------------------------------------
# LABEL OUTPUT
# ------------------------------------------------------
class LabelOut(BaseModel):
    id: int
    name: str

    model_config = {
        "from_attributes": True
    }


# ------------------------------------------------------
# ATTACH LABEL (by name, created on first use)
# ------------------------------------------------------
class LabelCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label name must not be blank")
        return v
