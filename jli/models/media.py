import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship

from jli.database import Base
from jli.models.label import media_labels


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"

    @property
    def is_temporal(self) -> bool:
        return self in (MediaType.VIDEO, MediaType.AUDIO)


def utcnow() -> datetime:
    # Stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MediaFile(Base):
    __tablename__ = "media_files"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Relative to the scan root, sole ordering key for navigation
    path = Column(String, nullable=False, unique=True)

    media_type = Column(String, nullable=False)  # image / video / audio
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # -------------------------
    # RELATIONSHIPS
    # -------------------------

    keyframes = relationship(
        "Keyframe",
        back_populates="media_file",
        order_by="Keyframe.timestamp_ms",
        passive_deletes=True,
    )

    labels = relationship(
        "Label",
        secondary=media_labels,
        order_by="Label.name",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<MediaFile {self.id} {self.path}>"
