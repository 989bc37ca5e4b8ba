from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from jli.database import Base
from jli.models.label import keyframe_labels


class Keyframe(Base):
    __tablename__ = "keyframes"

    id = Column(Integer, primary_key=True, autoincrement=True)

    media_file_id = Column(
        Integer,
        ForeignKey("media_files.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Offset from the start of the media
    timestamp_ms = Column(Integer, nullable=False)
    description = Column(Text, nullable=False, default="")

    # The origin marker at 0 ms; fixed at creation
    pinned = Column(Boolean, nullable=False, default=False)

    # -------------------------
    # RELATIONSHIPS
    # -------------------------

    media_file = relationship("MediaFile", back_populates="keyframes")

    labels = relationship(
        "Label",
        secondary=keyframe_labels,
        order_by="Label.name",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Keyframe {self.id} @{self.timestamp_ms}ms>"
