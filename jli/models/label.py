from sqlalchemy import Table, Column, Integer, String, ForeignKey

from jli.database import Base

# Join tables: many-to-many between labels and media files / keyframes
media_labels = Table(
    "media_labels",
    Base.metadata,
    Column("media_file_id", Integer, ForeignKey("media_files.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", Integer, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)

keyframe_labels = Table(
    "keyframe_labels",
    Base.metadata,
    Column("keyframe_id", Integer, ForeignKey("keyframes.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", Integer, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)


class Label(Base):
    __tablename__ = "labels"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Natural key, case-sensitive as stored
    name = Column(String, nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Label {self.name}>"
