"""
Recording: metadata for one recitation audio file.

The audio itself lives in object storage; only its URL is kept here.
"""
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel

FIRST_CHAPTER = 1
LAST_CHAPTER = 114


class Recording(BaseModel, Base):
    __tablename__ = "recordings"
    __table_args__ = (
        CheckConstraint(
            f"chapter_id IS NULL OR (chapter_id BETWEEN {FIRST_CHAPTER} AND {LAST_CHAPTER})",
            name="ck_recording_chapter_range",
        ),
    )

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    chapter_id = Column(Integer, nullable=True)

    user = relationship("User", back_populates="recordings")
