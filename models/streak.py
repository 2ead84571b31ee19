"""
Streak: one row per user tracking consecutive days with a recitation.

- user_id is UNIQUE; a user has at most one streak
- last_recorded_at is the epoch second of the latest recitation, null before the first
"""
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Streak(BaseModel, Base):
    __tablename__ = "streaks"
    __table_args__ = (
        CheckConstraint("current_streak >= 0", name="ck_streak_current_non_negative"),
        CheckConstraint("longest_streak >= 0", name="ck_streak_longest_non_negative"),
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_recorded_at = Column(Integer, nullable=True)

    user = relationship("User", back_populates="streak")
