"""
Authentication (credential record): one row per user holding the Argon2
password hash and the currently valid refresh token.

- user_id is UNIQUE so "the active record" never depends on query order
- refresh_token is nullable; null means no refresh capability (logged out)
"""
from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Authentication(BaseModel, Base):
    __tablename__ = "authentications"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    hash_password = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)

    user = relationship("User", back_populates="authentication")

    def __repr__(self):
        return f"<Authentication user_id={self.user_id}>"
