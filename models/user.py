from __future__ import annotations

import enum

from sqlalchemy import Column, Enum, String, Text
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Role(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class User(BaseModel, Base):
    """Principal: an authenticated user identity."""

    __tablename__ = "users"

    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    role = Column(
        Enum(Role, name="role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.MEMBER,
    )
    avatar = Column(Text, nullable=True)

    authentication = relationship(
        "Authentication",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    streak = relationship(
        "Streak",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    recordings = relationship(
        "Recording",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def role_name(self) -> str:
        return self.role.value if isinstance(self.role, Role) else str(self.role)
