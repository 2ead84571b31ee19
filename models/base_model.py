#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the recitation tracker.

- Integer identity primary key
- created_at / updated_at stored as whole seconds since epoch

Persistence goes through models.storage (DBStorage) and the stores in
models.stores.
"""

from __future__ import annotations

import time

from sqlalchemy import Column, Integer
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def epoch_now() -> int:
    return int(time.time())


class BaseModel:
    """Base mixin for all persistent models: id, created_at, updated_at."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(Integer, default=epoch_now, nullable=False)
    updated_at = Column(Integer, default=epoch_now, onupdate=epoch_now, nullable=False)

    def __init__(self, *args, **kwargs):
        """Attribute initialization via kwargs; timestamps default on insert."""
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
