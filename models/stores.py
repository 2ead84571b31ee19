"""
Stores on top of DBStorage: users, credentials, streaks and recordings.

Uniqueness (username, email, one credential record and one streak per user)
is enforced by the database; a violation surfaces as utils.exceptions.Conflict.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from models.authentication import Authentication
from models.base_model import epoch_now
from models.recording import Recording
from models.streak import Streak
from models.user import User
from utils.exceptions import Conflict, NotFound
from utils.security import TokenService

logger = logging.getLogger(__name__)

USER_FIELDS = ("username", "email", "name", "role", "avatar")
STREAK_FIELDS = ("user_id", "current_streak", "longest_streak", "last_recorded_at")
RECORDING_FIELDS = ("user_id", "file_url", "note", "chapter_id")


def _assign(obj, fields: dict, allowed: Iterable[str]):
    for key in allowed:
        if key in fields:
            setattr(obj, key, fields[key])


class ModelStore:
    """Plain CRUD for one model; subclasses name the model, fields and conflict message."""

    model = None
    fields: Tuple[str, ...] = ()
    conflict_message: str | None = None

    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def _persist(self, commit: bool = True):
        try:
            if commit:
                self.storage.save()
            else:
                self.storage.flush()
        except IntegrityError as exc:
            logger.info("%s write rejected by constraint: %s", self.model.__name__, exc.orig)
            raise Conflict(self.conflict_message) from exc

    def find_by_id(self, record_id: int):
        return self.storage.get(self.model, record_id)

    def list(self) -> list:
        return self.session.query(self.model).order_by(self.model.id.asc()).all()

    def create(self, fields: dict, commit: bool = True):
        record = self.model()
        _assign(record, fields, self.fields)
        self.storage.new(record)
        self._persist(commit)
        return record

    def update(self, record_id: int, fields: dict):
        record = self.find_by_id(record_id)
        if record is None:
            raise NotFound(f"{self.model.__name__} with id {record_id} not found")
        _assign(record, fields, self.fields)
        record.updated_at = epoch_now()
        self._persist()
        return record

    def delete(self, record_id: int) -> bool:
        record = self.find_by_id(record_id)
        if record is None:
            return False
        self.storage.delete(record)
        self.storage.save()
        return True


class UserStore(ModelStore):
    model = User
    fields = USER_FIELDS
    conflict_message = "username or email already taken"

    def find_by_username(self, username: str) -> Optional[User]:
        return self.session.query(User).filter(User.username == username).first()

    def find_by_token(self, token: str | None) -> Optional[User]:
        """
        Resolve a user from the token's `sub` without verifying the token.
        Callers must already be behind the bearer-validity gate.
        """
        user_id = TokenService.subject_id(TokenService.decode(token))
        if user_id is None:
            return None
        return self.find_by_id(user_id)


class CredentialStore(ModelStore):
    model = Authentication
    fields = ("user_id", "hash_password", "refresh_token")
    conflict_message = "credential record already exists"

    def find_by_user(self, user_id: int) -> List[Authentication]:
        return (
            self.session.query(Authentication)
            .filter(Authentication.user_id == user_id)
            .order_by(Authentication.id.desc())
            .all()
        )

    def find_active(self, user_id: int | None) -> Optional[Authentication]:
        if user_id is None:
            return None
        records = self.find_by_user(user_id)
        return records[0] if records else None

    def create(self, fields: dict, commit: bool = True) -> Authentication:
        if not fields.get("hash_password"):
            raise ValueError("hash_password is required")
        return super().create(fields, commit=commit)


class StreakStore(ModelStore):
    model = Streak
    fields = STREAK_FIELDS
    conflict_message = "streak already exists for this user"

    def find_by_user(self, user_id: int) -> Optional[Streak]:
        return self.session.query(Streak).filter(Streak.user_id == user_id).first()

    def list(self, user_id: int | None = None) -> List[Streak]:
        query = self.session.query(Streak)
        if user_id is not None:
            query = query.filter(Streak.user_id == user_id)
        return query.order_by(Streak.id.asc()).all()


class RecordingStore(ModelStore):
    model = Recording
    fields = RECORDING_FIELDS
    conflict_message = "recording could not be saved"

    def list(self, user_id: int | None = None) -> List[Recording]:
        query = self.session.query(Recording)
        if user_id is not None:
            query = query.filter(Recording.user_id == user_id)
        return query.order_by(Recording.id.asc()).all()

    def list_by_user(self, user_id: int, page: int, limit: int) -> Tuple[List[Recording], int]:
        """Newest first; returns (rows for the page, total rows for the user)."""
        query = self.session.query(Recording).filter(Recording.user_id == user_id)
        total = query.count()
        rows = (
            query.order_by(Recording.created_at.desc(), Recording.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total
