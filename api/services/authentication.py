"""
Authentication workflow: register / login / refresh / current user / logout.

Each operation is one request-response; the only cross-request state is the
credential record (password hash + current refresh token).
"""
from __future__ import annotations

import logging
from typing import Dict

from models.stores import CredentialStore, UserStore
from models.user import Role, User
from utils.exceptions import Conflict, InvalidCredential, InvalidToken, NotFound
from utils.security import TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthenticationService:
    def __init__(self, users: UserStore, credentials: CredentialStore, tokens: TokenService):
        self.users = users
        self.credentials = credentials
        self.tokens = tokens

    def _issue_pair(self, user_id: int) -> Dict[str, str]:
        return {
            "access_token": self.tokens.create_access(user_id),
            "refresh_token": self.tokens.create_refresh(user_id),
        }

    def register(self, username: str, name: str, email: str, password: str, role: str | None = None) -> User:
        # fast path only; the unique constraint in the store is authoritative
        if self.users.find_by_username(username) is not None:
            logger.info("Username already taken: %s", username)
            raise Conflict()

        password_hash = hash_password(password)
        # user and credential record commit together or not at all
        user = self.users.create(
            {
                "username": username,
                "name": name,
                "email": email,
                "role": Role(role) if role else Role.MEMBER,
                "avatar": None,
            },
            commit=False,
        )
        self.credentials.create(
            {
                "user_id": user.id,
                "hash_password": password_hash,
                "refresh_token": None,
            }
        )
        logger.info("Registered user id=%s username=%s", user.id, user.username)
        return user

    def login(self, username: str, password: str) -> Dict[str, str]:
        user = self.users.find_by_username(username)
        record = self.credentials.find_active(user.id) if user else None
        if record is None or not verify_password(record.hash_password, password):
            logger.warning("Someone has failed to log in with the username: %s", username)
            raise InvalidCredential()

        pair = self._issue_pair(user.id)
        # overwriting revokes whatever refresh token was issued before
        self.credentials.update(record.id, {"refresh_token": pair["refresh_token"]})
        logger.info("Someone has successfully logged in with the username %s", username)
        return pair

    def refresh(self, refresh_token: str) -> Dict[str, str]:
        user_id = TokenService.subject_id(self.tokens.validate_refresh(refresh_token))
        if user_id is None:
            raise InvalidToken()

        record = self.credentials.find_active(user_id)
        if record is None or record.refresh_token is None or record.refresh_token != refresh_token:
            logger.warning("Rejected refresh token for user id=%s", user_id)
            raise InvalidToken()

        pair = self._issue_pair(user_id)
        self.credentials.update(record.id, {"refresh_token": pair["refresh_token"]})
        return pair

    def current_user(self, access_token: str) -> User:
        """Caller must be behind the bearer-validity gate."""
        user = self.users.find_by_token(access_token)
        if user is None:
            raise NotFound("user not found")
        return user

    def logout(self, access_token: str) -> None:
        """
        Clear the stored refresh token. The access token itself stays valid
        until it expires; logout only removes refresh capability.
        """
        user_id = TokenService.subject_id(TokenService.decode(access_token))
        record = self.credentials.find_active(user_id)
        if record is None:
            logger.info("Logout for user id=%s without a credential record", user_id)
            return
        self.credentials.update(record.id, {"refresh_token": None})
