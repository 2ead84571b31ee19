"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Token operations never raise: failures come back as None so callers branch
on the result.
"""
from __future__ import annotations

import logging
import time
import uuid
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

logger = logging.getLogger(__name__)

ph = PasswordHasher()

ACCESS_TOKEN_EXPIRES = timedelta(hours=6)
REFRESH_TOKEN_EXPIRES = timedelta(days=7)


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2 (salt and parameters are embedded)
    """
    return ph.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Verify a plaintext password against an Argon2 hash.

    Mismatches, malformed hashes and any other hashing failure all come back
    as False.
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except Exception:
        logger.warning("Password hash could not be verified", exc_info=True)
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def strip_bearer(value: str | None) -> str:
    """Raw token from an Authorization header; the `Bearer ` prefix is optional."""
    value = (value or "").strip()
    if value[:7].lower() == "bearer ":
        return value[7:].strip()
    return value


class TokenService:
    """Issues and validates access / refresh JWTs signed with separate HMAC secrets."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        issuer: str,
        audience: str,
        algorithm: str = "HS256",
        access_expires: timedelta = ACCESS_TOKEN_EXPIRES,
        refresh_expires: timedelta = REFRESH_TOKEN_EXPIRES,
        clock: Callable[[], float] = time.time,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self._clock = clock

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            config["JWT_ACCESS_SECRET"],
            config["JWT_REFRESH_SECRET"],
            issuer=config["JWT_ISSUER"],
            audience=config["JWT_AUDIENCE"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_expires=config.get("ACCESS_TOKEN_EXPIRES", ACCESS_TOKEN_EXPIRES),
            refresh_expires=config.get("REFRESH_TOKEN_EXPIRES", REFRESH_TOKEN_EXPIRES),
        )

    def _sign(self, subject_id, secret: str, lifetime: timedelta) -> str:
        now = int(self._clock())
        payload = {
            "sub": str(subject_id),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + int(lifetime.total_seconds()),
            "jti": generate_jti(),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token: str, secret: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(
                strip_bearer(token),
                secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError:
            return None

    def create_access(self, subject_id) -> str:
        return self._sign(subject_id, self._access_secret, self.access_expires)

    def create_refresh(self, subject_id) -> str:
        return self._sign(subject_id, self._refresh_secret, self.refresh_expires)

    def validate_access(self, token: str | None) -> Optional[Dict[str, Any]]:
        """Claims if signature, expiry, issuer and audience check out, else None."""
        if not token:
            return None
        return self._verify(token, self._access_secret)

    def validate_refresh(self, token: str | None) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        return self._verify(token, self._refresh_secret)

    @staticmethod
    def decode(token: str | None) -> Optional[Dict[str, Any]]:
        """
        Read the claims WITHOUT checking signature or expiry.
        Only for locating a record whose lookup is gated elsewhere; never an
        authorization decision on its own.
        """
        token = strip_bearer(token)
        if not token:
            return None
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
        return claims if isinstance(claims, dict) else None

    @staticmethod
    def subject_id(claims: Optional[Dict[str, Any]]) -> Optional[int]:
        """Integer user id from the `sub` claim, or None."""
        if not claims:
            return None
        try:
            return int(claims.get("sub"))
        except (TypeError, ValueError):
            return None
