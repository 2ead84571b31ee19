"""
Application error taxonomy.

Every error carries the HTTP status and the generic public message it maps to.
The error handlers in api.errors render them; internal details go to the log
only.
"""
from __future__ import annotations


class AppError(Exception):
    status = 500
    message = "something when wrong"

    def __init__(self, message: str | None = None, *, status: int | None = None):
        if message is not None:
            self.message = message
        if status is not None:
            self.status = status
        super().__init__(self.message)


class InvalidCredential(AppError):
    """Login failed. Never says which of username/password was wrong."""

    status = 400
    message = "username/password is wrong"


class InvalidToken(AppError):
    status = 401
    message = "invalid refresh token"


class Conflict(AppError):
    status = 409
    message = "username already taken"


class Unauthorized(AppError):
    """Gate failure: bad token and wrong role look the same to the caller."""

    status = 401
    message = "Unauthorize"


class NotFound(AppError):
    status = 404
    message = "Not Found"


class UpstreamError(AppError):
    status = 502
    message = "Bad Gateway - Quran Foundation API is unavailable"


class OAuthTokenError(UpstreamError):
    """The upstream token endpoint answered with a non-2xx status."""

    def __init__(self, upstream_status: int, detail: str | None = None):
        self.upstream_status = upstream_status
        self.detail = detail
        super().__init__()

    def __str__(self) -> str:
        return f"OAuth2 token request failed: {self.upstream_status}"


class UpstreamUnauthorized(UpstreamError):
    status = 401
    message = "Unauthorized access to Quran Foundation API"


class UpstreamConfigurationError(UpstreamError):
    status = 500
    message = "Server configuration error"
