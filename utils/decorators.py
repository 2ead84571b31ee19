"""
Request gates.

- jwt_required(): the Authorization header must carry a valid access token.
- roles_required(MethodRoles(...)): the caller, resolved from a verified access
  token, must hold a role allowed for the request's HTTP method.

Both fail closed with the same 401 body so callers cannot tell which check
failed.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import wraps
from typing import FrozenSet, Iterable, Optional

from flask import current_app, g, request

from api.errors import app_response
from models.user import Role, User
from utils.exceptions import Unauthorized
from utils.security import TokenService


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"


def _roles(values: Iterable) -> FrozenSet[str]:
    return frozenset(Role(v).value for v in values)


@dataclass(frozen=True)
class MethodRoles:
    """Allow-lists per verb: GET -> get, POST -> create, PATCH/PUT -> update, DELETE -> delete."""

    get: FrozenSet[str] = frozenset()
    create: FrozenSet[str] = frozenset()
    update: FrozenSet[str] = frozenset()
    delete: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, *, get=(), create=(), update=(), delete=()) -> "MethodRoles":
        return cls(_roles(get), _roles(create), _roles(update), _roles(delete))

    def roles_for(self, method: str) -> Optional[FrozenSet[str]]:
        """Allowed roles for `method`, or None for any verb outside the table."""
        try:
            verb = HttpMethod(method.upper())
        except ValueError:
            return None
        table = {
            HttpMethod.GET: self.get,
            HttpMethod.POST: self.create,
            HttpMethod.PATCH: self.update,
            HttpMethod.PUT: self.update,
            HttpMethod.DELETE: self.delete,
        }
        return table[verb]


def _unauthorized():
    return app_response(Unauthorized.message, Unauthorized.status)


def _raw_token() -> str:
    return request.headers.get("Authorization", "")


def resolve_principal(token: str) -> Optional[User]:
    """Verified identity: the token must validate before the user is loaded."""
    tokens: TokenService = current_app.extensions["token_service"]
    user_id = TokenService.subject_id(tokens.validate_access(token))
    if user_id is None:
        return None
    return current_app.extensions["user_store"].find_by_id(user_id)


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _raw_token()
            claims = current_app.extensions["token_service"].validate_access(token)
            if claims is None:
                return _unauthorized()
            g.access_token = token
            g.token_claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(rules: MethodRoles):
    """
    Allow access if the verified caller's role is in the allow-list for the
    request method. Unknown methods, missing users and wrong roles all get 401.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            allowed = rules.roles_for(request.method)
            if not allowed:
                return _unauthorized()

            token = _raw_token()
            user = resolve_principal(token)
            if user is None or user.role_name not in allowed:
                return _unauthorized()

            g.access_token = token
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
