"""Request parameter helpers shared by the resource blueprints."""
from __future__ import annotations

from typing import Optional, Tuple

from flask import abort, g, request

from models.user import Role

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def request_payload() -> dict:
    """JSON body, falling back to form fields."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def parse_id(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(DEFAULT_LIMIT)))
    except ValueError:
        abort(400, description="page and limit must be integers")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    return page, limit


def scoped_user_id() -> Optional[int]:
    """
    None for admins (every row is visible), otherwise the caller's id.
    Only meaningful behind roles_required, which sets g.current_user.
    """
    user = g.current_user
    if user.role_name == Role.ADMIN.value:
        return None
    return user.id
