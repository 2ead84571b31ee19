"""
Streaks blueprint. Every verb is open to admins and members; members only
ever see and change their own streak.
"""
from __future__ import annotations

from flask import Blueprint, g
from marshmallow import ValidationError

from models.schemas.streak import StreakCreateSchema, StreakOutSchema, StreakUpdateSchema
from models.user import Role
from utils.decorators import MethodRoles, roles_required

from .errors import app_response
from .params import parse_id, request_payload, scoped_user_id
from .services import get_service

bp = Blueprint("streaks", __name__)

EVERYONE = [Role.ADMIN, Role.MEMBER]
STREAK_ROLES = MethodRoles.of(get=EVERYONE, create=EVERYONE, update=EVERYONE, delete=EVERYONE)

STREAK_NOT_FOUND = "Streak Not Found"

streak_create_schema = StreakCreateSchema()
streak_update_schema = StreakUpdateSchema()
streak_out_schema = StreakOutSchema()
streak_list_out_schema = StreakOutSchema(many=True)


def visible_streak(raw_id: str):
    """(streak, error response); the streak is None when missing or owned by someone else."""
    streak_id = parse_id(raw_id)
    if streak_id is None:
        return None, app_response("Invalid streak id", 400)
    streak = get_service("streak_store").find_by_id(streak_id)
    owner = scoped_user_id()
    if streak is None or (owner is not None and streak.user_id != owner):
        return None, app_response(STREAK_NOT_FOUND, 404)
    return streak, None


@bp.get("/streaks/user")
@roles_required(STREAK_ROLES)
def caller_streak():
    """
    The caller's own streak
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    responses:
      200: { description: Streak Found }
      401: { description: Unauthorize }
      404: { description: Streak Not Found }
    """
    streak = get_service("streak_store").find_by_user(g.current_user.id)
    if streak is None:
        return app_response(STREAK_NOT_FOUND, 404)
    return app_response("Streak Found", 200, streak_out_schema.dump(streak))


@bp.get("/streaks")
@roles_required(STREAK_ROLES)
def list_streaks():
    """
    List streaks (admins see all, members their own)
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    responses:
      200: { description: Streak Found }
      404: { description: Streak Not Found }
    """
    streaks = get_service("streak_store").list(user_id=scoped_user_id())
    if not streaks:
        return app_response(STREAK_NOT_FOUND, 404)
    return app_response("Streak Found", 200, streak_list_out_schema.dump(streaks))


@bp.get("/streaks/<streak_id>")
@roles_required(STREAK_ROLES)
def get_streak(streak_id: str):
    """
    Get one streak
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: streak_id
        type: integer
        required: true
    responses:
      200: { description: Streak Found }
      400: { description: Invalid streak id }
      404: { description: Streak Not Found }
    """
    streak, error = visible_streak(streak_id)
    if error:
        return error
    return app_response("Streak Found", 200, streak_out_schema.dump(streak))


@bp.post("/streaks")
@roles_required(STREAK_ROLES)
def create_streak():
    """
    Create a streak
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            user_id: { type: integer, description: "admins only; members always get their own" }
            current_streak: { type: integer }
            longest_streak: { type: integer }
            last_recorded_at: { type: integer }
    responses:
      201: { description: Streak created }
      404: { description: User Not Found }
      409: { description: streak already exists for this user }
      422: { description: Validation error }
    """
    data = streak_create_schema.load(request_payload())
    owner = scoped_user_id()
    if owner is not None:
        data["user_id"] = owner
    elif "user_id" not in data:
        raise ValidationError({"user_id": ["Missing data for required field."]})
    if get_service("user_store").find_by_id(data["user_id"]) is None:
        return app_response("User Not Found", 404)
    streak = get_service("streak_store").create(data)
    return app_response("Streak created", 201, streak_out_schema.dump(streak))


@bp.route("/streaks/<streak_id>", methods=["PATCH", "PUT"])
@roles_required(STREAK_ROLES)
def update_streak(streak_id: str):
    """
    Update a streak
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: streak_id
        type: integer
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            current_streak: { type: integer }
            longest_streak: { type: integer }
            last_recorded_at: { type: integer }
    responses:
      200: { description: Streak updated }
      404: { description: Streak Not Found }
    """
    streak, error = visible_streak(streak_id)
    if error:
        return error
    fields = streak_update_schema.load(request_payload())
    streak = get_service("streak_store").update(streak.id, fields)
    return app_response("Streak updated", 200, streak_out_schema.dump(streak))


@bp.delete("/streaks/<streak_id>")
@roles_required(STREAK_ROLES)
def delete_streak(streak_id: str):
    """
    Delete a streak
    ---
    tags:
      - Streaks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: streak_id
        type: integer
        required: true
    responses:
      200: { description: Streak deleted }
      404: { description: Streak Not Found }
    """
    streak, error = visible_streak(streak_id)
    if error:
        return error
    get_service("streak_store").delete(streak.id)
    return app_response("Streak deleted", 200, True)
