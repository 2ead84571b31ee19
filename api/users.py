from __future__ import annotations

from flask import Blueprint

from models.schemas.user import UserOutSchema, UserUpdateSchema
from models.user import Role
from utils.decorators import MethodRoles, roles_required
from utils.exceptions import NotFound

from .errors import app_response
from .params import parse_id, request_payload
from .services import get_service

bp = Blueprint("users", __name__)

ADMIN_ONLY = MethodRoles.of(
    get=[Role.ADMIN],
    create=[Role.ADMIN],
    update=[Role.ADMIN],
    delete=[Role.ADMIN],
)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


@bp.get("/users")
@roles_required(ADMIN_ONLY)
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: User Found }
      401: { description: Unauthorize }
      404: { description: User Not Found }
    """
    users = get_service("user_store").list()
    if not users:
        return app_response("User Not Found", 404)
    return app_response("User Found", 200, user_list_out_schema.dump(users))


@bp.get("/users/<user_id>")
@roles_required(ADMIN_ONLY)
def get_user(user_id: str):
    """
    Get one user - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: integer
        required: true
    responses:
      200: { description: User Found }
      400: { description: Invalid user id }
      404: { description: User Not Found }
    """
    uid = parse_id(user_id)
    if uid is None:
        return app_response("Invalid user id", 400)
    user = get_service("user_store").find_by_id(uid)
    if user is None:
        return app_response("User Not Found", 404)
    return app_response("User Found", 200, user_out_schema.dump(user))


@bp.route("/users/<user_id>", methods=["PATCH", "PUT"])
@roles_required(ADMIN_ONLY)
def update_user(user_id: str):
    """
    Update a user's profile or role - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: user_id
        type: integer
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            name: { type: string }
            email: { type: string }
            role: { type: string, enum: [admin, member] }
            avatar: { type: string }
    responses:
      200: { description: User updated }
      404: { description: User Not Found }
      409: { description: Conflict }
    """
    uid = parse_id(user_id)
    if uid is None:
        return app_response("Invalid user id", 400)
    fields = user_update_schema.load(request_payload())
    if "role" in fields:
        fields["role"] = Role(fields["role"])
    try:
        user = get_service("user_store").update(uid, fields)
    except NotFound:
        return app_response("User Not Found", 404)
    return app_response("User updated", 200, user_out_schema.dump(user))


@bp.delete("/users/<user_id>")
@roles_required(ADMIN_ONLY)
def delete_user(user_id: str):
    """
    Delete a user - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: integer
        required: true
    responses:
      200: { description: User deleted }
      404: { description: User Not Found }
    """
    uid = parse_id(user_id)
    if uid is None:
        return app_response("Invalid user id", 400)
    if not get_service("user_store").delete(uid):
        return app_response("User Not Found", 404)
    return app_response("User deleted", 200)
