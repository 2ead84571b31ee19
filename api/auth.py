"""
Authentication blueprint:
- POST   /auth/register
- POST   /auth/login
- POST   /auth/refresh
- GET    /auth/current_user
- DELETE /auth/logout

- Passwords are hashed with Argon2 (utils.security)
- Access tokens live 6h, refresh tokens 7d; both are HS256 JWTs with separate secrets
- The current refresh token is stored on the credential record, so a new
  login/refresh rotates it and logout revokes it
"""
from __future__ import annotations

from flask import Blueprint, g

from models.schemas.user import LoginSchema, RefreshSchema, RegisterSchema, UserOutSchema
from utils.decorators import jwt_required

from .errors import app_response
from .params import request_payload
from .services import get_service

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_out_schema = UserOutSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, name, email, password]
          properties:
            username: { type: string }
            name: { type: string }
            email: { type: string }
            password: { type: string }
            role: { type: string, enum: [admin, member] }
    responses:
      201:
        description: Created
      409:
        description: Username already taken
      422:
        description: Validation error
    """
    data = register_schema.load(request_payload())
    user = get_service("authentication_service").register(
        username=data["username"],
        name=data["name"],
        email=data["email"],
        password=data["password"],
        role=data.get("role"),
    )
    return app_response("register success", 201, user_out_schema.dump(user))


@bp.post("/login")
def login():
    """
    Login: returns access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: username/password is wrong
    """
    data = login_schema.load(request_payload())
    tokens = get_service("authentication_service").login(data["username"], data["password"])
    return app_response("login success", 200, tokens)


@bp.post("/refresh")
def refresh():
    """
    Exchange the current refresh token for a new access/refresh pair (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            refresh_token: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: invalid refresh token
    """
    data = refresh_schema.load(request_payload())
    tokens = get_service("authentication_service").refresh(data["refresh_token"])
    return app_response("refresh success", 200, tokens)


@bp.get("/current_user")
@jwt_required()
def current_user():
    """
    Current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorize
      404:
        description: user not found
    """
    user = get_service("authentication_service").current_user(g.access_token)
    return app_response("success", 200, user_out_schema.dump(user))


@bp.delete("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the stored refresh token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: logout success
      401:
        description: Unauthorize
    """
    get_service("authentication_service").logout(g.access_token)
    return app_response("logout success", 200)
