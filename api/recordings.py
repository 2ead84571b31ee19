"""
Recordings blueprint: recitation audio metadata.

- GET    /recordings/user             caller's recordings, newest first, paginated
- POST   /recordings/confirm-upload   log a recitation for the caller (advances the streak)
- GET    /recordings, /recordings/<id>
- POST   /recordings
- PATCH|PUT, DELETE /recordings/<id>  admin only

Uploading the audio file itself happens against object storage, outside this API.
"""
from __future__ import annotations

import math

from flask import Blueprint, g
from marshmallow import ValidationError

from models.schemas.recording import (
    RecitationSchema,
    RecordingCreateSchema,
    RecordingOutSchema,
    RecordingUpdateSchema,
)
from models.schemas.streak import StreakOutSchema
from models.user import Role
from utils.decorators import MethodRoles, roles_required

from .errors import app_response
from .params import parse_id, parse_pagination, request_payload, scoped_user_id
from .services import get_service

bp = Blueprint("recordings", __name__)

RECORDING_ROLES = MethodRoles.of(
    get=[Role.ADMIN, Role.MEMBER],
    create=[Role.ADMIN, Role.MEMBER],
    update=[Role.ADMIN],
    delete=[Role.ADMIN],
)

RECORDING_NOT_FOUND = "Recording Not Found"

recording_create_schema = RecordingCreateSchema()
recitation_schema = RecitationSchema()
recording_update_schema = RecordingUpdateSchema()
recording_out_schema = RecordingOutSchema()
recording_list_out_schema = RecordingOutSchema(many=True)
streak_out_schema = StreakOutSchema()


def visible_recording(raw_id: str):
    recording_id = parse_id(raw_id)
    if recording_id is None:
        return None, app_response("Invalid recording id", 400)
    recording = get_service("recording_store").find_by_id(recording_id)
    owner = scoped_user_id()
    if recording is None or (owner is not None and recording.user_id != owner):
        return None, app_response(RECORDING_NOT_FOUND, 404)
    return recording, None


@bp.get("/recordings/user")
@roles_required(RECORDING_ROLES)
def caller_recordings():
    """
    The caller's recordings, newest first
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
    responses:
      200: { description: Found }
      400: { description: page and limit must be integers }
      401: { description: Unauthorize }
    """
    page, limit = parse_pagination()
    rows, total = get_service("recording_store").list_by_user(g.current_user.id, page, limit)
    result = {
        "data": recording_list_out_schema.dump(rows),
        "metadata": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }
    if not rows:
        return app_response("No recordings found", 200, result)
    return app_response("Found", 200, result)


@bp.post("/recordings/confirm-upload")
@roles_required(RECORDING_ROLES)
def confirm_upload():
    """
    Save metadata for an uploaded recitation and advance the caller's streak
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [file_url]
          properties:
            file_url: { type: string }
            note: { type: string }
            chapter_id: { type: integer, minimum: 1, maximum: 114 }
    responses:
      201: { description: Recording confirmed and saved successfully }
      422: { description: Validation error }
    """
    data = recitation_schema.load(request_payload())
    recording, streak = get_service("recitation_service").record(g.current_user.id, data)
    return app_response(
        "Recording confirmed and saved successfully",
        201,
        {"recording": recording_out_schema.dump(recording), "streak": streak_out_schema.dump(streak)},
    )


@bp.get("/recordings")
@roles_required(RECORDING_ROLES)
def list_recordings():
    """
    List recordings (admins see all, members their own)
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    responses:
      200: { description: Recording Found }
      404: { description: Recording Not Found }
    """
    recordings = get_service("recording_store").list(user_id=scoped_user_id())
    if not recordings:
        return app_response(RECORDING_NOT_FOUND, 404)
    return app_response("Recording Found", 200, recording_list_out_schema.dump(recordings))


@bp.get("/recordings/<recording_id>")
@roles_required(RECORDING_ROLES)
def get_recording(recording_id: str):
    """
    Get one recording
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: recording_id
        type: integer
        required: true
    responses:
      200: { description: Recording Found }
      400: { description: Invalid recording id }
      404: { description: Recording Not Found }
    """
    recording, error = visible_recording(recording_id)
    if error:
        return error
    return app_response("Recording Found", 200, recording_out_schema.dump(recording))


@bp.post("/recordings")
@roles_required(RECORDING_ROLES)
def create_recording():
    """
    Create a recording record (does not touch streaks)
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [file_url]
          properties:
            user_id: { type: integer, description: "admins only; members always get their own" }
            file_url: { type: string }
            note: { type: string }
            chapter_id: { type: integer, minimum: 1, maximum: 114 }
    responses:
      201: { description: Recording created }
      404: { description: User Not Found }
      422: { description: Validation error }
    """
    data = recording_create_schema.load(request_payload())
    owner = scoped_user_id()
    if owner is not None:
        data["user_id"] = owner
    elif "user_id" not in data:
        raise ValidationError({"user_id": ["Missing data for required field."]})
    if get_service("user_store").find_by_id(data["user_id"]) is None:
        return app_response("User Not Found", 404)
    recording = get_service("recording_store").create(data)
    return app_response("Recording created", 201, recording_out_schema.dump(recording))


@bp.route("/recordings/<recording_id>", methods=["PATCH", "PUT"])
@roles_required(RECORDING_ROLES)
def update_recording(recording_id: str):
    """
    Update a recording - admin
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: recording_id
        type: integer
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            file_url: { type: string }
            note: { type: string }
            chapter_id: { type: integer }
    responses:
      200: { description: Recording updated }
      404: { description: Recording Not Found }
    """
    recording, error = visible_recording(recording_id)
    if error:
        return error
    fields = recording_update_schema.load(request_payload())
    recording = get_service("recording_store").update(recording.id, fields)
    return app_response("Recording updated", 200, recording_out_schema.dump(recording))


@bp.delete("/recordings/<recording_id>")
@roles_required(RECORDING_ROLES)
def delete_recording(recording_id: str):
    """
    Delete a recording - admin
    ---
    tags:
      - Recordings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: recording_id
        type: integer
        required: true
    responses:
      200: { description: Recording deleted }
      404: { description: Recording Not Found }
    """
    recording, error = visible_recording(recording_id)
    if error:
        return error
    get_service("recording_store").delete(recording.id)
    return app_response("Recording deleted", 200, True)
