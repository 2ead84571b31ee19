from __future__ import annotations

from flask import Blueprint, request

from utils.decorators import jwt_required

from .errors import app_response
from .services import get_service

bp = Blueprint("surahs", __name__)

VERSE_QUERY_PARAMS = ("page", "per_page", "words", "translations", "fields")


@bp.get("/surahs")
@jwt_required()
def list_surahs():
    """
    List surahs (chapters) from the Quran Foundation content API
    ---
    tags:
      - Surahs
    security:
      - Bearer: []
    responses:
      200: { description: Surahs fetched successfully }
      401: { description: Unauthorize }
      502: { description: Quran Foundation API is unavailable }
    """
    chapters = get_service("quran_client").fetch_chapters()
    return app_response("Surahs fetched successfully", 200, chapters)


@bp.get("/surahs/<int:chapter_number>/verses")
@jwt_required()
def list_verses(chapter_number: int):
    """
    Verses of one surah
    ---
    tags:
      - Surahs
    security:
      - Bearer: []
    parameters:
      - in: path
        name: chapter_number
        type: integer
        required: true
      - in: query
        name: page
        type: integer
      - in: query
        name: per_page
        type: integer
    responses:
      200: { description: Verses fetched successfully }
      400: { description: Invalid chapter number }
    """
    if not 1 <= chapter_number <= 114:
        return app_response("Invalid chapter number", 400)
    params = {k: request.args[k] for k in VERSE_QUERY_PARAMS if k in request.args}
    verses = get_service("quran_client").fetch_verses_by_chapter(chapter_number, **params)
    return app_response("Verses fetched successfully", 200, verses)
