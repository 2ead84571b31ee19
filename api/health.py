from flask import Blueprint

from .errors import app_response

bp = Blueprint("health", __name__)


@bp.get("/healthcheck")
def healthcheck():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            message:
              type: string
              example: OK
            result:
              type: object
    """
    return app_response("OK")
