import logging

from flask import jsonify
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from utils.exceptions import AppError

logger = logging.getLogger(__name__)

SOMETHING_WHEN_WRONG = "something when wrong"


def app_response(message: str, status: int = 200, result=None):
    """Uniform envelope: {"message": ..., "result": ...} with the HTTP status."""
    return jsonify({"message": message, "result": result}), status


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if err.status >= 500:
            logger.error("%s: %s", err.__class__.__name__, err, exc_info=err.__cause__ or err)
        else:
            logger.info("%s: %s", err.__class__.__name__, err)
        return app_response(err.message, err.status)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return app_response("Invalid input", 422, result=err.messages)

    # Unique constraint races that slipped past a store
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.warning("Integrity error: %s", getattr(err, "orig", err))
        return app_response("Conflict", 409)

    # Werkzeug HTTPExceptions keep their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return app_response(err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return app_response(SOMETHING_WHEN_WRONG, 500)
