import logging

from flasgger import Swagger
from flask import Flask
from flask_cors import CORS

from .config import get_config, validate_config
from .errors import app_response, register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Recitation Tracker API",
        "version": "1.0.0",
        "description": "Accounts, authentication, recitation recordings, streaks and Quran content.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "The access token, optionally prefixed with `Bearer `.",
        }
    },
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def init_services(app: Flask, http=None) -> None:
    """
    Build the per-application service objects. Everything stateful (notably
    the upstream token cache) hangs off app.extensions, so a new app means a
    clean slate.
    """
    from models.stores import CredentialStore, RecordingStore, StreakStore, UserStore
    from utils.security import TokenService
    from .services.authentication import AuthenticationService
    from .services.quran_foundation import QuranFoundationClient
    from .services.recitation import RecitationService

    token_service = TokenService.from_config(app.config)
    user_store = UserStore(storage)
    credential_store = CredentialStore(storage)
    streak_store = StreakStore(storage)
    recording_store = RecordingStore(storage)
    quran_client = QuranFoundationClient.from_config(app.config, http=http)

    app.extensions["token_service"] = token_service
    app.extensions["user_store"] = user_store
    app.extensions["credential_store"] = credential_store
    app.extensions["authentication_service"] = AuthenticationService(user_store, credential_store, token_service)
    app.extensions["streak_store"] = streak_store
    app.extensions["recording_store"] = recording_store
    app.extensions["recitation_service"] = RecitationService(recording_store, streak_store)
    app.extensions["quran_client"] = quran_client
    app.extensions["upstream_token_cache"] = quran_client.token_cache


def create_app(config_name: str | None = None, http=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `http` is an optional httpx.Client used for upstream calls.
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    validate_config(app.config)
    configure_logging(app.config["LOG_LEVEL"])

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)
    init_services(app, http=http)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .surahs import bp as surahs_bp
    from .streaks import bp as streaks_bp
    from .recordings import bp as recordings_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(surahs_bp, url_prefix="/api/v1")
    app.register_blueprint(streaks_bp, url_prefix="/api/v1")
    app.register_blueprint(recordings_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return app_response("Welcome to Recitation Tracker API", result={"docs": "/apidocs/"})

    return app
