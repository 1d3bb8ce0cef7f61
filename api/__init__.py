from flask import Flask, current_app
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import DBStorage
from utils.metrics import HitCounter
from utils.session_manager import SessionManager

# Swagger: spec at /swagger.json, UI at /apidocs/, API routes only
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {"title": "Chirpy API", "version": "1.0.0", "description": "Accounts, sessions and chirps."},
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Access or refresh token as \"Bearer <token>\".",
        }
    },
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: rule.rule.startswith(("/api/", "/admin/")),
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def get_storage() -> DBStorage:
    return current_app.extensions["chirpy.storage"]


def get_sessions() -> SessionManager:
    return current_app.extensions["chirpy.sessions"]


def get_hits() -> HitCounter:
    return current_app.extensions["chirpy.hits"]


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Each app owns its storage, session manager and hit counter, so tests
    can run isolated instances side by side.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    app.config.update(overrides)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()
    app.extensions["chirpy.storage"] = storage
    app.extensions["chirpy.sessions"] = SessionManager(
        storage,
        app.config["JWT_SECRET"],
        access_expires=app.config["ACCESS_TOKEN_EXPIRES"],
        refresh_expires=app.config["REFRESH_TOKEN_EXPIRES"],
        issuer=app.config["JWT_ISSUER"],
    )
    app.extensions["chirpy.hits"] = HitCounter()

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .chirps import bp as chirps_bp
    from .admin import bp as admin_bp
    from .fileserver import bp as fileserver_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(users_bp, url_prefix="/api")
    app.register_blueprint(chirps_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(fileserver_bp, url_prefix="/app")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    return app
