"""Application factory."""

import json
import logging
import os
import time
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config, validate_config
from models import db
from routes.admin import admin_bp
from routes.auth import auth_bp
from storage import OtpStore, StoreHandle
from utils.errors import ServiceUnavailableError
from utils.mailer import build_mailer
from utils.sessions import ServerSideSessionInterface

migrate = Migrate()


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    validate_config(app.config)
    _configure_logging(app)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    app.session_interface = ServerSideSessionInterface()

    store = StoreHandle(db)
    store.init_app(app)
    app.extensions["otp_store"] = OtpStore(
        ttl_seconds=app.config["OTP_TTL_SECONDS"],
        length=app.config["OTP_LENGTH"],
    )
    app.extensions["otp_mailer"] = build_mailer(app.config)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        try:
            store.users()
        except ServiceUnavailableError:
            return jsonify({"status": "starting"}), 503
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    with app.app_context():
        store.bootstrap(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(getattr(logging, level, logging.INFO))


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_started = time.perf_counter()

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        started = g.get("request_started")
        if started is not None:
            app.logger.info(
                "%s %s -> %s (%.1f ms) [%s]",
                request.method,
                request.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
                request_id,
            )
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "message": error.description,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "error": "Internal Server Error",
            "message": "Server error",
        }
        response = jsonify(payload)
        response.status_code = 500
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
