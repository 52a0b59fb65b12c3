"""Flask application setup and blueprint wiring."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from mediadesk.config import AppConfig, get_config
from mediadesk.routes import register_routes
from mediadesk.uploads.workflow import MAX_MEDIA_BYTES
from mediadesk.utils.workspace import register_workspace_cleanup

UPLOAD_LIMIT_BYTES = 10 * MAX_MEDIA_BYTES  # one batch of up to ten maximum-size files


def create_app(
    config: Optional[AppConfig] = None,
    http: Optional[requests.Session] = None,
) -> Flask:
    """Configure and return the Flask application instance.

    Args:
        config: Settings to use instead of the environment
        http: Session shared by every backend client
    """
    config = config or get_config()

    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": config.cors_origins}}, supports_credentials=True)

    app.config["SECRET_KEY"] = config.secret_key
    app.config["SESSION_COOKIE_SAMESITE"] = "Strict"
    app.config["SESSION_COOKIE_SECURE"] = config.is_production
    app.config["MAX_CONTENT_LENGTH"] = UPLOAD_LIMIT_BYTES
    app.config["APP_CONFIG"] = config
    app.config["HTTP_SESSION"] = http or requests.Session()

    if not config.is_production:
        app.logger.setLevel(logging.DEBUG)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(_exc):
        return jsonify(error="Upload is too large."), 413

    register_workspace_cleanup(app)
    register_routes(app)
    app.logger.info("Backend API at %s", config.api_url)

    return app
