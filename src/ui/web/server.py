"""
Web server — Flask app factory for the simulator API.

Creates and configures the Flask application: the JSON blueprint
under /api, response headers, and JSON error pages.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from src.core.models.settings import Settings

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /api/health",
    "GET /api/catalog",
    "POST /api/simulate",
    "POST /api/instructions",
    "POST /api/preflight",
    "POST /api/analyze",
]

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-Simulation-Warning": "EDUCATIONAL-SIMULATION-ONLY",
}


def create_app(settings: Settings | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Runtime settings. Defaults to ``Settings()``.

    Returns:
        Configured Flask application.
    """
    settings = settings or Settings()

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["EXPOSE_ERRORS"] = settings.expose_errors

    from src.ui.web.routes_api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.after_request
    def _add_headers(response):  # type: ignore[no-untyped-def]
        for name, value in _SECURITY_HEADERS.items():
            response.headers[name] = value

        origins = settings.cors_origins
        origin = request.headers.get("Origin")
        if "*" in origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers.add("Vary", "Origin")
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    @app.errorhandler(404)
    @app.errorhandler(405)
    def _not_found(error):  # type: ignore[no-untyped-def]
        return jsonify({
            "error": "Endpoint not found",
            "availableEndpoints": AVAILABLE_ENDPOINTS,
        }), 404

    @app.errorhandler(500)
    def _server_error(error):  # type: ignore[no-untyped-def]
        original = getattr(error, "original_exception", None) or error
        logger.error("Server error: %s", original)
        message = str(original) if app.config["EXPOSE_ERRORS"] else "An error occurred"
        return jsonify({"error": "Internal server error", "message": message}), 500

    logger.info("Simulator app created (environment=%s)", settings.environment)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 3001,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting simulator API on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
