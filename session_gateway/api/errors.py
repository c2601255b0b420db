"""Error handlers for the application.

Every error leaves the gateway as ``{"error": ..., "message": ...}`` JSON.
401 responses always re-issue the APIUS challenge so clients know to
authenticate again.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from session_gateway.core.errors import ErrorKind, GatewayError
from .helpers import get_codec

logger = logging.getLogger(__name__)


def _challenge_headers() -> dict:
    return {"WWW-Authenticate": get_codec().encode_challenge()}


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(GatewayError)
    def gateway_error(error: GatewayError):
        """Render a classified session failure."""
        status = error.http_status
        if error.kind is ErrorKind.INTERNAL and error.status_code is None:
            logger.error("Session operation failed: %r", error, exc_info=getattr(error, "cause", None))
        headers = _challenge_headers() if status == 401 else {}
        return jsonify(error.to_dict()), status, headers

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": error.description}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 Unauthorized errors."""
        return (
            jsonify({"error": "Unauthorized", "message": "Authentication required"}),
            401,
            _challenge_headers(),
        )

    @app.errorhandler(403)
    def forbidden(error):
        """Handle 403 Forbidden errors."""
        return jsonify({"error": "Forbidden", "message": "Insufficient permissions"}), 403

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return (
            jsonify({"error": "Method Not Allowed", "message": "Method not supported for this resource"}),
            405,
            {"Allow": ", ".join(error.valid_methods or [])},
        )

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        logger.error("Internal error: %s", error, exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        logger.error("Unhandled exception: %s", error, exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
