import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Bad input reported straight back to the caller (HTTP 400)."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(err):
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
