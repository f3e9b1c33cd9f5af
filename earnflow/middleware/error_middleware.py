"""
Error Handling Middleware
Centralized error handling and logging
"""
import logging
from flask import request, jsonify
from werkzeug.exceptions import HTTPException
from earnflow.utils.validators import Helpers

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level: str = 'INFO'):
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


class StoreError(Exception):
    """Raised by the data-access layer when a read or write fails."""


class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def handle_validation_error(error_data) -> tuple:
        """Handle validation errors"""
        logger.warning("Validation error: %s", error_data)

        error_message = "Validation failed"
        if isinstance(error_data, dict) and 'errors' in error_data:
            error_message = "; ".join(error_data['errors'])
        elif isinstance(error_data, str):
            error_message = error_data

        return jsonify(Helpers.build_error_response(
            message=error_message,
            code="VALIDATION_ERROR"
        )), 400

    @staticmethod
    def handle_authentication_error(error_message: str = "Authentication failed") -> tuple:
        """Handle authentication errors"""
        logger.warning("Authentication error: %s", error_message)

        return jsonify(Helpers.build_error_response(
            message=error_message,
            code="AUTHENTICATION_ERROR"
        )), 401

    @staticmethod
    def handle_authorization_error(error_message: str = "Insufficient permissions") -> tuple:
        """Handle authorization errors"""
        logger.warning("Authorization error: %s", error_message)

        return jsonify(Helpers.build_error_response(
            message=error_message,
            code="AUTHORIZATION_ERROR"
        )), 403

    @staticmethod
    def handle_not_found_error(resource: str = "Resource") -> tuple:
        """Handle not found errors"""
        logger.info("Not found: %s", resource)

        return jsonify(Helpers.build_error_response(
            message=f"{resource} not found",
            code="NOT_FOUND"
        )), 404

    @staticmethod
    def handle_store_error(error: Exception) -> tuple:
        """Handle storage backend errors"""
        logger.error("Store error: %s", error)

        return jsonify(Helpers.build_error_response(
            message="Storage operation failed",
            code="STORE_ERROR"
        )), 500

    @staticmethod
    def handle_generic_error(error: Exception) -> tuple:
        """Handle generic errors"""
        logger.exception("Unexpected error on %s %s: %s", request.method, request.path, error)

        return jsonify(Helpers.build_error_response(
            message="An unexpected error occurred",
            code="INTERNAL_ERROR"
        )), 500


def register_error_handlers(app):
    """Register error handlers with Flask app"""

    @app.errorhandler(400)
    def handle_bad_request(error):
        return ErrorHandler.handle_validation_error("Bad request")

    @app.errorhandler(401)
    def handle_unauthorized(error):
        return ErrorHandler.handle_authentication_error("Unauthorized")

    @app.errorhandler(403)
    def handle_forbidden(error):
        return ErrorHandler.handle_authorization_error("Forbidden")

    @app.errorhandler(404)
    def handle_not_found(error):
        return ErrorHandler.handle_not_found_error("Endpoint")

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify(Helpers.build_error_response(
            message="Method not allowed",
            code="METHOD_NOT_ALLOWED"
        )), 405

    @app.errorhandler(StoreError)
    def handle_store_error(error):
        return ErrorHandler.handle_store_error(error)

    @app.errorhandler(Exception)
    def handle_unhandled_exception(error):
        if isinstance(error, HTTPException):
            return error
        return ErrorHandler.handle_generic_error(error)
