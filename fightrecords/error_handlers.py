from flask import Blueprint, current_app, jsonify
from flask_wtf.csrf import CSRFError

from .errors import AppError, NotFoundError, RecordsPipelineError, ValidationError

error_handlers_bp = Blueprint("error_handlers", __name__)


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors with a JSON body."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(RecordsPipelineError)
def handle_pipeline_error(error):
    """Handles a records run that aborted on a query or commit failure."""
    current_app.logger.error(f"Records Pipeline Error: {error.message}")
    return jsonify({"success": False, "error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    current_app.logger.error(f"Application Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return jsonify({"error": "Not found."}), 404


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return jsonify({"error": "Internal server error."}), 500


@error_handlers_bp.app_errorhandler(CSRFError)
def handle_csrf_error(e):
    """Handles CSRF errors on form posts."""
    current_app.logger.warning(f"CSRF Error: {e.description}")
    return jsonify({"error": e.description}), 400
