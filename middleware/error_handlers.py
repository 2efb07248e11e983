"""
Error Handlers

Centralized error handling for the application.
"""
import logging

from flask import current_app, jsonify

import config
from core.errors import ClassifierError

logger = logging.getLogger(__name__)


def _message(key):
    return config.get_message(key, current_app.config.get('LANGUAGE'))


def register_error_handlers(app):
    """Register all error handlers with the Flask app."""

    @app.errorhandler(ClassifierError)
    def classifier_error(error):
        """Handle user-facing classifier errors with their localized message."""
        return jsonify({
            'success': False,
            'error': _message(error.message_key)
        }), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(413)
    def request_entity_too_large(error):
        """Handle file too large errors."""
        return jsonify({
            'success': False,
            'error': _message('file_too_large')
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        """Handle internal server errors."""
        logger.error("Internal server error: %s", error)
        return jsonify({'error': 'Internal server error'}), 500
