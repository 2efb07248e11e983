"""
Health Check Routes

Endpoints for checking API health and model status.
"""
import logging

from flask import Blueprint, jsonify, current_app

health_bp = Blueprint('health', __name__)
logger = logging.getLogger(__name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON response with status and model loading state
    """
    logger.debug("Health check endpoint called")
    classification_service = current_app.config['CLASSIFICATION_SERVICE']

    return jsonify({
        'status': 'healthy',
        'model_state': classification_service.model_state.value,
        'model_loaded': classification_service.is_model_loaded(),
        'device': classification_service.get_device_info()
    })
