"""
Flask application for the Dog vs Cat Classifier - Local Development
"""
import atexit
import logging

from flask import Flask
from flask_cors import CORS

import config
from services import ClassificationService, SessionStore
from middleware import register_error_handlers
from routes import health_bp, classification_bp, pages_bp
from utils import setup_logging

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    """
    Build the Flask app and start loading the model.

    Args:
        overrides (dict): Config values replacing the defaults from config.py
    """
    app = Flask(__name__)

    app.config.update(
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        SECRET_KEY=config.SECRET_KEY,
        MODEL_PATH=config.MODEL_PATH,
        MODEL_DOWNLOAD_URL=config.MODEL_DOWNLOAD_URL,
        DECISION_THRESHOLD=config.DECISION_THRESHOLD,
        LANGUAGE=config.LANGUAGE,
        LOG_LEVEL=config.LOG_LEVEL,
        LOAD_MODEL_IN_BACKGROUND=config.LOAD_MODEL_IN_BACKGROUND,
        SESSION_IDLE_TIMEOUT=config.SESSION_IDLE_TIMEOUT,
        CORS_ORIGINS='http://localhost:3000',
    )
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config['LOG_LEVEL'])

    # CORS - Allow API requests from a separate frontend dev server
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    # The model is process-wide; sessions hold per-browser state
    classification_service = ClassificationService(
        app.config['MODEL_PATH'],
        download_url=app.config['MODEL_DOWNLOAD_URL'],
        threshold=app.config['DECISION_THRESHOLD'],
    )
    session_store = SessionStore(
        classification_service,
        idle_timeout=app.config['SESSION_IDLE_TIMEOUT'],
        language=app.config['LANGUAGE'],
    )
    app.config['CLASSIFICATION_SERVICE'] = classification_service
    app.config['SESSION_STORE'] = session_store

    # Register blueprints
    app.register_blueprint(pages_bp)
    app.register_blueprint(health_bp, url_prefix='/api')
    app.register_blueprint(classification_bp, url_prefix='/api')

    # Register error handlers
    register_error_handlers(app)

    classification_service.initialize_model(background=app.config['LOAD_MODEL_IN_BACKGROUND'])

    return app


if __name__ == '__main__':
    app = create_app()
    atexit.register(app.config['SESSION_STORE'].close_all)

    logger.info("Dog vs Cat Classifier - Local Development Server")
    logger.info("Page:    http://localhost:5000/")
    logger.info("Health:  http://localhost:5000/api/health")
    logger.info("Upload:  POST http://localhost:5000/api/upload")
    logger.info("Predict: POST http://localhost:5000/api/predict")

    try:
        app.run(debug=True, host='127.0.0.1', port=5000, use_reloader=False)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
