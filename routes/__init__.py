"""
Routes Package

Blueprint modules for organizing the page and API endpoints.
"""
from .health import health_bp
from .classification import classification_bp
from .pages import pages_bp

__all__ = ['health_bp', 'classification_bp', 'pages_bp']
