from .classification_service import ClassificationService
from .session import ClassifierSession, PreviewResource, SessionStore

__all__ = ['ClassificationService', 'ClassifierSession', 'PreviewResource', 'SessionStore']
