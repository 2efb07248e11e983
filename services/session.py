"""
Classifier Sessions

Per-browser state: the previewed upload, the last result and the error
banner. Sessions are mutated only through their own methods.
"""
import logging
import threading
import time
import uuid

import config
from core import ModelState
from core.errors import (
    ModelNotReadyError,
    NoImageSelectedError,
    PredictionInProgressError,
    UnsupportedMediaTypeError,
)
from utils import is_image_mimetype

logger = logging.getLogger(__name__)


class PreviewResource:
    """Transient handle to an uploaded image, released when superseded."""

    def __init__(self, data, mimetype, filename=None):
        self.id = uuid.uuid4().hex
        self.mimetype = mimetype
        self.filename = filename
        self._data = data
        self.released = False

    @property
    def data(self):
        if self.released:
            raise RuntimeError(f"Preview {self.id} has been released")
        return self._data

    @property
    def size(self):
        return 0 if self._data is None else len(self._data)

    def release(self):
        if not self.released:
            self._data = None
            self.released = True
            logger.debug("Released preview %s", self.id)


class ClassifierSession:
    """State of one browser session talking to the classifier."""

    def __init__(self, session_id, service, language=None):
        self.session_id = session_id
        self.service = service
        self.language = language or config.LANGUAGE
        self.preview = None
        self.result = None
        self.error_key = None
        self.is_predicting = False
        self.last_seen = time.monotonic()
        self._lock = threading.Lock()

    @property
    def error_message(self):
        if self.error_key is None:
            return None
        return config.get_message(self.error_key, self.language)

    @property
    def can_predict(self):
        return self.service.is_model_loaded() and self.preview is not None and not self.is_predicting

    def touch(self):
        self.last_seen = time.monotonic()

    def reset_feedback(self):
        self.result = None
        self.error_key = None

    def select_image(self, data, mimetype, filename=None):
        """
        Replace the previewed image. The previous preview is released and any
        prior result or error is cleared.

        Raises:
            UnsupportedMediaTypeError: If the upload isn't an image type
        """
        if not is_image_mimetype(mimetype):
            raise UnsupportedMediaTypeError()

        with self._lock:
            if self.preview is not None:
                self.preview.release()
            self.preview = PreviewResource(data, mimetype, filename)
            self.reset_feedback()
            logger.info("Session %s selected image %s (%d bytes)",
                        self.session_id, filename or self.preview.id, self.preview.size)
            return self.preview

    def _refuse(self, error):
        self.error_key = error.message_key
        raise error

    def run_prediction(self):
        """
        Classify the current preview.

        Returns:
            dict: The prediction result, or None if inference failed (the
            generic failure message is then set)

        Raises:
            ModelNotReadyError: Model not loaded yet; no inference performed
            NoImageSelectedError: Nothing uploaded; no inference performed
            PredictionInProgressError: Another prediction is in flight
        """
        with self._lock:
            if not self.service.is_model_loaded():
                self._refuse(ModelNotReadyError())
            if self.preview is None:
                self._refuse(NoImageSelectedError())
            if self.is_predicting:
                raise PredictionInProgressError()

            self.is_predicting = True
            self.reset_feedback()
            preview = self.preview
            data = preview.data

        try:
            result = self.service.classify(data)
        except Exception:
            logger.exception("Prediction failed for session %s", self.session_id)
            with self._lock:
                if self.preview is preview:
                    self.error_key = 'inference_failed'
            return None
        finally:
            with self._lock:
                self.is_predicting = False

        with self._lock:
            # A newer upload supersedes this result.
            if self.preview is preview:
                self.result = result
        return result

    def release(self):
        with self._lock:
            if self.preview is not None:
                self.preview.release()
                self.preview = None
            self.reset_feedback()

    def snapshot(self):
        """JSON-ready view of the session for the page."""
        state = self.service.model_state
        status_key = 'model_loading' if state is ModelState.UNLOADED else 'model_' + state.value
        return {
            'model_state': state.value,
            'model_status': config.get_message(status_key, self.language),
            'has_preview': self.preview is not None,
            'preview_id': self.preview.id if self.preview is not None else None,
            'is_predicting': self.is_predicting,
            'can_predict': self.can_predict,
            'result': self.result,
            'error': self.error_message,
        }


class SessionStore:
    """Thread-safe registry of classifier sessions keyed by session id."""

    def __init__(self, service, idle_timeout=config.SESSION_IDLE_TIMEOUT, language=None):
        self.service = service
        self.idle_timeout = idle_timeout
        self.language = language
        self._sessions = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, session_id):
        return session_id in self._sessions

    def get_or_create(self, session_id):
        self.prune_idle()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = ClassifierSession(session_id, self.service, language=self.language)
                self._sessions[session_id] = session
                logger.debug("Created session %s", session_id)
            session.touch()
            return session

    def discard(self, session_id):
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.release()
            logger.info("Closed session %s", session_id)
        return session is not None

    def prune_idle(self, now=None):
        """Release sessions idle longer than the timeout; returns how many."""
        if not self.idle_timeout:
            return 0
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [sid for sid, s in self._sessions.items()
                       if now - s.last_seen > self.idle_timeout and not s.is_predicting]
            sessions = [self._sessions.pop(sid) for sid in expired]
        for session in sessions:
            session.release()
        if sessions:
            logger.info("Released %d idle session(s)", len(sessions))
        return len(sessions)

    def close_all(self):
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.release()
