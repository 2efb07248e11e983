"""
Classifier Errors

User-facing error classes carry a message key (see ``config.MESSAGES``) and
the HTTP status code the API answers with.
"""


class ClassifierError(Exception):
    """Base class for errors reported to the user."""

    message_key = 'inference_failed'
    status_code = 500


class ModelNotReadyError(ClassifierError):
    """Prediction requested before the model finished loading."""

    message_key = 'model_not_ready'
    status_code = 503


class NoImageSelectedError(ClassifierError):
    """Prediction requested with nothing uploaded."""

    message_key = 'no_image'
    status_code = 400


class PredictionInProgressError(ClassifierError):
    message_key = 'prediction_in_progress'
    status_code = 409


class UnsupportedMediaTypeError(ClassifierError):
    message_key = 'unsupported_media_type'
    status_code = 415


class InferenceFailedError(ClassifierError):
    """Generic failure: decode, shape mismatch or forward pass."""

    message_key = 'inference_failed'
    status_code = 500


class ImageDecodeError(ValueError):
    """Uploaded bytes are not a decodable image."""


class InputShapeError(RuntimeError):
    """Preprocessed tensor does not match the model's input contract."""
