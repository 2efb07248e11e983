"""
Configuration constants for the dog vs cat classifier.

Values with an environment variable can be overridden at startup; tests pass
overrides to ``create_app`` instead.
"""
import os
from pathlib import Path

# Model artifact (TorchScript archive: graph + weights)
MODEL_PATH = Path(os.getenv('MODEL_PATH', 'models/dog_cat_classifier.pt'))
MODEL_DOWNLOAD_URL = os.getenv('MODEL_DOWNLOAD_URL') or None

# Input contract of the trained model
INPUT_SIZE = (100, 100)  # (height, width)
INPUT_SHAPE = (1, INPUT_SIZE[0], INPUT_SIZE[1], 1)

# Decision rule
DECISION_THRESHOLD = 0.5
POSITIVE_LABEL = 'Dog'
NEGATIVE_LABEL = 'Cat'

# File upload limit
MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB

LANGUAGE = os.getenv('APP_LANGUAGE', 'en')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOAD_MODEL_IN_BACKGROUND = True
SESSION_IDLE_TIMEOUT = int(os.getenv('SESSION_IDLE_TIMEOUT', 3600))  # seconds
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

MESSAGES = {
    'en': {
        'title': 'Dog vs Cat Prediction',
        'subtitle': 'Upload a photo and press the prediction button to find out whether it is a dog or a cat',
        'select_photo': 'Select a photo',
        'get_prediction': 'Get prediction',
        'analyzing': 'Analyzing image',
        'preview_placeholder': 'The image will appear here',
        'preview_alt': 'Preview',
        'confidence_label': 'Confidence',
        'model_not_ready': 'The model is not ready yet. Try again in a few seconds.',
        'no_image': 'First select a picture of a dog or a cat.',
        'inference_failed': 'The image could not be processed. Try a different one.',
        'prediction_in_progress': 'A prediction is already running.',
        'unsupported_media_type': 'Only image files can be uploaded.',
        'file_too_large': 'File too large. Maximum size is 16 MB.',
        'model_loading': 'Loading model...',
        'model_ready': 'Model loaded and ready to use',
        'model_failed': 'The model could not be loaded.',
    },
    'es': {
        'title': 'Predicción de Perros guau guau vs Gatos miau miau',
        'subtitle': 'Subir foto y presionar en el botón predecir para saber si es guau guau o miau miau',
        'select_photo': 'Selecciona una foto',
        'get_prediction': 'Obtener predicción',
        'analyzing': 'Analizando imagen',
        'preview_placeholder': 'La imagen aparecerá aquí',
        'preview_alt': 'Vista previa',
        'confidence_label': 'Confianza',
        'model_not_ready': 'El modelo aún no está listo. Intenta nuevamente en unos segundos.',
        'no_image': 'Primero selecciona una imagen de perro o gato.',
        'inference_failed': 'No se pudo procesar la imagen. Prueba con otra distinta.',
        'prediction_in_progress': 'Ya hay una predicción en curso.',
        'unsupported_media_type': 'Solo se pueden subir imágenes.',
        'file_too_large': 'El archivo es demasiado grande. El máximo es 16 MB.',
        'model_loading': 'Cargando modelo...',
        'model_ready': 'Modelo cargado y listo para usar',
        'model_failed': 'No se pudo cargar el modelo.',
    },
}


def get_message(key, language=None):
    """Look up a localized message, falling back to English."""
    messages = MESSAGES.get(language or LANGUAGE, MESSAGES['en'])
    return messages.get(key, MESSAGES['en'][key])
