"""
Utility Modules

Image decoding helpers and logging setup.
"""
from .image_utils import pil_to_numpy, decode_image, is_image_mimetype
from .logging_setup import setup_logging

__all__ = [
    'pil_to_numpy',
    'decode_image',
    'is_image_mimetype',
    'setup_logging',
]
