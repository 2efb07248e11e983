"""
Core ML Components

Contains model loading, preprocessing and the inference pipeline for the
dog vs cat classifier.
"""
from .model_loader import ModelLoader, ModelState
from .inference import InferenceEngine
from .decision import decide, format_confidence

__all__ = ['ModelLoader', 'ModelState', 'InferenceEngine', 'decide', 'format_confidence']
