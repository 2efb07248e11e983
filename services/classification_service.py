"""
Classification Service

Business logic for dog vs cat classification: owns the model for the
lifetime of the process.
"""
import logging
import threading
from pathlib import Path

import config
from core import ModelLoader, ModelState, InferenceEngine
from core.errors import ModelNotReadyError
from utils import decode_image

logger = logging.getLogger(__name__)


class ClassificationService:
    """Service for handling image classification operations."""

    def __init__(self, model_path: Path, download_url=None, threshold=config.DECISION_THRESHOLD,
                 device=None):
        """
        Initialize classification service.

        Args:
            model_path: Path to the serialized model
            download_url: Optional URL to fetch the model from when missing
            threshold: Decision threshold for the "Dog" label
            device: Optional torch device override
        """
        self.model_path = Path(model_path)
        self.threshold = threshold
        self.model_loader = ModelLoader(self.model_path, device=device, download_url=download_url)
        self.inference_engine = None
        self._engine_lock = threading.Lock()

    def initialize_model(self, background=True):
        """
        Start loading the model. In the background the call returns at once
        and readiness is reported through ``model_state``.
        """
        if background:
            self.model_loader.load_async()
        else:
            self.model_loader.load()

    @property
    def model_state(self) -> ModelState:
        return self.model_loader.state

    def is_model_loaded(self):
        """Check if model is loaded."""
        return self.model_loader.is_ready

    def get_device_info(self):
        """Get device information."""
        return str(self.model_loader.device)

    def get_inference_engine(self):
        """
        Get the inference engine, creating it on first use.

        Raises:
            ModelNotReadyError: If the model hasn't finished loading
        """
        if not self.model_loader.is_ready:
            raise ModelNotReadyError()

        with self._engine_lock:
            if self.inference_engine is None:
                self.inference_engine = InferenceEngine(
                    self.model_loader.model,
                    self.model_loader.device,
                    threshold=self.threshold,
                )
        return self.inference_engine

    def classify(self, image_data):
        """
        Classify one encoded image.

        Args:
            image_data (bytes): Raw uploaded image bytes

        Returns:
            dict: Prediction with label, score and confidence

        Raises:
            ModelNotReadyError: If the model isn't ready
            ImageDecodeError: If the image can't be decoded
            InputShapeError: If preprocessing breaks the input contract
            RuntimeError: If the forward pass fails
        """
        engine = self.get_inference_engine()
        image = decode_image(image_data)
        return engine.predict(image)
