"""
Inference Module for the Dog vs Cat Classifier

Handles image preprocessing, model inference, and the threshold decision.
"""
import contextlib
import logging
import math
import threading
import time
from typing import Dict

import albumentations as A
import cv2
import numpy as np
import torch
from PIL import Image

import config
from .decision import decide, format_confidence
from .errors import InputShapeError

logger = logging.getLogger(__name__)


class InferenceEngine:
    """
    Handles the complete inference pipeline:
    1. Preprocess input image into a [1, 100, 100, 1] tensor
    2. Run one forward pass
    3. Threshold the scalar output
    """

    def __init__(self, model, device, threshold=config.DECISION_THRESHOLD):
        """
        Initialize InferenceEngine.

        Args:
            model (torch.jit.ScriptModule): Loaded model in eval mode
            device (torch.device): Device for inference
            threshold (float): Decision threshold for the positive label
        """
        self.model = model
        self.device = device
        self.threshold = threshold
        self.input_size = config.INPUT_SIZE
        self.input_shape = config.INPUT_SHAPE
        self.active_tensors = 0
        self._count_lock = threading.Lock()

        # Same interpolation as the training preprocessing
        self.resize = A.Resize(height=self.input_size[0], width=self.input_size[1],
                               interpolation=cv2.INTER_NEAREST)

    def preprocess(self, image):
        """
        Preprocess image for model input.

        Steps:
        1. Convert to grayscale (luminance)
        2. Resize to 100x100, nearest neighbour
        3. Normalize to [0, 1]
        4. Convert to tensor (1, 100, 100, 1)

        Args:
            image (np.ndarray or PIL.Image): Decoded input image

        Returns:
            torch.Tensor: Preprocessed image tensor

        Raises:
            InputShapeError: If the result does not match the model input shape
        """
        # Convert PIL Image to numpy if needed
        if isinstance(image, Image.Image):
            image = np.array(image)

        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)

        if image.ndim == 3:
            if image.shape[2] == 4:
                image = cv2.cvtColor(image, cv2.COLOR_RGBA2RGB)
            if image.shape[2] == 3:
                image = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
            elif image.shape[2] == 1:
                image = image[:, :, 0]

        image = self.resize(image=image)['image']
        if image.ndim == 3:
            image = image[:, :, 0]

        image = image.astype(np.float32) / 255.0

        # (H, W) -> (1, H, W, 1)
        image_tensor = torch.from_numpy(image).unsqueeze(0).unsqueeze(-1)

        if tuple(image_tensor.shape) != self.input_shape:
            raise InputShapeError(
                f"Expected input shape {list(self.input_shape)}, got {list(image_tensor.shape)}"
            )

        return image_tensor.to(self.device)

    @contextlib.contextmanager
    def input_tensor(self, image):
        """
        Scope the input tensor to one prediction; it is released on exit,
        whether or not inference succeeded.
        """
        tensor = self.preprocess(image)
        with self._count_lock:
            self.active_tensors += 1
        try:
            yield tensor
        finally:
            del tensor
            with self._count_lock:
                self.active_tensors -= 1
            if self.device.type == 'cuda':
                torch.cuda.empty_cache()

    def run_inference(self, image_tensor):
        """
        Run model inference on a preprocessed image.

        Args:
            image_tensor (torch.Tensor): Preprocessed image (1, 100, 100, 1)

        Returns:
            float: Probability of the positive class
            float: Inference time in milliseconds
        """
        start_time = time.time()

        with torch.no_grad():
            output = self.model(image_tensor)
            if output.numel() != 1:
                raise RuntimeError(f"Expected a single output value, got shape {list(output.shape)}")
            score = float(output.reshape(-1)[0].item())
            del output

        inference_time = (time.time() - start_time) * 1000

        if not math.isfinite(score):
            raise RuntimeError(f"Model produced a non-finite score: {score}")

        return score, inference_time

    def postprocess(self, score):
        """
        Turn the raw score into the reported result.

        Returns:
            dict: label, raw score as confidence and its percentage string
        """
        return {
            'score': score,
            'label': decide(score, self.threshold),
            'confidence': score,
            'confidence_text': format_confidence(score),
        }

    def predict(self, image) -> Dict:
        """
        Complete inference pipeline.

        Args:
            image (np.ndarray or PIL.Image): Decoded input image

        Returns:
            dict: {
                'score': Raw model output (float),
                'label': 'Dog' or 'Cat',
                'confidence': Raw score (float),
                'confidence_text': e.g. '87.3%',
                'inference_time': Time in milliseconds (float)
            }
        """
        with self.input_tensor(image) as image_tensor:
            score, inference_time = self.run_inference(image_tensor)

        result = self.postprocess(score)
        result['inference_time'] = inference_time
        logger.info("Prediction: %s (score=%.4f, %.1f ms)", result['label'], score, inference_time)
        return result
