"""
Model Loader for the Dog vs Cat Classifier

Loads the serialized TorchScript model once per process and tracks its
readiness. Handles device detection (CPU/GPU) and optional download.
"""
import enum
import logging
import threading
from pathlib import Path

import torch

from download_model import download_model_if_needed

logger = logging.getLogger(__name__)


class ModelState(enum.Enum):
    UNLOADED = 'unloaded'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


class ModelLoader:
    """
    Loads and manages the classifier model.

    Attributes:
        model_path (Path): Path to the TorchScript archive
        device (torch.device): Device for inference (cuda/cpu)
        model (torch.jit.ScriptModule): Loaded model in eval mode, None until ready
        error (Exception): Cause of the last failed load, if any
    """

    def __init__(self, model_path, device=None, download_url=None):
        """
        Initialize ModelLoader. Nothing is read from disk until ``load``.

        Args:
            model_path (str or Path): Path to model archive (.pt file)
            device (torch.device): Device override, detected when omitted
            download_url (str): Where to fetch the model if the file is missing
        """
        self.model_path = Path(model_path)
        self.download_url = download_url
        self.device = device if device is not None else self._detect_device()
        self.model = None
        self.error = None

        self._state = ModelState.UNLOADED
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._in_progress = False
        self._thread = None

    def _detect_device(self):
        """
        Detect available device (CUDA GPU or CPU).

        Returns:
            torch.device: Device for inference
        """
        if torch.cuda.is_available():
            device = torch.device('cuda')
            logger.info("GPU detected: %s", torch.cuda.get_device_name(0))
        else:
            device = torch.device('cpu')
            logger.info("No GPU detected, using CPU")

        return device

    @property
    def state(self):
        return self._state

    @property
    def is_ready(self):
        return self._state is ModelState.READY

    def load(self):
        """
        Fetch and deserialize the model. Runs at most once per loader.

        Returns:
            torch.jit.ScriptModule: Loaded model in evaluation mode

        Raises:
            RuntimeError: If the model file can't be fetched or deserialized
        """
        with self._lock:
            if self._state is ModelState.READY:
                return self.model
            in_progress = self._in_progress
            if not in_progress:
                self._begin()

        if in_progress:
            # Another caller is loading; share its result.
            self._done.wait()
            if not self.is_ready:
                raise RuntimeError(f"Failed to load model: {str(self.error)}")
            return self.model

        return self._load_model()

    def _begin(self):
        self._in_progress = True
        self._state = ModelState.LOADING
        self._done.clear()

    def _load_model(self):
        logger.info("Loading model from %s", self.model_path)
        try:
            download_model_if_needed(self.model_path, self.download_url)
            model = torch.jit.load(str(self.model_path), map_location=self.device)
            model.eval()
        except Exception as e:
            self.error = e
            self._finish(ModelState.FAILED)
            logger.exception("Failed to load model from %s", self.model_path)
            raise RuntimeError(f"Failed to load model: {str(e)}") from e

        self.model = model
        self.error = None
        self._finish(ModelState.READY)
        logger.info("Model loaded successfully (%s, device=%s)", self.model_path.name, self.device)
        return model

    def _finish(self, state):
        with self._lock:
            self._state = state
            self._in_progress = False
            self._done.set()

    def load_async(self):
        """
        Start loading in a background thread.

        Returns:
            threading.Thread: The loader thread (the same one on repeated calls),
            None if the model was already loaded
        """
        with self._lock:
            if self._thread is None and self._state is not ModelState.READY:
                # Claim the load now so a concurrent load() waits for this thread.
                owner = not self._in_progress
                if owner:
                    self._begin()
                self._thread = threading.Thread(target=self._load_in_background, args=(owner,),
                                                name='model-loader', daemon=True)
                self._thread.start()
        return self._thread

    def _load_in_background(self, owner):
        if not owner:
            return
        try:
            self._load_model()
        except RuntimeError:
            # Already logged in _load_model(); readiness now reports FAILED.
            pass

    def wait(self, timeout=None):
        """
        Block until the model leaves the LOADING state.

        Returns:
            bool: True if the model is ready
        """
        if self._state is ModelState.UNLOADED:
            return False
        self._done.wait(timeout)
        return self.is_ready

    def get_model(self):
        return self.model

    def get_device(self):
        return self.device
