"""
Pytest configuration and fixtures for the dog vs cat classifier.
"""
import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
import torch
from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class MeanIntensityModel(torch.nn.Module):
    """Scores an NHWC batch by its mean pixel value."""

    def forward(self, x):
        return x.mean(dim=[1, 2, 3]).unsqueeze(1)


class FailingModel(torch.nn.Module):
    def forward(self, x):
        raise RuntimeError("forward pass exploded")


def make_png(color, size=(64, 48), mode='RGB'):
    """Encode a solid-color image as PNG bytes."""
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def model_path(tmp_path):
    """TorchScript archive of the mean-intensity model."""
    path = tmp_path / 'dog_cat_classifier.pt'
    torch.jit.script(MeanIntensityModel()).save(str(path))
    return path


@pytest.fixture
def cpu():
    return torch.device('cpu')


@pytest.fixture
def white_png():
    return make_png((255, 255, 255))


@pytest.fixture
def black_png():
    return make_png((0, 0, 0))


@pytest.fixture
def rgb_image():
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, size=(240, 320, 3), dtype=np.uint8)


@pytest.fixture
def app(model_path):
    from app import create_app

    app = create_app({
        'TESTING': True,
        'MODEL_PATH': model_path,
        'LOAD_MODEL_IN_BACKGROUND': False,
        'SESSION_IDLE_TIMEOUT': 0,
    })
    yield app
    app.config['SESSION_STORE'].close_all()


@pytest.fixture
def client(app):
    return app.test_client()
