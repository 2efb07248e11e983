"""
Model Downloader

Downloads the serialized classifier from an external URL when it is not
already present on disk.
"""
import logging
import sys
from pathlib import Path

import requests

import config

logger = logging.getLogger(__name__)


def download_model_if_needed(model_path, model_url):
    """
    Download the model file if it doesn't exist locally.

    Args:
        model_path (str or Path): Destination of the model archive
        model_url (str): URL to fetch it from

    Returns:
        Path: The local model path
    """
    model_path = Path(model_path)

    if model_path.exists():
        logger.info("Model already exists: %s", model_path.name)
        return model_path

    if not model_url:
        raise FileNotFoundError(f"Model file not found and no download URL configured: {model_path}")

    logger.info("Downloading model file (%s) from %s", model_path.name, model_url)
    model_path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = model_path.with_name(model_path.name + '.part')

    try:
        response = requests.get(model_url, stream=True, timeout=300)
        response.raise_for_status()

        total_size = int(response.headers.get('content-length', 0))
        downloaded = 0

        with open(partial_path, 'wb') as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
                    downloaded += len(chunk)

        if total_size and downloaded != total_size:
            raise IOError(f"Incomplete download: {downloaded}/{total_size} bytes")

        partial_path.replace(model_path)
        logger.info("Model downloaded successfully: %s (%d bytes)", model_path.name, downloaded)
        return model_path

    except Exception:
        partial_path.unlink(missing_ok=True)
        logger.error("Failed to download model, download it manually from: %s", model_url)
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    url = sys.argv[1] if len(sys.argv) > 1 else config.MODEL_DOWNLOAD_URL
    download_model_if_needed(config.MODEL_PATH, url)
