"""
Utility Functions for Image Decoding and Conversion
"""
from io import BytesIO

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from core.errors import ImageDecodeError


def pil_to_numpy(image):
    """
    Convert PIL Image to numpy array.

    Args:
        image (PIL.Image): PIL Image object

    Returns:
        np.ndarray: Numpy array
    """
    return np.array(image)


def is_image_mimetype(mimetype):
    """True for ``image/*`` MIME types, the only uploads the picker accepts."""
    return bool(mimetype) and mimetype.lower().startswith('image/')


def to_8bit(image):
    """
    Rescale a high bit depth single-channel image (modes I;16*, I, F) to 8-bit.

    16-bit samples keep their high byte, as browsers do when drawing them.
    Mode I holds 16-bit PNG data in 32-bit ints; float images in [0, 1] are
    scaled by 255.
    """
    array = np.asarray(image)

    if image.mode.startswith('I;16'):
        array = array.astype(np.uint16) >> 8
    elif image.mode == 'I':
        array = np.clip(array, 0, 65535)
        if array.max() > 255:
            array = array >> 8
    elif image.mode == 'F':
        if array.size and np.nanmax(array) <= 1.0:
            array = array * 255.0
        array = np.nan_to_num(array)
    else:
        return image

    return Image.fromarray(np.clip(array, 0, 255).astype(np.uint8))


def decode_image(data):
    """
    Decode raw uploaded bytes into an RGB array.

    The EXIF orientation is applied, so the model sees the picture upright
    like the browser preview does.

    Args:
        data (bytes): Encoded image (PNG, JPEG, ...)

    Returns:
        np.ndarray: uint8 array (H, W, 3)

    Raises:
        ImageDecodeError: If the bytes are not a valid image
    """
    if not data:
        raise ImageDecodeError('Empty image data')

    try:
        image = Image.open(BytesIO(data))
        image.verify()
        # Re-open after verify (verify() leaves the image unusable)
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, IOError, OSError, SyntaxError) as e:
        raise ImageDecodeError(f'Corrupted or invalid image file: {str(e)}') from e

    try:
        image = ImageOps.exif_transpose(image)
        image = to_8bit(image)
        if image.mode != 'RGB':
            image = image.convert('RGB')
        return pil_to_numpy(image)
    except (ValueError, OSError) as e:
        raise ImageDecodeError(f'Failed to convert image format: {str(e)}') from e
    finally:
        image.close()
