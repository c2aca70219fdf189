"""
I/O utilities for the spreadsheet OCR pipeline.

Handles:
- Image loading, upload decoding and image-type checks
- Text and JSON serialization
- Directory management
"""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Union, Optional, Any
from dataclasses import asdict

import numpy as np

from .errors import UnsupportedInputError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.tiff', '.tif', '.bmp', '.webp')
TEXT_EXTENSIONS = ('.txt',)


# ============================================================================
# Image Type Checks
# ============================================================================

def is_image_upload(
    filename: Optional[str] = None,
    mime_type: Optional[str] = None
) -> bool:
    """
    Check whether an upload looks like an image.

    The MIME type wins when given; otherwise it is guessed from the name.
    """
    if not mime_type and filename:
        mime_type, _ = mimetypes.guess_type(filename)
        if not mime_type and Path(filename).suffix.lower() in IMAGE_EXTENSIONS:
            return True

    return bool(mime_type) and mime_type.startswith("image/")


def ensure_image_upload(
    filename: Optional[str] = None,
    mime_type: Optional[str] = None
) -> None:
    """
    Reject uploads that are not images.

    Raises:
        UnsupportedInputError: If the upload is not an image
    """
    if not is_image_upload(filename, mime_type):
        logger.warning(f"Rejected non-image upload: {filename} ({mime_type})")
        raise UnsupportedInputError()


# ============================================================================
# Image Loading
# ============================================================================

def load_image(
    image_path: Union[str, Path],
    grayscale: bool = False
) -> np.ndarray:
    """
    Load an image from file.

    Args:
        image_path: Path to the image file
        grayscale: If True, load as grayscale

    Returns:
        Numpy array representing the image (BGR format if color)

    Raises:
        FileNotFoundError: If image file doesn't exist
        UnsupportedInputError: If the file is not an image or cannot be decoded
    """
    import cv2

    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    ensure_image_upload(image_path.name)

    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    img = cv2.imread(str(image_path), flag)

    if img is None:
        raise UnsupportedInputError(f"Could not decode image: {image_path}")

    logger.debug(f"Loaded image: {image_path}, shape: {img.shape}")
    return img


def decode_image(data: bytes, grayscale: bool = False) -> np.ndarray:
    """
    Decode an uploaded image payload.

    Args:
        data: Encoded image bytes (PNG, JPEG, ...)
        grayscale: If True, decode as grayscale

    Raises:
        UnsupportedInputError: If the bytes are not a decodable image
    """
    import cv2

    buffer = np.frombuffer(data, dtype=np.uint8)
    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    img = cv2.imdecode(buffer, flag) if buffer.size else None

    if img is None:
        raise UnsupportedInputError("Could not decode uploaded image")

    logger.debug(f"Decoded image payload ({len(data)} bytes), shape: {img.shape}")
    return img


# ============================================================================
# Text and JSON Serialization
# ============================================================================

def load_text(text_path: Union[str, Path]) -> str:
    """Read a UTF-8 text file."""
    text_path = Path(text_path)
    if not text_path.exists():
        raise FileNotFoundError(f"Text file not found: {text_path}")

    return text_path.read_text(encoding='utf-8')


def save_text(text: str, output_path: Union[str, Path]) -> Path:
    """Write text to a UTF-8 file, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # newline='' keeps "\n" as-is on every platform
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)

    logger.debug(f"Saved text: {output_path}")
    return output_path


class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values, dataclasses and paths."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# File Type Detection
# ============================================================================

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of an input file.

    Returns:
        One of: 'image', 'text', 'unknown'
    """
    input_path = Path(input_path)

    if not input_path.is_file():
        return 'unknown'

    suffix = input_path.suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return 'image'
    elif suffix in TEXT_EXTENSIONS:
        return 'text'

    return 'unknown'
