"""
Image Input Handling
====================

Loads image files for the inference engine:
- Validation: existence, size limit, decodable by Pillow
- MIME detection: from the decoded format, falling back to the file extension
- Loading: raw bytes plus MIME type, ready for the provider adapter

Dependencies:
- PIL (Pillow): Image decoding and verification
- src.core.config: Size limits and supported formats
"""

# ============================================================================
# IMPORTS
# ============================================================================

import io
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from src.core import config

logger = logging.getLogger(__name__)

# ============================================================================
# CUSTOM EXCEPTIONS
# ============================================================================

class ImageValidationError(Exception):
    """Raised when image validation fails."""
    pass

# ============================================================================
# IMAGE VALIDATION
# ============================================================================

def validate_image(image_path: Path) -> Tuple[bool, Optional[str]]:
    """
    Validate that an image file can be opened and sent to a provider.

    Args:
        image_path: Path to the image file

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> valid, error = validate_image(Path("test.jpg"))
        >>> if valid:
        ...     print("Image is valid")
    """
    try:
        if not image_path.exists():
            return False, "File does not exist"

        if not image_path.is_file():
            return False, "Path is not a file"

        size = image_path.stat().st_size
        if size == 0:
            return False, "File is empty"

        if size > config.MAX_IMAGE_SIZE_MB * 1024 * 1024:
            return False, f"File exceeds {config.MAX_IMAGE_SIZE_MB}MB limit"

        with Image.open(image_path) as img:
            img.verify()
            if img.format not in config.SUPPORTED_IMAGE_FORMATS:
                return False, f"Unsupported image format: {img.format}"

        return True, None

    except UnidentifiedImageError:
        return False, "Cannot identify image file"
    except PermissionError:
        return False, "Permission denied"
    except OSError as e:
        return False, f"Validation failed: {str(e)}"

# ============================================================================
# MIME DETECTION
# ============================================================================

def detect_mime_type(image_bytes: bytes, filename: str = "") -> str:
    """
    Determine the MIME type of image data.

    The decoded Pillow format wins; the file extension is only consulted when
    the bytes cannot be identified. Defaults to ``image/jpeg``.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            mime = config.SUPPORTED_IMAGE_FORMATS.get(img.format or "")
            if mime:
                return mime
    except (UnidentifiedImageError, OSError):
        logger.debug(f"Pillow could not identify {filename or 'image bytes'}, using extension")

    guessed = mimetypes.guess_type(filename)[0] if filename else None
    return guessed or "image/jpeg"

# ============================================================================
# LOADING
# ============================================================================

def load_image(image_path) -> Tuple[bytes, str]:
    """
    Validate and read an image file.

    Args:
        image_path: str or Path of the image.

    Returns:
        Tuple of (image_bytes, mime_type)

    Raises:
        ImageValidationError: the file is missing, too large or not a supported image.
    """
    path = Path(image_path)
    valid, error = validate_image(path)
    if not valid:
        raise ImageValidationError(f"{path.name}: {error}")

    image_bytes = path.read_bytes()
    mime_type = detect_mime_type(image_bytes, path.name)
    logger.debug(f"Loaded {path.name}: {len(image_bytes)} bytes, {mime_type}")
    return image_bytes, mime_type
