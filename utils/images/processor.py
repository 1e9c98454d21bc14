"""
Image processing utilities for Site Design Advisor.

Screenshots are captured full-page and can easily exceed the limits of the
model's vision input, so they are resized and recompressed before upload.
"""

import base64
import io
from typing import Tuple

from PIL import Image

# Claude rejects images above 8000px on a side or 5 MB per image
DEFAULT_MAX_DIMENSION = 7500
DEFAULT_MAX_FILE_SIZE = 5_242_880


def _fit_dimensions(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    if width <= max_dimension and height <= max_dimension:
        return width, height
    if width > height:
        return max_dimension, int(height * (max_dimension / width))
    return int(width * (max_dimension / height)), max_dimension


def prepare_screenshot_for_model(
    screenshot_bytes: bytes,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> Tuple[str, str]:
    """
    Resize and compress a screenshot so the model accepts it.

    Images already within both limits are passed through untouched. Anything
    larger is scaled to max_dimension and re-encoded as JPEG, lowering the
    quality and then the dimensions until it fits under max_file_size.

    Args:
        screenshot_bytes: Original image bytes (PNG or JPEG)
        max_dimension: Maximum width/height in pixels
        max_file_size: Maximum encoded size in bytes

    Returns:
        Tuple of (media_type, base64-encoded image data)
    """
    image = Image.open(io.BytesIO(screenshot_bytes))
    width, height = image.size
    new_size = _fit_dimensions(width, height, max_dimension)

    if new_size == (width, height) and len(screenshot_bytes) <= max_file_size:
        media_type = Image.MIME.get(image.format, "image/png")
        return media_type, base64.b64encode(screenshot_bytes).decode("utf-8")

    if new_size != (width, height):
        image = image.resize(new_size, Image.Resampling.LANCZOS)

    # JPEG has no alpha channel
    if image.mode == "RGBA":
        rgb_image = Image.new("RGB", image.size, (255, 255, 255))
        rgb_image.paste(image, mask=image.split()[3])
        image = rgb_image
    elif image.mode != "RGB":
        image = image.convert("RGB")

    quality = 95
    buffer = io.BytesIO()
    while quality > 20:
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality, optimize=True)
        if buffer.tell() <= max_file_size:
            break
        quality -= 10

    scale_factor = 0.8
    while buffer.tell() > max_file_size and scale_factor > 0.3:
        resized = image.resize(
            (int(image.width * scale_factor), int(image.height * scale_factor)),
            Image.Resampling.LANCZOS,
        )
        buffer = io.BytesIO()
        resized.save(buffer, format="JPEG", quality=75, optimize=True)
        scale_factor -= 0.1

    return "image/jpeg", base64.b64encode(buffer.getvalue()).decode("utf-8")
