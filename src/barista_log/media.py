"""Photo handling for beans and equipment."""

from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from barista_log.exceptions import ImageError

ImageInput = str | Path | bytes | Image.Image

JPEG_QUALITY = 70


def _load_image(image: ImageInput) -> Image.Image:
    """Load image from various input types."""
    if isinstance(image, Image.Image):
        return image

    if isinstance(image, bytes):
        try:
            return Image.open(BytesIO(image))
        except (UnidentifiedImageError, OSError) as e:
            raise ImageError(f"Failed to read image data: {e}") from e

    path = Path(image) if isinstance(image, str) else image
    if not path.exists():
        raise ImageError(f"Image file not found: {path}")

    try:
        return Image.open(path)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageError(f"Failed to open image: {e}") from e


def prepare_photo(image: ImageInput, *, quality: int = JPEG_QUALITY, max_size: int | None = None) -> bytes:
    """Re-encode a photo as JPEG bytes ready to store.

    Args:
        image: File path, raw bytes, or PIL Image.
        quality: JPEG quality (1-95).
        max_size: Optional bound on the longest side, in pixels.

    Raises:
        ImageError: If the image cannot be read or encoded.
    """
    pil_image = _load_image(image)
    try:
        if pil_image.mode not in ("RGB", "L"):
            pil_image = pil_image.convert("RGB")
        if max_size:
            pil_image = pil_image.copy()
            pil_image.thumbnail((max_size, max_size))
        with BytesIO() as buffer:
            pil_image.save(buffer, format="JPEG", quality=quality)
            return buffer.getvalue()
    except OSError as e:
        raise ImageError(f"Failed to encode image: {e}") from e
