"""
PIL IO module.

PNG decoding and encoding, raster surfaces, and thumbnail scaling.
"""

import io
import logging

from PIL import Image

from ora_tools.constants import THUMBNAIL_MAX_SIZE

logger = logging.getLogger(__name__)

#: Mode of every layer surface.
SURFACE_MODE = "RGBA"


def new_surface(size: tuple[int, int]) -> Image.Image:
    """Fully transparent surface of the given (width, height)."""
    return Image.new(SURFACE_MODE, size, (0, 0, 0, 0))


def to_surface(image: Image.Image) -> Image.Image:
    """Convert a PIL image to the surface mode, copying if necessary."""
    if image.mode == SURFACE_MODE:
        return image.copy()
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("PA")
    return image.convert(SURFACE_MODE)


def decode_png(data: bytes) -> Image.Image:
    """
    Decode PNG bytes into a surface-mode image fully loaded in memory.

    :raises PIL.UnidentifiedImageError: if the data is not a PNG image.
    :raises OSError: if the data is truncated or corrupt.
    """
    with Image.open(io.BytesIO(data), formats=("PNG",)) as image:
        image.load()
        logger.debug("Decoded %s image of %dx%d", image.mode, *image.size)
        return to_surface(image)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image to PNG bytes."""
    with io.BytesIO() as f:
        image.save(f, format="PNG")
        return f.getvalue()


def paint(surface: Image.Image, image: Image.Image, offset: tuple[int, int]) -> None:
    """
    Paint ``image`` onto ``surface`` at ``offset`` by overwriting pixels.

    There is no blending: the covered region takes the pixels of ``image``,
    alpha included. Parts outside of ``surface`` are clipped.
    """
    if image.mode != surface.mode:
        image = image.convert(surface.mode)
    surface.paste(image, offset)


def get_thumbnail_size(
    width: int, height: int, max_size: int = THUMBNAIL_MAX_SIZE
) -> tuple[int, int]:
    """
    Thumbnail dimensions for the given image size.

    The longer side is clamped to ``max_size`` and the shorter one is scaled
    by the same ratio, truncated toward zero but never below one pixel.
    Images that already fit are not enlarged.
    """
    if width <= max_size and height <= max_size:
        return width, height
    if width > height:
        return max_size, max(1, int(height / width * max_size))
    return max(1, int(width / height * max_size)), max_size


def make_thumbnail(image: Image.Image, max_size: int = THUMBNAIL_MAX_SIZE) -> Image.Image:
    """Scaled copy of ``image`` that fits in a ``max_size`` square."""
    size = get_thumbnail_size(image.width, image.height, max_size)
    if size == image.size:
        return image.copy()
    return image.resize(size, Image.Resampling.BILINEAR)
