import logging
from typing import TYPE_CHECKING, Literal, Optional

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from ora_tools.api.protocols import LayerProtocol

logger = logging.getLogger(__name__)


def get_array(
    layer: "LayerProtocol", channel: Optional[Literal["color", "alpha"]] = None
) -> np.ndarray:
    """
    Get the layer surface as a float32 array of shape (height, width, C)
    with values in [0.0, 1.0].

    :param channel: 'color' for RGB, 'alpha' for the alpha channel, or `None`
        for RGBA.
    """
    array = to_array(layer.surface)
    if channel == "color":
        return array[:, :, :3]
    elif channel == "alpha":
        return array[:, :, 3:4]
    elif channel is not None:
        raise ValueError("Unknown channel: %r" % channel)
    return array


def to_array(image: Image.Image) -> np.ndarray:
    """Convert an RGBA PIL image to a float32 array in [0.0, 1.0]."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.float32) / 255.0


def from_array(array: np.ndarray) -> Image.Image:
    """Convert a float array of shape (height, width, 4) to an RGBA PIL image."""
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError("Expected (height, width, 4) array, got %r" % (array.shape,))
    data = np.clip(array * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return Image.fromarray(data)
