"""Composite implementation for layer flattening."""

import logging
from typing import TYPE_CHECKING, Callable, Optional, Union

import numpy as np
from PIL import Image

from ora_tools.api import numpy_io
from ora_tools.composite import utils

if TYPE_CHECKING:
    from ora_tools.api.protocols import LayerProtocol, LayerStackProtocol

logger = logging.getLogger(__name__)


def composite_pil(
    stack: "LayerStackProtocol",
    color: Union[float, tuple[float, ...], np.ndarray] = 0.0,
    alpha: Union[float, np.ndarray] = 0.0,
    viewport: Optional[tuple[int, int, int, int]] = None,
    layer_filter: Optional[Callable] = None,
) -> Image.Image:
    """
    Composite layers and return an RGBA PIL Image.

    Args:
        stack: Layer stack to composite
        color: Backdrop color (0.0-1.0). Can be scalar, RGB tuple, or ndarray
        alpha: Backdrop alpha (0.0-1.0). Can be scalar or ndarray
        viewport: Bounding box (left, top, right, bottom). If None, uses the canvas
        layer_filter: Optional callable to filter which layers to composite.
            Should return True to include. Default is ``layer.is_visible()``

    Returns:
        RGBA PIL Image of the viewport size
    """
    color, alpha = composite(
        stack, color=color, alpha=alpha, viewport=viewport, layer_filter=layer_filter
    )
    return numpy_io.from_array(np.concatenate((color, alpha), 2))


def composite(
    stack: "LayerStackProtocol",
    color: Union[float, tuple[float, ...], np.ndarray] = 0.0,
    alpha: Union[float, np.ndarray] = 0.0,
    viewport: Optional[tuple[int, int, int, int]] = None,
    layer_filter: Optional[Callable] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Composite layers and return NumPy arrays.

    Args:
        stack: Layer stack to composite
        color: Backdrop color (0.0-1.0, default: 0.0). Can be:
            - Scalar (float): Applied to all channels
            - Tuple: Per-channel values (R, G, B)
            - ndarray: Full backdrop image
        alpha: Backdrop alpha (0.0-1.0, default: 0.0). Can be scalar or ndarray
        viewport: Bounding box (left, top, right, bottom). If None, uses the canvas
        layer_filter: Optional callable(layer) -> bool to filter which layers
            to composite

    Returns:
        Tuple of (color, alpha) as float32 ndarrays with shape (height, width, channels)

    Examples:
        >>> from ora_tools import OpenRasterImage
        >>> image = OpenRasterImage.open('example.ora')
        >>> color, alpha = composite(image)
        >>> # Opaque white backdrop
        >>> color, alpha = composite(image, color=1.0, alpha=1.0)
    """
    if viewport is None:
        viewport = (0, 0) + tuple(stack.size)  # type: ignore[assignment]
    assert viewport is not None

    compositor = Compositor(viewport, color, alpha, layer_filter)
    for layer in stack:
        compositor.apply(layer)
    return compositor.finish()


def paste(
    viewport: tuple[int, int, int, int],
    bbox: tuple[int, int, int, int],
    values: np.ndarray,
    background: Optional[float] = None,
) -> np.ndarray:
    """Change to the specified viewport."""
    shape = (viewport[3] - viewport[1], viewport[2] - viewport[0], values.shape[2])
    view = (
        np.full(shape, background, dtype=np.float32)
        if background
        else np.zeros(shape, dtype=np.float32)
    )
    inter = utils.intersect(viewport, bbox)
    if inter == (0, 0, 0, 0):
        return view

    v = (
        inter[0] - viewport[0],
        inter[1] - viewport[1],
        inter[2] - viewport[0],
        inter[3] - viewport[1],
    )
    b = (inter[0] - bbox[0], inter[1] - bbox[1], inter[2] - bbox[0], inter[3] - bbox[1])
    view[v[1] : v[3], v[0] : v[2], :] = values[b[1] : b[3], b[0] : b[2], :]
    return view


class Compositor(object):
    """Composite context.

    Example::

        compositor = Compositor(stack.viewbox)
        for layer in stack:
            compositor.apply(layer)
        color, alpha = compositor.finish()
    """

    def __init__(
        self,
        viewport: tuple[int, int, int, int],
        color: Union[float, tuple[float, ...], np.ndarray] = 0.0,
        alpha: Union[float, np.ndarray] = 0.0,
        layer_filter: Optional[Callable] = None,
    ):
        self._viewport = viewport
        self._layer_filter = layer_filter

        if isinstance(alpha, np.ndarray):
            self._alpha = alpha.astype(np.float32)
        else:
            self._alpha = np.full((self.height, self.width, 1), alpha, dtype=np.float32)

        if isinstance(color, np.ndarray):
            self._color = color.astype(np.float32)
        else:
            self._color = np.full((self.height, self.width, 3), color, dtype=np.float32)

    def apply(self, layer: "LayerProtocol") -> None:
        logger.debug("Compositing %s" % layer)

        if self._layer_filter is not None:
            if not self._layer_filter(layer):
                logger.debug("Ignore %s" % layer)
                return
        elif not layer.is_visible():
            logger.debug("Ignore hidden %s" % layer)
            return
        if layer.opacity == 0.0:
            logger.debug("Ignore transparent %s" % layer)
            return
        bbox = (0, 0) + tuple(layer.size)
        if utils.intersect(self._viewport, bbox) == (0, 0, 0, 0):  # type: ignore[arg-type]
            logger.debug("Out of viewport %s" % layer)
            return

        values = numpy_io.get_array(layer)
        if bbox != self._viewport:
            values = paste(self._viewport, bbox, values)  # type: ignore[arg-type]
        self._apply_source(values[:, :, :3], values[:, :, 3:] * layer.opacity)

    def _apply_source(self, color: np.ndarray, alpha: np.ndarray) -> None:
        alpha_b = self._alpha
        alpha_r = utils.union(alpha_b, alpha)
        color_r = utils.divide(
            color * alpha + self._color * alpha_b * (1.0 - alpha), alpha_r
        )
        self._color = utils.clip(color_r)
        self._alpha = utils.clip(alpha_r)

    def finish(self) -> tuple[np.ndarray, np.ndarray]:
        return self._color, self._alpha

    @property
    def width(self) -> int:
        return self._viewport[2] - self._viewport[0]

    @property
    def height(self) -> int:
        return self._viewport[3] - self._viewport[1]
