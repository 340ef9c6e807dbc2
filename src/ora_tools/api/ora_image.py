"""
OpenRaster image module.

This module provides the main :py:class:`OpenRasterImage` class, which is the
primary entry point for users of ora-tools. It represents a complete layered
document and provides high-level methods for reading, editing, and saving
ORA files.

Key functionality:

- **Opening files**: :py:meth:`OpenRasterImage.open` and :py:meth:`OpenRasterImage.new`
- **Layer access**: Iterate and index layers, bottom to top
- **Compositing**: Flatten layers to PIL Images via :py:meth:`~OpenRasterImage.composite`
- **Saving**: Write the document back to ORA format

Example usage::

    from ora_tools import OpenRasterImage

    # Open an ORA file
    image = OpenRasterImage.open('document.ora')

    # Layers that could not be read are reported, not raised
    for error in image.errors:
        print(error)

    # Access document properties
    print(f"Size: {image.width}x{image.height}")

    # Iterate through layers
    for layer in image:
        print(f"{layer.name}: {layer.opacity:.2f}")

    # Modify layers
    image[0].visible = False
    image[-1].opacity = 0.5

    # Composite to image
    image.composite().save('output.png')

    # Save changes
    image.save('modified.ora')
"""

import logging
from typing import Any, Callable, Optional, Union

try:
    from typing import Self  # type: ignore[attr-defined]
except ImportError:
    from typing_extensions import Self

import numpy as np
from PIL import Image

from ora_tools.api import pil_io
from ora_tools.api.exporter import export_layers
from ora_tools.api.importer import import_layers
from ora_tools.api.layers import Layer, LayerStack
from ora_tools.constants import THUMBNAIL_MAX_SIZE
from ora_tools.errors import LayerImportError
from ora_tools.ora.archive import PathOrFile

logger = logging.getLogger(__name__)


class OpenRasterImage(LayerStack):
    """
    OpenRaster document.

    Example::

        from ora_tools import OpenRasterImage

        image = OpenRasterImage.open('example.ora')
        flattened = image.composite()

        for layer in image:
            layer_image = layer.topil()
    """

    def __init__(self, size: tuple[int, int] = (0, 0)):
        super().__init__(size)
        self._errors: list[LayerImportError] = []

    @classmethod
    def new(cls, size: tuple[int, int]) -> Self:
        """
        Create a new document without layers.

        :param size: A tuple containing (width, height) in pixels.
        :return: A :py:class:`~ora_tools.api.ora_image.OpenRasterImage` object.
        """
        width, height = size
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        return cls(size)

    @classmethod
    def open(cls, fp: PathOrFile) -> Self:
        """
        Open an ORA document.

        Layers that fail to load are skipped and listed in
        :py:attr:`errors`.

        :param fp: filename or file-like object.
        :return: A :py:class:`~ora_tools.api.ora_image.OpenRasterImage` object.
        :raises OpenRasterError: if the archive or its manifest is invalid.
        """
        self = cls()
        result = import_layers(fp, self)
        self._errors = list(result.errors)
        return self

    def save(self, fp: PathOrFile, thumbnail_size: int = THUMBNAIL_MAX_SIZE) -> None:
        """
        Save the ORA file and clear the edit history.

        :param fp: filename or file-like object.
        :param thumbnail_size: largest side of the embedded thumbnail.
        :raises EmptyStackError: if the document has no layers.
        :raises ArchiveCreateError: if the file cannot be written.
        """
        export_layers(self, fp, thumbnail_size=thumbnail_size)
        self.clear_history()

    @property
    def errors(self) -> list[LayerImportError]:
        """
        Layers that could not be imported by :py:meth:`open`.

        :return: list of :py:class:`~ora_tools.errors.LayerImportError`
        """
        return self._errors

    def composite(
        self,
        viewport: Optional[tuple[int, int, int, int]] = None,
        color: Union[float, tuple[float, ...], np.ndarray] = 0.0,
        alpha: Union[float, np.ndarray] = 0.0,
        layer_filter: Optional[Callable] = None,
    ) -> Image.Image:
        """
        Composite the document.

        :param viewport: Viewport bounding box specified by (x1, y1, x2, y2)
            tuple. Default is the canvas.
        :param color: Backdrop color specified by scalar or tuple of scalar.
            The color value should be in [0.0, 1.0]. For example, (1., 0., 0.)
            specifies red.
        :param alpha: Backdrop alpha in [0.0, 1.0].
        :param layer_filter: Callable that takes a layer as argument and
            returns whether if the layer is composited. Default is
            :py:func:`~ora_tools.api.layers.Layer.is_visible`.
        :return: RGBA :py:class:`PIL.Image.Image`.
        """
        from ora_tools.composite import composite_pil

        return composite_pil(
            self, color=color, alpha=alpha, viewport=viewport, layer_filter=layer_filter
        )

    def numpy(self) -> np.ndarray:
        """
        Get NumPy array of the flattened document.

        :return: float32 :py:class:`numpy.ndarray` of shape (height, width, 4)
        """
        from ora_tools.composite import composite

        color, alpha = composite(self)
        return np.concatenate((color, alpha), 2)

    def thumbnail(self, max_size: int = THUMBNAIL_MAX_SIZE) -> Image.Image:
        """
        Flattened document scaled to fit in a ``max_size`` square.

        :param max_size: largest side of the thumbnail.
        :return: RGBA :py:class:`PIL.Image.Image`.
        """
        flattened = self.flatten()
        try:
            return pil_io.make_thumbnail(flattened, max_size)
        finally:
            flattened.close()

    # Editing API
    def create_pixel_layer(
        self,
        image: Image.Image,
        name: str = "Layer",
        top: int = 0,
        left: int = 0,
        opacity: float = 1.0,
        visible: bool = True,
    ) -> Layer:
        """
        Create a new pixel layer and add it on top of the document.

        The layer has the canvas size; ``image`` is painted at the given
        position and clipped to the canvas.

        Example::

            image = OpenRasterImage.new((640, 480))
            layer = image.create_pixel_layer(pil_image, name='Layer 1')

        :param image: PIL Image object.
        :param name: Name of the new layer.
        :param top: Top coordinate of the image.
        :param left: Left coordinate of the image.
        :param opacity: Opacity of the new layer (0.0-1.0).
        :param visible: Visibility of the new layer.
        :return: The created :py:class:`~ora_tools.api.layers.Layer` object.
        """
        layer = Layer.frompil(
            image,
            size=self.size,
            name=name,
            left=left,
            top=top,
            opacity=opacity,
            visible=visible,
        )
        self.append(layer)
        return layer

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        super()._repr_pretty_(p, cycle)
        if not cycle and self._errors:
            with p.indent(2):
                for error in self._errors:
                    p.break_()
                    p.text("! %s" % error)
