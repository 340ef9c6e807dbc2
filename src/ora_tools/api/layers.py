"""
Layer module.

This module implements the in-memory layer stack that OpenRaster files are
read into and written from.

Key classes:

- :py:class:`Layer`: Raster layer with an RGBA surface, opacity and visibility
- :py:class:`LayerStack`: Ordered collection of layers, bottom to top

Layer order:

Index 0 is the bottom of the stack and the last index is the top, the same
order in which layers are composited::

    # Iterate from the bottom to the top
    for layer in stack:
        print(layer.name)

    # Topmost layer
    top = stack[-1]

Common layer properties:

- ``name``: Layer name
- ``visible``: Visibility flag
- ``opacity``: Opacity (0.0-1.0)
- ``surface``: RGBA :py:class:`PIL.Image.Image` of the canvas size
- ``width``, ``height``, ``size``: Dimensions

Example usage::

    from ora_tools.api.layers import LayerStack

    stack = LayerStack((64, 64))
    layer = stack.create_layer("Background", 64, 64)
    stack.append(layer)
    layer.opacity = 0.5
    image = stack.flatten()
"""

import logging
from typing import Any, Iterable, Iterator, Literal, Optional

try:
    from typing import Self  # type: ignore[attr-defined]
except ImportError:
    from typing_extensions import Self

import numpy as np
from PIL import Image

from ora_tools.api import numpy_io, pil_io
from ora_tools.api.protocols import LayerProtocol, LayerStackProtocol

logger = logging.getLogger(__name__)


class Layer(LayerProtocol):
    """
    Raster layer.

    :param surface: PIL image holding the pixels, converted to RGBA.
    :param name: Layer name.
    :param opacity: Opacity in [0.0, 1.0].
    :param visible: Visibility.
    """

    def __init__(
        self,
        surface: Image.Image,
        name: str = "Layer",
        opacity: float = 1.0,
        visible: bool = True,
    ):
        if not isinstance(surface, Image.Image):
            raise TypeError(f"Expected PIL Image, got {type(surface).__name__}")
        if surface.mode != pil_io.SURFACE_MODE:
            surface = surface.convert(pil_io.SURFACE_MODE)
        self._surface = surface
        self._name = name
        self._opacity = 1.0
        self._visible = bool(visible)
        self._parent: Optional["LayerStack"] = None
        self.opacity = opacity

    @classmethod
    def new(cls, name: str, width: int, height: int) -> Self:
        """
        Create a fully transparent layer.

        :param name: Layer name.
        :param width: Surface width.
        :param height: Surface height.
        """
        return cls(pil_io.new_surface((width, height)), name=name)

    @classmethod
    def frompil(
        cls,
        image: Image.Image,
        size: Optional[tuple[int, int]] = None,
        name: str = "Layer",
        left: int = 0,
        top: int = 0,
        opacity: float = 1.0,
        visible: bool = True,
    ) -> Self:
        """
        Create a layer from a PIL image.

        :param image: PIL image to paint on the new layer.
        :param size: Surface size, default is the image size.
        :param name: Layer name.
        :param left: Left coordinate of the image on the surface.
        :param top: Top coordinate of the image on the surface.
        :param opacity: Opacity in [0.0, 1.0].
        :param visible: Visibility.
        """
        layer = cls.new(name, *(size or image.size))
        layer.paint(image, (left, top))
        layer.opacity = opacity
        layer.visible = visible
        return layer

    @property
    def name(self) -> str:
        """
        Layer name. Writable.

        :return: `str`
        """
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if self._name != value:
            self._mark_updated("Rename Layer")
        self._name = str(value)

    @property
    def kind(self) -> str:
        """
        Kind of this layer.

        :return: `'pixel'`
        """
        return "pixel"

    @property
    def visible(self) -> bool:
        """
        Layer visibility. Writable.

        :return: `bool`
        """
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        if self._visible != bool(value):
            self._mark_updated("Layer Shown" if value else "Layer Hidden")
        self._visible = bool(value)

    def is_visible(self) -> bool:
        """
        Whether the layer takes part in compositing.

        :return: `bool`
        """
        return self._visible

    @property
    def opacity(self) -> float:
        """
        Opacity of this layer in [0.0, 1.0] range. Writable.

        :return: float
        """
        return self._opacity

    @opacity.setter
    def opacity(self, value: float) -> None:
        if not (0.0 <= value <= 1.0):
            raise ValueError(f"Opacity must be in range [0.0, 1.0], got {value}")
        if self._opacity != value:
            self._mark_updated("Layer Opacity")
        self._opacity = float(value)

    @property
    def parent(self) -> Optional["LayerStack"]:
        """Stack this layer belongs to."""
        return self._parent

    @property
    def surface(self) -> Image.Image:
        """
        RGBA surface of this layer.

        :return: :py:class:`PIL.Image.Image`
        """
        return self._surface

    @property
    def width(self) -> int:
        """
        Width of the surface.

        :return: int
        """
        return self._surface.width

    @property
    def height(self) -> int:
        """
        Height of the surface.

        :return: int
        """
        return self._surface.height

    @property
    def size(self) -> tuple[int, int]:
        """
        (width, height) tuple.

        :return: `tuple`
        """
        return self.width, self.height

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple of the surface."""
        return 0, 0, self.width, self.height

    def paint(self, image: Image.Image, offset: tuple[int, int] = (0, 0)) -> None:
        """
        Paint a PIL image onto the surface, replacing the covered pixels.

        :param image: Source image.
        :param offset: (left, top) position of the image on the surface.
        """
        pil_io.paint(self._surface, image, offset)
        self._mark_updated("Paint")

    def topil(self) -> Image.Image:
        """
        Get a copy of the surface as PIL Image.

        :return: :py:class:`PIL.Image.Image`
        """
        return self._surface.copy()

    def numpy(self, channel: Optional[Literal["color", "alpha"]] = None) -> np.ndarray:
        """
        Get NumPy array of the layer.

        :param channel: Which channel to return, can be 'color' or 'alpha'.
            Default is 'color+alpha'.
        :return: :py:class:`numpy.ndarray`
        """
        return numpy_io.get_array(self, channel)

    def _mark_updated(self, action: str) -> None:
        if self._parent is not None:
            self._parent._mark_updated(action)

    def __repr__(self) -> str:
        return "%s(%r size=%dx%d opacity=%.2f%s)" % (
            self.__class__.__name__,
            self.name,
            self.width,
            self.height,
            self.opacity,
            "" if self.visible else " hidden",
        )


class LayerStack(LayerStackProtocol):
    """
    Ordered collection of layers, bottom to top.

    Besides the layers, the stack keeps the canvas size, a simple undo
    history of the edits made through this API, and an optional transient
    selection layer that is never saved or composited.

    :param size: Canvas (width, height).
    """

    def __init__(self, size: tuple[int, int] = (0, 0)):
        self._layers: list[Layer] = []
        self._size = (0, 0)
        self._history: list[str] = []
        self._selection_layer: Optional[Layer] = None
        self.size = size

    @property
    def size(self) -> tuple[int, int]:
        """
        Canvas (width, height) tuple. Writable.

        :return: `tuple`
        """
        return self._size

    @size.setter
    def size(self, value: tuple[int, int]) -> None:
        width, height = (int(x) for x in value)
        if width < 0 or height < 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        self._size = (width, height)

    @property
    def width(self) -> int:
        """
        Canvas width.

        :return: `int`
        """
        return self._size[0]

    @property
    def height(self) -> int:
        """
        Canvas height.

        :return: `int`
        """
        return self._size[1]

    @property
    def viewbox(self) -> tuple[int, int, int, int]:
        """
        Bounding box of the canvas.

        :return: (left, top, right, bottom) `tuple`.
        """
        return 0, 0, self.width, self.height

    def __len__(self) -> int:
        return self._layers.__len__()

    def __iter__(self) -> Iterator[Layer]:
        return self._layers.__iter__()

    def __reversed__(self) -> Iterator[Layer]:
        return self._layers.__reversed__()

    def __contains__(self, item: object) -> bool:
        return item in self._layers

    def __getitem__(self, key: int) -> Layer:
        return self._layers.__getitem__(key)

    def __delitem__(self, key: int) -> None:
        self.remove(self._layers[key])

    def create_layer(self, name: str, width: int, height: int) -> Layer:
        """
        Create a transparent layer. The layer is not inserted.

        :param name: Layer name.
        :param width: Surface width.
        :param height: Surface height.
        :return: :py:class:`Layer`
        """
        return Layer.new(name, width, height)

    def append(self, layer: Layer) -> None:
        """
        Add a layer to the end (top) of the stack.

        :param layer: The layer to add.
        :raises TypeError: If the provided object is not a Layer instance.
        """
        self.insert(len(self._layers), layer)

    def extend(self, layers: Iterable[Layer]) -> None:
        """
        Add a list of layers to the end (top) of the stack.

        :param layers: The layers to add.
        :raises TypeError: If any of the objects is not a Layer instance.
        """
        for layer in list(layers):
            self.append(layer)

    def insert(self, index: int, layer: Layer) -> None:  # type: ignore[override]
        """
        Insert the given layer at the specified index.

        A layer that belongs to another stack is moved out of it.

        :param index: The index to insert the layer at. 0 is the bottom.
        :param layer: The layer to insert.
        :raises TypeError: If the provided object is not a Layer instance.
        """
        if not isinstance(layer, Layer):
            raise TypeError(f"Expected Layer instance, got {type(layer).__name__}")
        if layer._parent is not None and layer in layer._parent:
            layer._parent._layers.remove(layer)
        self._layers.insert(index, layer)
        layer._parent = self
        self._mark_updated("Add Layer")

    def remove(self, layer: Layer) -> Self:
        """
        Removes the specified layer from the stack.

        :param layer: The layer to remove.
        :raises ValueError: If the layer is not found in the stack.
        :return: self
        """
        if layer not in self:
            raise ValueError(f"Layer {layer} not found in stack {self}")
        self._layers.remove(layer)
        layer._parent = None
        self._mark_updated("Delete Layer")
        return self

    def pop(self, index: int = -1) -> Layer:
        """
        Removes the specified layer from the list and returns it.

        :param index: The index of the layer to remove. Default is -1 (the top).
        :raises IndexError: If the index is out of range.
        :return: The removed layer.
        """
        layer = self[index]
        self.remove(layer)
        return layer

    def clear(self) -> None:
        """Remove all the layers."""
        for layer in self._layers:
            layer._parent = None
        self._layers.clear()
        self._mark_updated("Clear Layers")

    @property
    def history(self) -> tuple[str, ...]:
        """
        Names of the edits made since the history was last cleared, oldest
        first.

        :return: `tuple`
        """
        return tuple(self._history)

    def is_updated(self) -> bool:
        """
        Returns whether the stack has been edited since the history was last
        cleared.

        :return: `bool`
        """
        return bool(self._history)

    def clear_history(self) -> None:
        """Forget the undo history."""
        self._history.clear()

    def _mark_updated(self, action: str) -> None:
        logger.debug("%s: %s", self.__class__.__name__, action)
        self._history.append(action)

    @property
    def selection_layer(self) -> Optional[Layer]:
        """Transient selection layer, or `None`."""
        return self._selection_layer

    def create_selection_layer(self) -> Layer:
        """
        Create the transient selection layer of the canvas size, replacing
        any previous one.

        :return: :py:class:`Layer`
        """
        self._selection_layer = Layer.new("Selection Layer", self.width, self.height)
        return self._selection_layer

    def discard_selection_layer(self) -> None:
        """Drop the transient selection layer, if any."""
        self._selection_layer = None

    def flatten(
        self, viewport: Optional[tuple[int, int, int, int]] = None
    ) -> Image.Image:
        """
        Flattened composite of the visible layers.

        :param viewport: (left, top, right, bottom) box to render. Default is
            the canvas.
        :return: RGBA :py:class:`PIL.Image.Image` of the viewport size.
        """
        from ora_tools.composite import composite_pil

        return composite_pil(self, viewport=viewport)

    def __repr__(self) -> str:
        return "%s(size=%dx%d layers=%d)" % (
            self.__class__.__name__,
            self.width,
            self.height,
            len(self),
        )

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text(self.__repr__())
            return

        p.text(self.__repr__())
        with p.indent(2):
            for idx, layer in reversed(list(enumerate(self))):
                p.break_()
                p.text("[%d] " % idx)
                p.text(layer.__repr__())
