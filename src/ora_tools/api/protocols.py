"""
Protocol definitions for the layer stack collaborators.

The importer and exporter only talk to the destination through these
protocols, so a host application can feed an OpenRaster file directly into
its own layer manager. :py:class:`~ora_tools.api.layers.LayerStack` is the
default implementation.
"""

from typing import Iterator, Optional, Protocol

from PIL import Image


class LayerProtocol(Protocol):
    """
    Protocol defining the Layer interface for type checking.

    This protocol specifies the public interface that all Layer objects must
    implement to be read by the exporter or populated by the importer.
    """

    @property
    def name(self) -> str:
        """Layer name."""
        ...

    @name.setter
    def name(self, value: str) -> None: ...

    @property
    def opacity(self) -> float:
        """Opacity in [0.0, 1.0]."""
        ...

    @opacity.setter
    def opacity(self, value: float) -> None: ...

    @property
    def visible(self) -> bool:
        """Layer visibility. A hidden layer is not visible."""
        ...

    @visible.setter
    def visible(self, value: bool) -> None: ...

    @property
    def surface(self) -> Image.Image:
        """RGBA raster surface."""
        ...

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the surface."""
        ...

    def is_visible(self) -> bool:
        """Whether the layer takes part in compositing."""
        ...


class LayerStackProtocol(Protocol):
    """
    Protocol defining the layer stack sink for type checking.

    Layers are ordered bottom to top: index 0 is the bottom layer.
    """

    @property
    def size(self) -> tuple[int, int]:
        """Canvas (width, height)."""
        ...

    @size.setter
    def size(self, value: tuple[int, int]) -> None: ...

    def __len__(self) -> int: ...

    def __iter__(self) -> Iterator[LayerProtocol]: ...

    def __getitem__(self, key: int) -> LayerProtocol: ...

    def clear(self) -> None:
        """Remove all the layers."""
        ...

    def clear_history(self) -> None:
        """Forget the undo history."""
        ...

    def discard_selection_layer(self) -> None:
        """Drop the transient selection layer, if any."""
        ...

    def create_layer(self, name: str, width: int, height: int) -> LayerProtocol:
        """Create a transparent layer without inserting it."""
        ...

    def insert(self, index: int, layer: LayerProtocol) -> None:
        """Insert the layer at the given stack position."""
        ...

    def flatten(
        self, viewport: Optional[tuple[int, int, int, int]] = None
    ) -> Image.Image:
        """
        Flattened composite of all the visible layers.

        :param viewport: (left, top, right, bottom) box to render, default
            is the canvas.
        """
        ...
