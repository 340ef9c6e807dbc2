"""
Manifest structure.

The ``stack.xml`` manifest describes the canvas size and the layer stack::

    <?xml version='1.0' encoding='UTF-8'?>
    <image w="640" h="480">
      <stack opacity="1" name="root">
        <layer opacity="1.00" name="Top" src="data/layer1.png" />
        <layer opacity="0.50" name="Bottom" src="data/layer0.png" />
      </stack>
    </image>

Layers are listed top to bottom.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, ClassVar

from attrs import define, field

from ora_tools.constants import DEFAULT_LAYER_NAME, ROOT_STACK_NAME, Visibility
from ora_tools.errors import DimensionParseError, EmptyStackError, ManifestParseError
from ora_tools.ora.base import BaseElement
from ora_tools.ora.xml_utils import (
    clamp,
    find_first,
    format_number,
    format_opacity,
    get_attribute,
    parse_float,
    parse_int,
)
from ora_tools.validators import positive, range_

logger = logging.getLogger(__name__)


@define
class LayerElement(BaseElement):
    """
    Layer element.

    .. py:attribute:: src

        Archive path of the layer image, e.g. ``data/layer0.png``. Empty when
        the manifest omits it.

    .. py:attribute:: name

        Layer name.

    .. py:attribute:: opacity

        Opacity in [0.0, 1.0].

    .. py:attribute:: x

        Horizontal offset of the layer image on the canvas.

    .. py:attribute:: y

        Vertical offset of the layer image on the canvas.

    .. py:attribute:: visible

        Visibility. Hidden layers are written with zero opacity; the
        ``visibility`` attribute is only read.
    """

    tag: ClassVar[str] = "layer"

    src: str = ""
    name: str = ""
    opacity: float = field(default=1.0, converter=float, validator=range_(0.0, 1.0))
    x: int = 0
    y: int = 0
    visible: bool = True

    @classmethod
    def read(cls, element: ET.Element, index: int = 0, **kwargs: Any) -> "LayerElement":
        name = get_attribute(element, "name", DEFAULT_LAYER_NAME % index)
        try:
            x = parse_int(get_attribute(element, "x", "0"))
            y = parse_int(get_attribute(element, "y", "0"))
            opacity = parse_float(get_attribute(element, "opacity", "1"))
        except ValueError as e:
            raise ManifestParseError(
                'Invalid attribute in layer "%s": %s' % (name, e)
            ) from e
        if not (0.0 <= opacity <= 1.0):
            logger.debug("Clamping opacity %g of layer %r", opacity, name)
            opacity = clamp(opacity, 0.0, 1.0)
        visibility = get_attribute(element, "visibility", Visibility.VISIBLE.value)
        return cls(
            src=element.get("src", ""),
            name=name,
            opacity=opacity,
            x=x,
            y=y,
            visible=visibility.strip().lower() != Visibility.HIDDEN.value,
        )

    def write(self, **kwargs: Any) -> ET.Element:
        element = ET.Element(self.tag)
        element.set("opacity", format_opacity(self.opacity) if self.visible else "0")
        element.set("name", self.name)
        element.set("src", self.src)
        if self.x or self.y:
            element.set("x", str(self.x))
            element.set("y", str(self.y))
        return element


@define
class StackElement(BaseElement):
    """
    Stack element. The root stack holds every layer of the image.

    .. py:attribute:: name
    .. py:attribute:: opacity
    .. py:attribute:: layers

        List of :py:class:`LayerElement`, top to bottom.
    """

    tag: ClassVar[str] = "stack"

    name: str = ROOT_STACK_NAME
    opacity: float = field(default=1.0, converter=float, validator=range_(0.0, 1.0))
    layers: list[LayerElement] = field(factory=list)

    @classmethod
    def read(cls, element: ET.Element, **kwargs: Any) -> "StackElement":
        try:
            opacity = parse_float(get_attribute(element, "opacity", "1"))
        except ValueError as e:
            raise ManifestParseError("Invalid stack opacity: %s" % e) from e
        # Nested stacks are flattened into a single list in document order.
        layers = [
            LayerElement.read(layer_element, index)
            for index, layer_element in enumerate(element.iter(LayerElement.tag))
        ]
        return cls(
            name=get_attribute(element, "name", ROOT_STACK_NAME),
            opacity=clamp(opacity, 0.0, 1.0),
            layers=layers,
        )

    def write(self, **kwargs: Any) -> ET.Element:
        element = ET.Element(self.tag)
        element.set("opacity", format_number(self.opacity))
        element.set("name", self.name)
        for layer in self.layers:
            element.append(layer.write())
        return element


@define
class Manifest(BaseElement):
    """
    Image element, the root of ``stack.xml``.

    Reading validates the whole document: the dimensions must be positive
    integers and the first stack must hold at least one layer.

    .. py:attribute:: width
    .. py:attribute:: height
    .. py:attribute:: stack

        Root :py:class:`StackElement`.
    """

    tag: ClassVar[str] = "image"

    width: int = field(validator=positive)
    height: int = field(validator=positive)
    stack: StackElement = field(factory=StackElement)

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def layers(self) -> list[LayerElement]:
        """Layer elements of the root stack, top to bottom."""
        return self.stack.layers

    @classmethod
    def read(cls, element: ET.Element, **kwargs: Any) -> "Manifest":
        width = _read_dimension(element, "w")
        height = _read_dimension(element, "h")

        stack_element = find_first(element, StackElement.tag)
        if stack_element is None:
            raise EmptyStackError("No stack found in OpenRaster file")
        stack = StackElement.read(stack_element)
        if not stack.layers:
            raise EmptyStackError("No layers found in OpenRaster file")
        logger.debug("Manifest %dx%d with %d layers", width, height, len(stack.layers))
        return cls(width=width, height=height, stack=stack)

    def write(self, **kwargs: Any) -> ET.Element:
        element = ET.Element(self.tag)
        element.set("w", str(self.width))
        element.set("h", str(self.height))
        element.append(self.stack.write())
        return element


def _read_dimension(element: ET.Element, key: str) -> int:
    value = element.get(key)
    if value is None:
        raise DimensionParseError("Missing '%s' attribute in <%s>" % (key, element.tag))
    try:
        result = parse_int(value)
    except ValueError as e:
        raise DimensionParseError(
            "Invalid '%s' attribute in <%s>: %r" % (key, element.tag, value)
        ) from e
    if result <= 0:
        raise DimensionParseError(
            "'%s' attribute in <%s> must be positive, got %d" % (key, element.tag, result)
        )
    return result
