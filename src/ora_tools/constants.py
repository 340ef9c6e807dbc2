"""
Various constants for ora_tools
"""

from enum import Enum

#: Content of the ``mimetype`` entry. Written as ASCII without a newline.
MIMETYPE = "image/openraster"

#: Largest side of the embedded thumbnail in pixels.
THUMBNAIL_MAX_SIZE = 256

#: Archive path template for layer images, filled with the stack index.
LAYER_SRC = "data/layer%d.png"

#: Default name for layers without a ``name`` attribute.
DEFAULT_LAYER_NAME = "Layer %d"

#: Name of the root ``stack`` element.
ROOT_STACK_NAME = "root"


class Entry(str, Enum):
    """
    Well-known archive entry names.
    """

    MIMETYPE = "mimetype"
    STACK_XML = "stack.xml"
    THUMBNAIL = "Thumbnails/thumbnail.png"


class Visibility(str, Enum):
    """
    Values of the ``visibility`` layer attribute.
    """

    VISIBLE = "visible"
    HIDDEN = "hidden"
