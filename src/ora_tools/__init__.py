"""
ora-tools: Python package for reading and writing OpenRaster (.ora) files.

OpenRaster is a zip container holding a ``stack.xml`` manifest, one PNG per
layer, and a thumbnail. This package provides both the low-level container
structures and a high-level layer stack API.

Basic usage::

    from ora_tools import OpenRasterImage

    # Open and read an ORA file
    image = OpenRasterImage.open('example.ora')

    # Iterate through layers, bottom to top
    for layer in image:
        print(layer.name, layer.opacity)

    # Export to PNG
    image.composite().save('output.png')

Architecture:

- :py:mod:`ora_tools.ora`: Low-level manifest and archive structures
- :py:mod:`ora_tools.api`: High-level user-facing API (primary interface)
- :py:mod:`ora_tools.composite`: Layer flattening engine
"""

from ora_tools.api.ora_image import OpenRasterImage
from ora_tools.version import __version__

__all__ = ["OpenRasterImage", "__version__"]
