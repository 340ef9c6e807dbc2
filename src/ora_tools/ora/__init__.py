"""
Low-level OpenRaster container structures.

This subpackage maps the zip archive and the ``stack.xml`` manifest onto
Python objects. The manifest records are attrs_ classes that read from and
write to :py:mod:`xml.etree.ElementTree` elements, and the archive classes
wrap :py:mod:`zipfile` with the entry naming rules of the format.

Example::

    from ora_tools.ora import ArchiveReader

    with ArchiveReader('example.ora') as archive:
        manifest = archive.read_manifest()
        for layer in manifest.layers:
            print(layer.name, layer.src)

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

from ora_tools.ora.archive import ArchiveReader, ArchiveWriter
from ora_tools.ora.manifest import LayerElement, Manifest, StackElement

__all__ = [
    "ArchiveReader",
    "ArchiveWriter",
    "LayerElement",
    "Manifest",
    "StackElement",
]
