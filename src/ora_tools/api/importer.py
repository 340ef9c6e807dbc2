"""
OpenRaster importer.

Reads an ORA archive into a layer stack. The manifest is validated as a
whole before the destination is touched, so a rejected file leaves the
stack, its history and its canvas size as they were. After that, every
layer is loaded on its own: a layer whose image is missing or corrupt is
reported in :py:attr:`ImportResult.errors` and skipped, and the rest of the
file still loads.

Example::

    from ora_tools.api.importer import import_layers
    from ora_tools.api.layers import LayerStack

    stack = LayerStack()
    result = import_layers('example.ora', stack)
    for error in result.errors:
        print(error)
"""

import logging
import zipfile
import zlib

from attrs import define, field
from PIL import Image

from ora_tools.api import pil_io
from ora_tools.api.protocols import LayerProtocol, LayerStackProtocol
from ora_tools.constants import MIMETYPE
from ora_tools.errors import LayerImportError
from ora_tools.ora.archive import ArchiveReader, PathOrFile
from ora_tools.ora.manifest import LayerElement

logger = logging.getLogger(__name__)

# Failures of a single layer. They are reported and the import goes on.
_LAYER_ERRORS = (
    KeyError,
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    zlib.error,
    zipfile.BadZipFile,
    Image.DecompressionBombError,
)


@define
class ImportResult:
    """
    Outcome of :py:func:`import_layers`.

    .. py:attribute:: size

        Canvas (width, height).

    .. py:attribute:: layers

        Imported layers, bottom to top.

    .. py:attribute:: errors

        :py:class:`~ora_tools.errors.LayerImportError` for every skipped
        layer, in manifest order.
    """

    size: tuple[int, int]
    layers: list[LayerProtocol] = field(factory=list)
    errors: list[LayerImportError] = field(factory=list)

    @property
    def ok(self) -> bool:
        """True if every layer in the manifest was imported."""
        return not self.errors


def import_layers(fp: PathOrFile, stack: LayerStackProtocol) -> ImportResult:
    """
    Import an OpenRaster file into ``stack``.

    On success the previous content of ``stack`` is replaced: its layers,
    undo history and selection layer are cleared and its size is set to the
    canvas size of the file.

    :param fp: filename or file-like object.
    :param stack: destination layer stack.
    :return: :py:class:`ImportResult`
    :raises ArchiveOpenError: if the file is unreadable or not a zip archive.
    :raises ManifestParseError: if ``stack.xml`` is missing or malformed.
    :raises DimensionParseError: if the canvas size is missing or invalid.
    :raises EmptyStackError: if the manifest lists no layers.
    """
    with ArchiveReader(fp) as archive:
        mimetype = archive.read_mimetype()
        if mimetype != MIMETYPE:
            logger.warning("Unexpected mimetype %r in %r", mimetype, archive.fp)

        manifest = archive.read_manifest()
        width, height = manifest.size

        stack.clear()
        stack.discard_selection_layer()
        stack.size = manifest.size

        errors: list[LayerImportError] = []
        # Manifest lists layers top to bottom; inserting each at the bottom
        # rebuilds the same order in the stack.
        for index, element in enumerate(manifest.layers):
            try:
                layer = _load_layer(archive, stack, element, width, height)
            except _LAYER_ERRORS as e:
                error = LayerImportError(index, element.name, element.src, e)
                logger.warning("%s", error)
                errors.append(error)
                continue
            stack.insert(0, layer)
        # Loading the file is not an edit.
        stack.clear_history()

        logger.debug(
            "Imported %d of %d layers from %r",
            len(manifest.layers) - len(errors),
            len(manifest.layers),
            archive.fp,
        )
        return ImportResult(size=manifest.size, layers=list(stack), errors=errors)


def _load_layer(
    archive: ArchiveReader,
    stack: LayerStackProtocol,
    element: LayerElement,
    width: int,
    height: int,
) -> LayerProtocol:
    image = pil_io.decode_png(archive.read(element.src))
    try:
        layer = stack.create_layer(element.name, width, height)
        layer.opacity = element.opacity
        layer.visible = element.visible
        pil_io.paint(layer.surface, image, (element.x, element.y))
    finally:
        image.close()
    return layer
