"""
OpenRaster exporter.

Writes a layer stack as an ORA archive::

    mimetype                   image/openraster, stored
    data/layer0.png            bottom layer
    data/layer1.png
    ...
    stack.xml                  manifest, layers listed top to bottom
    Thumbnails/thumbnail.png   flattened image, at most 256px

Any failure aborts the export. The destination is written in place, so a
failed export leaves an incomplete file behind that must not be used.
"""

import logging

from PIL import Image

from ora_tools.api import pil_io
from ora_tools.api.protocols import LayerStackProtocol
from ora_tools.constants import LAYER_SRC, THUMBNAIL_MAX_SIZE, Entry
from ora_tools.errors import ArchiveCreateError, EmptyStackError
from ora_tools.ora.archive import ArchiveWriter, PathOrFile
from ora_tools.ora.manifest import LayerElement, Manifest, StackElement

logger = logging.getLogger(__name__)


def export_layers(
    stack: LayerStackProtocol,
    fp: PathOrFile,
    thumbnail_size: int = THUMBNAIL_MAX_SIZE,
) -> None:
    """
    Export ``stack`` as an OpenRaster file.

    :param stack: layer stack to write. All the layers are expected to have
        the canvas size; the canvas size is taken from the first layer.
    :param fp: filename or file-like object. Existing files are overwritten.
    :param thumbnail_size: largest side of the embedded thumbnail.
    :raises EmptyStackError: if the stack has no layers.
    :raises ArchiveCreateError: if the archive cannot be created or written.
    """
    if len(stack) == 0:
        raise EmptyStackError("Cannot export a stack without layers")
    manifest = build_manifest(stack)

    with ArchiveWriter(fp) as archive:
        archive.write_mimetype()

        for index, layer in enumerate(stack):
            name = LAYER_SRC % index
            archive.write(name, _encode(layer.surface, fp, name))

        archive.write_manifest(manifest)

        # The thumbnail covers the same canvas as the manifest.
        composite = stack.flatten(viewport=(0, 0) + manifest.size)
        try:
            thumbnail = pil_io.make_thumbnail(composite, thumbnail_size)
            try:
                archive.write(
                    Entry.THUMBNAIL.value,
                    _encode(thumbnail, fp, Entry.THUMBNAIL.value),
                )
            finally:
                thumbnail.close()
        finally:
            composite.close()

    logger.debug("Exported %d layers to %r", len(stack), fp)


def build_manifest(stack: LayerStackProtocol) -> Manifest:
    """
    Build the manifest of ``stack``.

    Layers are listed from the highest stack index to the lowest, which is
    top to bottom. Hidden layers get zero opacity.

    :param stack: layer stack with at least one layer.
    :return: :py:class:`~ora_tools.ora.manifest.Manifest`
    """
    width, height = stack[0].surface.size
    layers = [
        LayerElement(
            src=LAYER_SRC % index,
            name=layer.name,
            opacity=layer.opacity,
            visible=layer.visible,
        )
        for index, layer in reversed(list(enumerate(stack)))
    ]
    return Manifest(width=width, height=height, stack=StackElement(layers=layers))


def _encode(image: Image.Image, fp: PathOrFile, name: str) -> bytes:
    try:
        return pil_io.encode_png(image)
    except (OSError, ValueError) as e:
        raise ArchiveCreateError(fp, name, e) from e
