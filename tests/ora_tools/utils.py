import io
import logging
import zipfile
from typing import Any, Optional, Union

from PIL import Image

logging.basicConfig(level=logging.DEBUG)

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


def solid(size: tuple[int, int], color: tuple[int, ...]) -> Image.Image:
    return Image.new("RGBA", size, color)


def png_bytes(image: Image.Image) -> bytes:
    with io.BytesIO() as f:
        image.save(f, format="PNG")
        return f.getvalue()


def stack_xml(
    size: Optional[tuple[Any, Any]],
    layers: list[dict[str, Any]],
    stack_attrs: str = ' opacity="1" name="root"',
) -> bytes:
    """Build a manifest. ``layers`` are attribute dicts, top to bottom."""
    image_attrs = "" if size is None else ' w="%s" h="%s"' % size
    layer_lines = "".join(
        "<layer %s/>" % " ".join('%s="%s"' % (k, v) for k, v in layer.items())
        for layer in layers
    )
    return (
        "<?xml version='1.0' encoding='UTF-8'?>"
        "<image%s><stack%s>%s</stack></image>" % (image_attrs, stack_attrs, layer_lines)
    ).encode("utf-8")


def make_zip(entries: list[tuple[str, Union[bytes, str]]]) -> bytes:
    with io.BytesIO() as f:
        with zipfile.ZipFile(f, "w", compression=zipfile.ZIP_DEFLATED) as z:
            for name, data in entries:
                z.writestr(name, data)
        return f.getvalue()


def make_ora(
    size: Optional[tuple[Any, Any]],
    layers: list[dict[str, Any]],
    images: Optional[dict[str, Union[Image.Image, bytes]]] = None,
    mimetype: Optional[str] = "image/openraster",
) -> bytes:
    """Build an ORA archive in memory."""
    entries: list[tuple[str, Union[bytes, str]]] = []
    if mimetype is not None:
        entries.append(("mimetype", mimetype))
    entries.append(("stack.xml", stack_xml(size, layers)))
    for name, image in (images or {}).items():
        data = image if isinstance(image, bytes) else png_bytes(image)
        entries.append((name, data))
    return make_zip(entries)


def read_entries(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as z:
        return {name: z.read(name) for name in z.namelist()}


def open_entry_image(data: bytes, name: str) -> Image.Image:
    with zipfile.ZipFile(io.BytesIO(data)) as z:
        image = Image.open(io.BytesIO(z.read(name)))
        image.load()
        return image
