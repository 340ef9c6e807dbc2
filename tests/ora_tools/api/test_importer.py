import io
import logging
from pathlib import Path

import pytest
from PIL import Image

from ora_tools.api.importer import import_layers
from ora_tools.api.layers import Layer, LayerStack
from ora_tools.errors import (
    ArchiveOpenError,
    DimensionParseError,
    EmptyStackError,
    LayerImportError,
    ManifestParseError,
)

from ..utils import BLUE, GREEN, RED, TRANSPARENT, make_ora, make_zip, png_bytes, solid

logger = logging.getLogger(__name__)


@pytest.fixture
def stack() -> LayerStack:
    stack = LayerStack((3, 3))
    stack.append(Layer.new("Existing", 3, 3))
    stack.create_selection_layer()
    return stack


def test_import_order(two_layer_path: Path) -> None:
    stack = LayerStack()
    result = import_layers(two_layer_path, stack)
    assert result.ok
    assert result.size == (8, 6)
    assert stack.size == (8, 6)
    assert [layer.name for layer in stack] == ["Bottom", "Top"]
    assert result.layers == list(stack)
    assert stack[0].opacity == 1.0
    assert stack[1].opacity == 0.5
    assert all(layer.size == (8, 6) for layer in stack)
    assert stack[0].surface.getpixel((7, 5)) == RED
    assert stack[1].surface.getpixel((1, 1)) == BLUE
    assert stack[1].surface.getpixel((0, 0)) == TRANSPARENT
    assert stack[1].surface.getpixel((5, 4)) == TRANSPARENT


def test_import_file_object(two_layer_file: io.BytesIO) -> None:
    stack = LayerStack()
    import_layers(two_layer_file, stack)
    assert len(stack) == 2


def test_import_replaces_content(two_layer_ora: bytes, stack: LayerStack) -> None:
    existing = stack[0]
    import_layers(io.BytesIO(two_layer_ora), stack)
    assert existing not in stack
    assert existing.parent is None
    assert stack.selection_layer is None
    assert stack.history == ()
    assert not stack.is_updated()


@pytest.mark.parametrize(
    "offset, inside, outside",
    [
        ((2, 1), [(2, 1), (3, 2)], [(1, 1), (4, 3), (2, 0)]),
        ((-1, -1), [(0, 0)], [(1, 1)]),
        ((3, 3), [(3, 3)], [(2, 2)]),
    ],
)
def test_import_offset(offset, inside, outside) -> None:
    data = make_ora(
        (4, 4),
        [{"name": "L", "src": "a.png", "x": offset[0], "y": offset[1]}],
        {"a.png": solid((2, 2), GREEN)},
    )
    stack = LayerStack()
    import_layers(io.BytesIO(data), stack)
    surface = stack[0].surface
    assert surface.size == (4, 4)
    for xy in inside:
        assert surface.getpixel(xy) == GREEN
    for xy in outside:
        assert surface.getpixel(xy) == TRANSPARENT


def test_import_defaults() -> None:
    data = make_ora(
        (2, 2),
        [{"src": "a.png"}, {"src": "b.png", "name": "B"}],
        {"a.png": solid((2, 2), RED), "b.png": solid((2, 2), BLUE)},
    )
    stack = LayerStack()
    import_layers(io.BytesIO(data), stack)
    assert [layer.name for layer in stack] == ["B", "Layer 0"]
    assert all(layer.opacity == 1.0 and layer.visible for layer in stack)


def test_import_visibility() -> None:
    data = make_ora(
        (1, 1),
        [
            {"src": "a.png", "visibility": "hidden", "opacity": "0.7"},
            {"src": "a.png", "opacity": "0"},
        ],
        {"a.png": solid((1, 1), RED)},
    )
    stack = LayerStack()
    import_layers(io.BytesIO(data), stack)
    assert stack[0].visible and stack[0].opacity == 0.0
    assert not stack[1].visible and stack[1].opacity == pytest.approx(0.7)


def test_import_paletted_png() -> None:
    image = Image.new("P", (2, 1))
    image.putpalette([255, 0, 0, 0, 0, 255])
    image.putpixel((1, 0), 1)
    image.info["transparency"] = 0
    data = make_ora((2, 1), [{"src": "a.png"}], {"a.png": png_bytes(image)})
    stack = LayerStack()
    import_layers(io.BytesIO(data), stack)
    assert stack[0].surface.mode == "RGBA"
    assert stack[0].surface.getpixel((0, 0))[3] == 0
    assert stack[0].surface.getpixel((1, 0)) == BLUE


@pytest.mark.parametrize(
    "broken",
    [
        {"name": "Middle", "src": "data/corrupt.png"},
        {"name": "Middle", "src": "data/missing.png"},
        {"name": "Middle", "src": "data/not-png.png"},
        {"name": "Middle"},
    ],
)
def test_import_partial_failure(broken, caplog) -> None:
    valid = png_bytes(solid((2, 2), RED))
    data = make_ora(
        (2, 2),
        [
            {"name": "Top", "src": "data/top.png"},
            broken,
            {"name": "Bottom", "src": "data/bottom.png"},
        ],
        {
            "data/top.png": valid,
            "data/bottom.png": valid,
            "data/corrupt.png": valid[: len(valid) // 2],
            "data/not-png.png": b"GIF89a not really",
        },
    )
    stack = LayerStack()
    with caplog.at_level(logging.WARNING, logger="ora_tools"):
        result = import_layers(io.BytesIO(data), stack)

    assert [layer.name for layer in stack] == ["Bottom", "Top"]
    assert not result.ok
    assert len(result.errors) == 1
    error = result.errors[0]
    assert isinstance(error, LayerImportError)
    assert error.index == 1
    assert error.name == "Middle"
    assert error.src == broken.get("src", "")
    assert error.cause is not None
    assert "Middle" in caplog.text


def test_import_wrong_mimetype(caplog) -> None:
    data = make_ora(
        (1, 1), [{"src": "a.png"}], {"a.png": solid((1, 1), RED)}, "image/png"
    )
    stack = LayerStack()
    with caplog.at_level(logging.WARNING, logger="ora_tools"):
        import_layers(io.BytesIO(data), stack)
    assert len(stack) == 1
    assert "mimetype" in caplog.text


@pytest.mark.parametrize(
    "data, error",
    [
        (b"not a zip", ArchiveOpenError),
        (make_zip([("mimetype", "image/openraster")]), ManifestParseError),
        (make_zip([("stack.xml", "<image w='1' h='1'><stack")]), ManifestParseError),
        (make_ora(None, [{"src": "a.png"}]), DimensionParseError),
        (make_ora(("10", "-3"), [{"src": "a.png"}]), DimensionParseError),
        (make_ora((10, 10), []), EmptyStackError),
        (make_ora((10, 10), [{"src": "a.png", "x": "1.5"}]), ManifestParseError),
    ],
)
def test_import_fatal(stack: LayerStack, data: bytes, error: type) -> None:
    history = stack.history
    existing = list(stack)
    selection = stack.selection_layer
    with pytest.raises(error):
        import_layers(io.BytesIO(data), stack)
    assert list(stack) == existing
    assert stack.size == (3, 3)
    assert stack.history == history
    assert stack.selection_layer is selection


def test_import_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ArchiveOpenError):
        import_layers(tmp_path / "missing.ora", LayerStack())
