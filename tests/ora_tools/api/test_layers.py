import logging

import numpy as np
import pytest
from PIL import Image

from ora_tools.api.layers import Layer, LayerStack

from ..utils import BLUE, RED, TRANSPARENT, solid

logger = logging.getLogger(__name__)


@pytest.fixture
def stack() -> LayerStack:
    stack = LayerStack((4, 4))
    stack.extend(
        [
            Layer.frompil(solid((4, 4), RED), name="Bottom"),
            Layer.frompil(solid((4, 4), BLUE), name="Top"),
        ]
    )
    stack.clear_history()
    return stack


def test_layer_new() -> None:
    layer = Layer.new("Empty", 3, 2)
    assert layer.size == (3, 2)
    assert layer.bbox == (0, 0, 3, 2)
    assert layer.kind == "pixel"
    assert layer.surface.mode == "RGBA"
    assert layer.surface.getpixel((2, 1)) == TRANSPARENT
    assert layer.parent is None


def test_layer_converts_mode() -> None:
    layer = Layer(Image.new("RGB", (2, 2), (1, 2, 3)))
    assert layer.surface.mode == "RGBA"
    assert layer.surface.getpixel((0, 0)) == (1, 2, 3, 255)


def test_layer_type_error() -> None:
    with pytest.raises(TypeError):
        Layer(b"not an image")  # type: ignore[arg-type]


@pytest.mark.parametrize("opacity", [-0.1, 1.01])
def test_layer_opacity_range(opacity: float) -> None:
    layer = Layer.new("L", 1, 1)
    with pytest.raises(ValueError):
        layer.opacity = opacity
    with pytest.raises(ValueError):
        Layer(Image.new("RGBA", (1, 1)), opacity=opacity)


def test_layer_frompil() -> None:
    layer = Layer.frompil(
        solid((2, 2), RED), size=(4, 4), left=1, top=2, opacity=0.25, visible=False
    )
    assert layer.size == (4, 4)
    assert layer.surface.getpixel((1, 2)) == RED
    assert layer.surface.getpixel((0, 0)) == TRANSPARENT
    assert layer.opacity == 0.25
    assert not layer.visible
    assert not layer.is_visible()


def test_layer_paint_overwrites() -> None:
    layer = Layer.frompil(solid((2, 2), RED))
    layer.paint(solid((1, 1), TRANSPARENT), (1, 1))
    assert layer.surface.getpixel((0, 0)) == RED
    assert layer.surface.getpixel((1, 1)) == TRANSPARENT


def test_layer_topil_is_copy() -> None:
    layer = Layer.frompil(solid((2, 2), RED))
    image = layer.topil()
    image.putpixel((0, 0), BLUE)
    assert layer.surface.getpixel((0, 0)) == RED


@pytest.mark.parametrize("channel, shape", [(None, 4), ("color", 3), ("alpha", 1)])
def test_layer_numpy(channel, shape: int) -> None:
    array = Layer.frompil(solid((3, 2), RED)).numpy(channel)
    assert array.shape == (2, 3, shape)
    assert array.dtype == np.float32
    assert array.max() == 1.0


def test_stack_order(stack: LayerStack) -> None:
    assert [layer.name for layer in stack] == ["Bottom", "Top"]
    assert [layer.name for layer in reversed(stack)] == ["Top", "Bottom"]
    assert stack[-1].name == "Top"
    assert stack[0].parent is stack
    assert stack.viewbox == (0, 0, 4, 4)


def test_stack_insert(stack: LayerStack) -> None:
    layer = stack.create_layer("New", 4, 4)
    assert layer not in stack
    stack.insert(0, layer)
    assert stack[0] is layer
    assert layer.parent is stack
    assert stack.history == ("Add Layer",)

    with pytest.raises(TypeError):
        stack.insert(0, "layer")  # type: ignore[arg-type]


def test_stack_move_between_stacks(stack: LayerStack) -> None:
    other = LayerStack((4, 4))
    layer = stack[0]
    other.append(layer)
    assert layer not in stack
    assert layer.parent is other
    assert len(stack) == 1


def test_stack_remove(stack: LayerStack) -> None:
    top = stack.pop()
    assert top.name == "Top"
    assert top.parent is None
    with pytest.raises(ValueError):
        stack.remove(top)
    del stack[0]
    assert len(stack) == 0
    assert stack.history == ("Delete Layer", "Delete Layer")


def test_stack_clear(stack: LayerStack) -> None:
    layers = list(stack)
    stack.clear()
    assert len(stack) == 0
    assert all(layer.parent is None for layer in layers)


def test_stack_history(stack: LayerStack) -> None:
    assert not stack.is_updated()
    stack[0].name = "Renamed"
    stack[0].opacity = 0.5
    stack[1].visible = False
    stack[1].visible = False
    assert stack.is_updated()
    assert stack.history == ("Rename Layer", "Layer Opacity", "Layer Hidden")
    stack.clear_history()
    assert stack.history == ()


def test_stack_size() -> None:
    stack = LayerStack()
    assert stack.size == (0, 0)
    stack.size = (5, 6)
    assert (stack.width, stack.height) == (5, 6)
    with pytest.raises(ValueError):
        stack.size = (-1, 2)


def test_selection_layer(stack: LayerStack) -> None:
    assert stack.selection_layer is None
    selection = stack.create_selection_layer()
    assert selection.size == (4, 4)
    assert selection not in stack
    stack.discard_selection_layer()
    assert stack.selection_layer is None


def test_stack_flatten(stack: LayerStack) -> None:
    assert stack.flatten().getpixel((0, 0)) == BLUE
    stack[1].visible = False
    assert stack.flatten().getpixel((0, 0)) == RED


def test_repr(stack: LayerStack) -> None:
    assert repr(stack) == "LayerStack(size=4x4 layers=2)"
    stack[1].visible = False
    assert repr(stack[1]) == "Layer('Top' size=4x4 opacity=1.00 hidden)"
