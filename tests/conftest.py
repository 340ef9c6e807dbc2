"""Pytest configuration for ora-tools tests."""

import io
from pathlib import Path

import pytest
from PIL import Image

from .ora_tools.utils import RED, TRANSPARENT, make_ora, solid


@pytest.fixture
def two_layer_ora() -> bytes:
    """8x6 document with a red bottom layer and a half-transparent top layer."""
    top = Image.new("RGBA", (4, 3), TRANSPARENT)
    top.paste(solid((2, 2), (0, 0, 255, 255)), (1, 1))
    return make_ora(
        (8, 6),
        [
            {"name": "Top", "src": "data/layer1.png", "opacity": "0.50"},
            {"name": "Bottom", "src": "data/layer0.png"},
        ],
        {"data/layer0.png": solid((8, 6), RED), "data/layer1.png": top},
    )


@pytest.fixture
def two_layer_path(two_layer_ora: bytes, tmp_path: Path) -> Path:
    path = tmp_path / "two-layers.ora"
    path.write_bytes(two_layer_ora)
    return path


@pytest.fixture
def two_layer_file(two_layer_ora: bytes) -> io.BytesIO:
    return io.BytesIO(two_layer_ora)
