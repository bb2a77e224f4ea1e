"""Shared pytest fixtures for pulsestore tests.

Images are rendered in-process with Pillow so no binary fixtures are checked in.
"""

import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from pulsestore.blobs import InMemoryBlobStore
from pulsestore.config import EngineConfig
from pulsestore.kvstore import InMemoryKeyValueStore

ImageFactory = Callable[..., bytes]


def render_image(
    width: int,
    height: int,
    *,
    fmt: str = "PNG",
    mode: str = "RGB",
    color: tuple[int, ...] = (200, 40, 40),
) -> bytes:
    """Encode a solid-color image of the given size."""
    image = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def dimensions(data: bytes) -> tuple[int, int]:
    """Decode an encoded image and return its size."""
    with Image.open(io.BytesIO(data)) as image:
        return image.size


@pytest.fixture
def make_image() -> ImageFactory:
    """Factory fixture producing encoded image bytes."""
    return render_image


@pytest.fixture
def image_size() -> Callable[[bytes], tuple[int, int]]:
    """Helper fixture returning ``(width, height)`` of encoded image bytes."""
    return dimensions


@pytest.fixture
def config(tmp_path: Path) -> EngineConfig:
    """Engine config rooted in a temporary data directory."""
    return EngineConfig(data_dir=tmp_path / "data")


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()
