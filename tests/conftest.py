"""Shared fixtures for the test suite.

All fixtures here produce real Pillow images / real files so tests exercise
actual code paths rather than hand-crafted stubs.
"""

import io
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image, ImageDraw

from inkexpr.config import PipelineConfig


# ── CLI runner ─────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# ── Config ─────────────────────────────────────────────────────────────────


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


# ── Image fixtures ─────────────────────────────────────────────────────────


def make_canvas(width: int = 200, height: int = 200) -> Image.Image:
    """A blank white RGB canvas, like a fresh drawing-surface snapshot."""
    return Image.new("RGB", (width, height), color=(255, 255, 255))


def draw_ink(image: Image.Image, box: tuple[int, int, int, int], color=(0, 0, 0)) -> Image.Image:
    """Fill the inclusive rectangle *box* with *color* and return the image."""
    ImageDraw.Draw(image).rectangle(box, fill=color)
    return image


@pytest.fixture
def blank_canvas() -> Image.Image:
    return make_canvas()


@pytest.fixture
def inked_canvas() -> Image.Image:
    """200×200 canvas with ink spanning exactly (40, 80)–(160, 120)."""
    return draw_ink(make_canvas(), (40, 80, 160, 120))


@pytest.fixture
def png_bytes(inked_canvas) -> bytes:
    buf = io.BytesIO()
    inked_canvas.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """The inked canvas written to a temporary file on disk."""
    path = tmp_path / "drawing.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def blank_png_file(tmp_path: Path, blank_canvas) -> Path:
    path = tmp_path / "blank.png"
    blank_canvas.save(path, format="PNG")
    return path
