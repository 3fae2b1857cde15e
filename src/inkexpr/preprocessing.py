"""Image preprocessing that isolates hand-drawn ink for the recognizer.

Every stage takes a Pillow image and returns a new one; inputs are never
modified in place.

Pipeline
--------
1. Ink bounds: tight box around every non-background pixel.  Boxes
   narrower or shorter than ``min_ink_extent_px`` are stray
   marks and count as no ink.

2. Crop: the box grown by ``margin_px`` on each side, clamped to
   the canvas, so stroke edges are not clipped.

3. Pad: centre the crop on a white canvas.  Very wide, short
   crops (a single line of arithmetic) get extra room above
   and below so the recognizer does not read canvas noise as
   a fraction bar or an exponent.

4. Upscale: bicubic magnification by an integer factor; thin strokes
   survive better at the recognizer's working resolution.

5. Binarize: mean-of-channels threshold to pure black / white, which
   removes the anti-aliasing grey left by the brush and by
   the upscale.
"""

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Callable, ClassVar, Optional

from PIL import Image, ImageChops, ImageColor, ImageMath

from inkexpr.config import PipelineConfig

logger = logging.getLogger(__name__)

Pixel = tuple[int, ...]

WHITE = (255, 255, 255)


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive pixel extent of the ink on a canvas."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    EMPTY: ClassVar["BoundingBox"]

    @property
    def is_empty(self) -> bool:
        return self.max_x < self.min_x or self.max_y < self.min_y

    @property
    def width(self) -> int:
        return 0 if self.is_empty else self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return 0 if self.is_empty else self.max_y - self.min_y + 1


EMPTY_BOX = BoundingBox(0, 0, -1, -1)
BoundingBox.EMPTY = EMPTY_BOX


# ── Helpers ────────────────────────────────────────────────────────────────────


def as_rgb(image: Image.Image) -> Image.Image:
    """Return *image* as RGB, flattening any transparency onto white."""
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    ):
        rgba = image.convert("RGBA")
        flat = Image.new("RGB", rgba.size, WHITE)
        flat.paste(rgba, mask=rgba.getchannel("A"))
        return flat
    return image.convert("RGB")


def is_near_white(pixel: Pixel, level: int = PipelineConfig.background_level) -> bool:
    """Per-pixel form of the default background test.

    Every channel at or above *level*, which defaults to the
    ``PipelineConfig`` background level.  Pass it to :func:`scan_ink_bounds`
    as *is_background* with the same level to reproduce the mask scan.
    """
    return all(channel >= level for channel in pixel)


def _ink_mask(image: Image.Image, level: int) -> Image.Image:
    # 255 wherever any channel falls below the background level.
    bands = [band.point(lambda v: 255 if v < level else 0) for band in image.split()]
    return reduce(ImageChops.lighter, bands)


def _fold_bounds(image: Image.Image, is_background: Callable[[Pixel], bool]) -> BoundingBox:
    width = image.width

    def step(acc, indexed):
        index, pixel = indexed
        if is_background(pixel):
            return acc
        x, y = index % width, index // width
        min_x, min_y, max_x, max_y = acc
        return min(min_x, x), min(min_y, y), max(max_x, x), max(max_y, y)

    start = (image.width, image.height, -1, -1)
    min_x, min_y, max_x, max_y = reduce(step, enumerate(image.get_flattened_data()), start)
    if max_x < 0:
        return EMPTY_BOX
    return BoundingBox(min_x, min_y, max_x, max_y)


def _background_for(mode: str):
    return ImageColor.getcolor("white", mode)


# ── Stages ─────────────────────────────────────────────────────────────────────


def scan_ink_bounds(
    image: Optional[Image.Image],
    config: PipelineConfig,
    is_background: Optional[Callable[[Pixel], bool]] = None,
) -> BoundingBox:
    """Return the tight box around all ink on *image*, or ``EMPTY_BOX``.

    With no *is_background* predicate the scan runs as a Pillow mask using
    ``config.background_level``.  A custom predicate receives each RGB pixel
    tuple exactly once.
    """
    if image is None or image.width == 0 or image.height == 0:
        return EMPTY_BOX

    rgb = as_rgb(image)
    if is_background is None:
        found = _ink_mask(rgb, config.background_level).getbbox()
        if found is None:
            return EMPTY_BOX
        left, top, right, bottom = found
        bounds = BoundingBox(left, top, right - 1, bottom - 1)
    else:
        bounds = _fold_bounds(rgb, is_background)

    if bounds.is_empty:
        return EMPTY_BOX
    if (
        bounds.max_x - bounds.min_x < config.min_ink_extent_px
        or bounds.max_y - bounds.min_y < config.min_ink_extent_px
    ):
        logger.debug("Ignoring ink smaller than %dpx: %s", config.min_ink_extent_px, bounds)
        return EMPTY_BOX
    return bounds


def crop_to_bounds(image: Image.Image, box: BoundingBox, margin: int) -> Image.Image:
    """Cut *box* plus *margin* out of *image*, clamped to the canvas."""
    if box.is_empty:
        raise ValueError("Cannot crop to an empty bounding box")
    left = max(0, box.min_x - margin)
    top = max(0, box.min_y - margin)
    right = min(image.width - 1, box.max_x + margin)
    bottom = min(image.height - 1, box.max_y + margin)
    return image.crop((left, top, right + 1, bottom + 1))


def padding_for(width: int, height: int, ratio: float, min_pad: int) -> tuple[int, int]:
    """Return ``(pad, vertical_boost)`` for a crop of the given size.

    ``pad`` rounds half up so the canvas size does not depend on banker's
    rounding.
    """
    pad = max(int(max(width, height) * ratio + 0.5), min_pad)
    boost = height if width > 3 * height else 0
    return pad, boost


def pad_canvas(image: Image.Image, ratio: float, min_pad: int) -> Image.Image:
    """Centre *image* on a white canvas with proportional margins."""
    pad, boost = padding_for(image.width, image.height, ratio, min_pad)
    size = (image.width + 2 * pad, image.height + 2 * pad + 2 * boost)
    canvas = Image.new(image.mode, size, _background_for(image.mode))
    canvas.paste(image, (pad, pad + boost))
    return canvas


def upscale(image: Image.Image, factor: int) -> Image.Image:
    if factor < 1:
        raise ValueError(f"Scale factor must be >= 1, got {factor}")
    if factor == 1:
        return image.copy()
    size = (image.width * factor, image.height * factor)
    return image.resize(size, Image.Resampling.BICUBIC)


def binarize(image: Image.Image, threshold: int) -> Image.Image:
    """Map every pixel to 0 (ink) or 255 (background) as a mode ``"L"`` image.

    Brightness is the integer mean of the R, G and B channels; pixels darker
    than *threshold* become ink.
    """
    if not 0 <= threshold <= 255:
        raise ValueError(f"Threshold must be within 0..255, got {threshold}")
    r, g, b = as_rgb(image).split()
    # floor((r + g + b) / 3) < t  <=>  r + g + b < 3t for integer channels
    bright = ImageMath.lambda_eval(
        lambda args: (args["r"] + args["g"] + args["b"] >= 3 * threshold) * 255,
        r=r, g=g, b=b,
    )
    return bright.convert("L")


# ── Public API ─────────────────────────────────────────────────────────────────


def prepare_ink(image: Image.Image, box: BoundingBox, config: PipelineConfig) -> Image.Image:
    """Run crop, pad, upscale and binarize for ink already located at *box*."""
    cropped = crop_to_bounds(as_rgb(image), box, config.margin_px)
    padded = pad_canvas(cropped, config.padding_ratio, config.min_padding_px)
    scaled = upscale(padded, config.scale_factor)
    result = binarize(scaled, config.binarize_threshold)
    logger.debug(
        "Prepared ink: crop %sx%s, padded %sx%s, final %sx%s",
        cropped.width, cropped.height, padded.width, padded.height,
        result.width, result.height,
    )
    return result


def preprocess_for_recognition(
    image: Optional[Image.Image], config: PipelineConfig
) -> Optional[Image.Image]:
    """Run the full preprocessing pipeline; ``None`` when there is no ink."""
    box = scan_ink_bounds(image, config)
    if box.is_empty:
        return None
    return prepare_ink(image, box, config)
