from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, ImageOps

from ..errors import (
    ConflictingOptions,
    ImageTooLarge,
    InvalidOptionArguments,
    InvalidQuadrant,
    MissingDimensionForOption,
)
from ..models import OptionSet

logger = logging.getLogger(__name__)

# Quadrant anchors as Pillow centering fractions:
# +---+---+---+
# |   | T |   |
# +---+---+---+
# | L | C | R |
# +---+---+---+
# |   | B |   |
# +---+---+---+
QUADRANT_CENTERING: dict[str, tuple[float, float]] = {
    "T": (0.5, 0.0),
    "L": (0.0, 0.5),
    "C": (0.5, 0.5),
    "R": (1.0, 0.5),
    "B": (0.5, 1.0),
}

IMAGE_FORMATS: dict[str, str] = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "gif": "GIF"}
CONTENT_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
}


class Operation(Enum):
    COPY = "copy"
    QUADRANT = "quadrant"
    RESIZE = "resize"
    SCALE_TO_WIDTH = "scale_to_width"
    SCALE_TO_HEIGHT = "scale_to_height"
    ADAPTIVE_CROP = "adaptive_crop"
    NO_TRANSFORM = "no_transform"


class TrimMode(Enum):
    PIXELS = "trim"
    PERCENT = "trim_perc"


@dataclass(frozen=True, slots=True)
class Trim:
    """Pre-crop applied before the main operation."""

    mode: TrimMode
    x1: float
    y1: float
    x2: float
    y2: float

    def box(self, size: tuple[int, int]) -> tuple[int, int, int, int]:
        """Return ``(x, y, width, height)`` for an image of *size*."""

        if self.mode is TrimMode.PIXELS:
            return (
                _round_half_up(self.x1),
                _round_half_up(self.y1),
                _round_half_up(self.x2 - self.x1),
                _round_half_up(self.y2 - self.y1),
            )

        width, height = size
        x = _round_half_up(self.x1 * width)
        y = _round_half_up(self.y1 * height)
        return (
            x,
            y,
            _round_half_up(self.x2 * width - x),
            _round_half_up(self.y2 * height - y),
        )


@dataclass(frozen=True, slots=True)
class CropPlan:
    operation: Operation
    width: Optional[int] = None
    height: Optional[int] = None
    trim: Optional[Trim] = None
    quadrant: Optional[str] = None


def plan_crop(width: Optional[int], height: Optional[int], options: OptionSet) -> CropPlan:
    """Select the single transform to run for the requested size and options.

    ``None`` for a dimension is the wildcard. Raises a :class:`CroppaError`
    subclass when the options cannot be honoured.
    """

    if width is None and height is None and not options:
        return CropPlan(Operation.COPY)

    if "trim" in options and "trim_perc" in options:
        raise ConflictingOptions("Specify a trim or a trim_perc option, not both")

    trim: Optional[Trim] = None
    if "trim" in options:
        trim = _parse_trim(TrimMode.PIXELS, options.args("trim"))
    elif "trim_perc" in options:
        trim = _parse_trim(TrimMode.PERCENT, options.args("trim_perc"))

    if "quadrant" in options:
        if width is None or height is None:
            raise MissingDimensionForOption("The quadrant option needs a width and a height")
        args = options.args("quadrant")
        if not args or not args[0]:
            raise InvalidQuadrant("No quadrant specified")
        quadrant = args[0].upper()
        if quadrant not in QUADRANT_CENTERING:
            raise InvalidQuadrant(f"Invalid quadrant {args[0]!r}")
        return CropPlan(Operation.QUADRANT, width, height, trim, quadrant)

    if "resize" in options:
        if width is None or height is None:
            raise MissingDimensionForOption("The resize option needs a width and a height")
        return CropPlan(Operation.RESIZE, width, height, trim)

    if height is None and width is not None:
        return CropPlan(Operation.SCALE_TO_WIDTH, width, None, trim)
    if width is None and height is not None:
        return CropPlan(Operation.SCALE_TO_HEIGHT, None, height, trim)
    if width is not None and height is not None:
        return CropPlan(Operation.ADAPTIVE_CROP, width, height, trim)
    return CropPlan(Operation.NO_TRANSFORM, trim=trim)


@dataclass(slots=True)
class EngineConfig:
    jpeg_quality: int = 90
    # Bound used for the unconstrained side when scaling by one dimension
    free_dimension: int = 99999


class CropEngine:
    """Run a :class:`CropPlan` against a source image with Pillow."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def render(self, source: Path, plan: CropPlan, extension: str) -> bytes:
        if plan.operation is Operation.COPY:
            logger.debug("Copying %s verbatim", source)
            return source.read_bytes()

        try:
            with Image.open(source) as opened:
                image = ImageOps.exif_transpose(opened)
        except Image.DecompressionBombError as exc:
            raise ImageTooLarge(f"{source.name} exceeds the decoder pixel limit") from exc
        result = self.transform(image, plan)
        return self.encode(result, extension)

    def transform(self, image: Image.Image, plan: CropPlan) -> Image.Image:
        if plan.trim is not None:
            x, y, width, height = plan.trim.box(image.size)
            if width <= 0 or height <= 0:
                raise InvalidOptionArguments(
                    f"{plan.trim.mode.value} selects an empty area ({width}x{height})"
                )
            logger.debug("Trimming to box x=%s y=%s w=%s h=%s", x, y, width, height)
            image = image.crop((x, y, x + width, y + height))

        logger.debug("Applying %s to %sx%s image", plan.operation.value, *image.size)
        operation = plan.operation
        if operation is Operation.QUADRANT:
            return ImageOps.fit(
                image,
                (plan.width, plan.height),
                method=Image.Resampling.LANCZOS,
                centering=QUADRANT_CENTERING[plan.quadrant],
            )
        if operation is Operation.RESIZE:
            return image.resize((plan.width, plan.height), Image.Resampling.LANCZOS)
        if operation is Operation.SCALE_TO_WIDTH:
            return self._fit_within(image, plan.width, self.config.free_dimension)
        if operation is Operation.SCALE_TO_HEIGHT:
            return self._fit_within(image, self.config.free_dimension, plan.height)
        if operation is Operation.ADAPTIVE_CROP:
            return ImageOps.fit(image, (plan.width, plan.height), method=Image.Resampling.LANCZOS)
        return image

    def encode(self, image: Image.Image, extension: str) -> bytes:
        image_format = IMAGE_FORMATS[extension.lower()]
        save_kwargs: dict[str, int] = {}
        if image_format == "JPEG":
            if image.mode not in ("RGB", "L", "CMYK"):
                image = image.convert("RGB")
            save_kwargs["quality"] = self.config.jpeg_quality
        elif image.mode == "CMYK":
            image = image.convert("RGB")
        buffer = BytesIO()
        image.save(buffer, format=image_format, **save_kwargs)
        return buffer.getvalue()

    def _fit_within(self, image: Image.Image, max_width: int, max_height: int) -> Image.Image:
        width, height = image.size
        scale = min(max_width / width, max_height / height)
        target = (max(1, _round_half_up(width * scale)), max(1, _round_half_up(height * scale)))
        if target == image.size:
            return image
        return image.resize(target, Image.Resampling.LANCZOS)


def _parse_trim(mode: TrimMode, args: Sequence[str]) -> Trim:
    if len(args) != 4:
        raise InvalidOptionArguments(f"{mode.value} needs 4 values, got {len(args)}")
    try:
        values = [float(arg) for arg in args]
    except ValueError as exc:
        raise InvalidOptionArguments(f"{mode.value} values must be numbers: {args!r}") from exc
    if not all(math.isfinite(value) for value in values):
        raise InvalidOptionArguments(f"{mode.value} values must be finite: {args!r}")
    if mode is TrimMode.PERCENT and not all(0.0 <= value <= 1.0 for value in values):
        raise InvalidOptionArguments(f"trim_perc values must be between 0 and 1: {args!r}")
    return Trim(mode, *values)


def _round_half_up(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))
