from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from PIL import Image

from ..models import SourceImage

logger = logging.getLogger(__name__)


class SourceResolver:
    """Locate source images among an ordered list of root directories."""

    def __init__(self, src_dirs: Iterable[str | os.PathLike[str]]) -> None:
        self.src_dirs = tuple(Path(directory) for directory in src_dirs)

    def resolve(self, relative_path: str) -> Optional[SourceImage]:
        """Return the first readable image at *relative_path*, or ``None``."""

        for candidate in self.candidates(relative_path):
            if candidate.is_file() and is_image(candidate):
                logger.debug("Resolved %s to %s", relative_path, candidate)
                return SourceImage(path=candidate)
        logger.debug("No source found for %s", relative_path)
        return None

    def candidates(self, relative_path: str) -> Iterator[Path]:
        """Yield *relative_path* joined onto each existing root, in order.

        Paths that resolve outside their root are skipped.
        """

        relative = (relative_path or "").lstrip("/")
        if not relative:
            return
        for root in self.src_dirs:
            if not root.is_dir():
                logger.debug("Skipping missing source dir %s", root)
                continue
            base = root.resolve()
            candidate = (base / relative).resolve()
            if not candidate.is_relative_to(base):
                logger.warning("Rejecting %s, it escapes %s", relative_path, base)
                continue
            yield candidate


def is_image(path: Path) -> bool:
    """Return ``True`` if Pillow recognises the header of *path*."""

    try:
        with Image.open(path):
            return True
    except Image.DecompressionBombError:
        # Header parsed fine; only the pixel count is over Pillow's limit.
        logger.debug("%s exceeds Pillow's pixel limit", path)
        return True
    except OSError:
        logger.debug("Unable to identify image %s", path, exc_info=True)
        return False


def probe_dimensions(path: Path) -> Optional[tuple[int, int]]:
    """Return ``(width, height)`` if *path* decodes as a raster image."""

    try:
        with Image.open(path) as image:
            return image.size
    except (OSError, Image.DecompressionBombError):
        logger.debug("Unable to read image dimensions from %s", path, exc_info=True)
        return None
