from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from ..errors import CropLimitExceeded, DestinationNotWritable, SourceNotFound, UnlinkFailed
from ..media.resolver import SourceResolver
from ..media.store import DerivedStore, FilesystemStore
from ..models import DerivedRequest, SourceImage
from .policy import CropEngine, plan_crop

logger = logging.getLogger(__name__)


class DerivedFileManager:
    """Generate derived files next to their source and delete them again."""

    def __init__(
        self,
        resolver: SourceResolver,
        *,
        max_crops: Optional[int] = None,
        engine: CropEngine | None = None,
        store: DerivedStore | None = None,
    ) -> None:
        self.resolver = resolver
        self.max_crops = max_crops
        self.engine = engine or CropEngine()
        self.store = store or FilesystemStore()

    def generate(self, request: DerivedRequest) -> tuple[Path, bytes]:
        """Write the derivative for *request* and return its path and bytes."""

        source = self.resolver.resolve(request.source_path)
        if source is None:
            raise SourceNotFound(f"Referenced file missing: {request.source_path}")

        destination = source.directory / posixpath.basename(request.request_path)
        if not self.store.is_writable(destination.parent):
            raise DestinationNotWritable(f"Destination is not writable: {destination.parent}")

        self.check_crop_limit(source)

        plan = plan_crop(request.width, request.height, request.options)
        logger.debug("Selected %s for %s", plan.operation.value, request.request_path)
        content = self.engine.render(source.path, plan, request.extension)

        self.store.write(destination, content)
        logger.info("Generated %s from %s", destination, source.path)
        return destination, content

    def check_crop_limit(self, source: SourceImage) -> None:
        if not self.max_crops:
            return

        found = len(self.store.family(source.directory, source.stem))
        # The source itself matches its stem, so max_crops + 1 entries is the limit.
        if found >= self.max_crops + 1:
            logger.warning("Max crops reached for %s (%s files)", source.path, found)
            raise CropLimitExceeded(f"Max crops reached for {source.path.name}")

    def delete(self, url: str) -> bool:
        """Delete the source at *url* and every derivative sharing its stem.

        Returns ``False`` when no source could be resolved.
        """

        source = self.resolver.resolve(unquote(url))
        if source is None:
            return False

        self._remove(source.path)
        for entry in self.store.family(source.directory, source.stem):
            self._remove(entry)
        logger.info("Deleted %s and its crops", source.path)
        return True

    def _remove(self, path: Path) -> None:
        try:
            self.store.remove(path)
        except OSError as exc:
            raise UnlinkFailed(f"Unlink failed for {path}") from exc
        logger.debug("Removed %s", path)
