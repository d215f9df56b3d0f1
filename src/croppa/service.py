from __future__ import annotations

import html
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from .config import CroppaConfig
from .errors import DimensionsUnreadable, SourceNotFound
from .image_processing.lifecycle import DerivedFileManager
from .image_processing.policy import CONTENT_TYPES, CropEngine
from .media.resolver import SourceResolver, probe_dimensions
from .media.store import DerivedStore, FilesystemStore
from .models import PassThrough, Served
from .urls.schema import Dimension, OptionsInput, build_url, decode, encode

logger = logging.getLogger(__name__)


class Croppa:
    """Entry points for serving, deleting and linking to derived images."""

    def __init__(
        self,
        config: CroppaConfig,
        *,
        engine: CropEngine | None = None,
        store: DerivedStore | None = None,
    ) -> None:
        self.config = config
        self.resolver = SourceResolver(config.src_dirs)
        self.store = store or FilesystemStore()
        self.manager = DerivedFileManager(
            self.resolver,
            max_crops=config.max_crops,
            engine=engine,
            store=self.store,
        )

    def handle(self, request_path: str) -> Union[Served, PassThrough]:
        """Serve *request_path*, generating the derivative if needed.

        Returns :class:`PassThrough` when the caller should answer with an
        ordinary 404. Any other failure raises a :class:`CroppaError`.
        """

        existing = self.resolver.resolve(request_path)
        if existing is not None:
            logger.debug("Serving existing file %s", existing.path)
            return Served(
                content=self.store.read(existing.path),
                path=existing.path,
                content_type=_guess_content_type(existing.path),
            )

        request = decode(request_path)
        if request is None:
            return PassThrough(request_path, reason="not a derived image path")

        try:
            path, content = self.manager.generate(request)
        except SourceNotFound as exc:
            logger.debug("Passing through %s: %s", request_path, exc.message)
            return PassThrough(request_path, reason=exc.message)
        return Served(content=content, path=path, content_type=CONTENT_TYPES[request.extension])

    def delete(self, request_path: str) -> bool:
        return self.manager.delete(request_path)

    def url(
        self,
        src: str,
        width: Dimension = None,
        height: Dimension = None,
        options: OptionsInput = None,
    ) -> Optional[str]:
        return build_url(self.config.host, src, width, height, options)

    def tag(
        self,
        src: str,
        width: Dimension = None,
        height: Dimension = None,
        options: OptionsInput = None,
    ) -> str:
        url = self.url(src, width, height, options) or ""
        return f'<img src="{html.escape(url, quote=True)}" />'

    def sizes(
        self,
        src: str,
        width: Dimension = None,
        height: Dimension = None,
        options: OptionsInput = None,
    ) -> Optional[str]:
        """Return a CSS ``width``/``height`` declaration for a generated derivative.

        ``None`` means the derivative hasn't been generated yet.
        """

        encoded = encode(src, width, height, options)
        if encoded is None:
            return None

        path = next(
            (candidate for candidate in self.resolver.candidates(encoded) if self.store.exists(candidate)),
            None,
        )
        if path is None:
            return None

        size = probe_dimensions(path)
        if size is None:
            raise DimensionsUnreadable(f"Dimensions could not be read from {path}")
        return f"width:{size[0]}px; height:{size[1]}px;"


def _guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"
