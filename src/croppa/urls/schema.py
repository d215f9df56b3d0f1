from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union

from ..models import WILDCARD, DerivedRequest
from .options import parse_options

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif")

_DERIVED_PATTERN = re.compile(
    r"(.*)-([0-9]+|_)x([0-9]+|_)?((?:-[0-9a-z(),\-._]+)*)\.(" + "|".join(SUPPORTED_EXTENSIONS) + r")",
    re.IGNORECASE,
)

Dimension = Union[int, str, None]
OptionsInput = Union[Mapping[Any, Any], Iterable[Any], None]


def encode(
    source_path: str,
    width: Dimension = None,
    height: Dimension = None,
    options: OptionsInput = None,
) -> Optional[str]:
    """Return the derived filename for *source_path* with the given transform.

    ``options`` is either a mapping, where integer keys hold flag names and
    string keys hold their args, or a sequence of flag names and
    ``(name, args)`` pairs. Order is preserved.
    """

    if not source_path:
        return None

    suffix = f"-{_render_dimension(width)}x{_render_dimension(height)}"
    suffix += "".join(_render_options(options))

    directory, basename = posixpath.split(source_path)
    stem, extension = posixpath.splitext(basename)
    return posixpath.join(directory, f"{stem}{suffix}{extension}")


def build_url(
    host: str,
    source_path: str,
    width: Dimension = None,
    height: Dimension = None,
    options: OptionsInput = None,
) -> Optional[str]:
    encoded = encode(source_path, width, height, options)
    if encoded is None:
        return None
    return f"{host}{encoded}"


def decode(url: str) -> Optional[DerivedRequest]:
    """Decode *url* into a :class:`DerivedRequest`, or ``None`` if it isn't one."""

    match = _DERIVED_PATTERN.fullmatch(url or "")
    if not match:
        return None

    path, raw_width, raw_height, raw_options, extension = match.groups()
    width = _parse_dimension(raw_width)
    height = _parse_dimension(raw_height)
    if width == 0 or height == 0:
        logger.debug("Rejecting zero dimension in %s", url)
        return None

    return DerivedRequest(
        source_path=f"{path}.{extension}",
        width=width,
        height=height,
        options=parse_options(raw_options),
        extension=extension.lower(),
        request_path=url,
    )


def _parse_dimension(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == WILDCARD:
        return None
    return int(raw)


def _render_dimension(value: Dimension) -> str:
    if value is None or value == "" or value == WILDCARD:
        return WILDCARD
    number = int(value)
    if number < 0:
        raise ValueError(f"Dimensions must not be negative, got {value!r}")
    return str(number) if number else WILDCARD


def _render_options(options: OptionsInput) -> List[str]:
    if not options:
        return []

    if isinstance(options, Mapping):
        entries = [
            (None, value) if isinstance(key, int) else (key, value)
            for key, value in options.items()
        ]
    else:
        entries = [
            (None, entry) if isinstance(entry, str) else (entry[0], entry[1])
            for entry in options
        ]

    fragments: List[str] = []
    for name, value in entries:
        if name is None:
            fragments.append(f"-{value}")
        elif value is None:
            fragments.append(f"-{name}")
        elif isinstance(value, (list, tuple)):
            fragments.append(f"-{name}({','.join(str(arg) for arg in value)})")
        else:
            fragments.append(f"-{name}({value})")
    return fragments
