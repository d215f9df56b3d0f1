from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

WILDCARD = "_"

OptionArgs = Optional[tuple[str, ...]]


class OptionSet(Mapping[str, OptionArgs]):
    """Read-only mapping of option name to its raw args (``None`` for flags)."""

    __slots__ = ("_options",)

    def __init__(self, options: Optional[Mapping[str, OptionArgs]] = None) -> None:
        self._options: dict[str, OptionArgs] = dict(options or {})

    def __getitem__(self, name: str) -> OptionArgs:
        return self._options[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"OptionSet({self._options!r})"

    def args(self, name: str) -> tuple[str, ...]:
        return self._options.get(name) or ()


@dataclass(frozen=True, slots=True)
class SourceImage:
    """A source image located under one of the configured roots."""

    path: Path
    exists: bool = True

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass(frozen=True, slots=True)
class DerivedRequest:
    """Transform parameters decoded from a derived-image filename."""

    source_path: str
    width: Optional[int]
    height: Optional[int]
    options: OptionSet = field(default_factory=OptionSet)
    extension: str = ""
    request_path: str = ""


@dataclass(frozen=True, slots=True)
class Served:
    """Image bytes ready to be returned to the client."""

    content: bytes
    path: Path
    content_type: str


@dataclass(frozen=True, slots=True)
class PassThrough:
    """Signals that the request should fall back to an ordinary 404."""

    request_path: str
    reason: str = ""
