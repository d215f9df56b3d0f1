from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

_ENV_KEYS = ("CROPPA_HOST", "CROPPA_SRC_DIRS", "CROPPA_MAX_CROPS")


@dataclass(frozen=True, slots=True)
class CroppaConfig:
    """Process-wide settings, fixed once at startup."""

    host: str = ""
    src_dirs: tuple[Path, ...] = ()
    max_crops: Optional[int] = None

    @classmethod
    def create(
        cls,
        src_dirs: Iterable[str | os.PathLike[str]],
        *,
        host: str = "",
        max_crops: Optional[int] = None,
    ) -> "CroppaConfig":
        if max_crops is not None and max_crops < 0:
            raise ValueError("max_crops must be zero or a positive integer")
        return cls(
            host=host.rstrip("/"),
            src_dirs=tuple(Path(directory) for directory in src_dirs),
            max_crops=max_crops or None,
        )


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_path: Path = Path(".env"),
) -> CroppaConfig:
    """Build a config from ``CROPPA_*`` variables, falling back to a ``.env`` file."""

    values = _read_env_file(env_path)
    source = os.environ if environ is None else environ
    for key in _ENV_KEYS:
        value = (source.get(key) or "").strip()
        if value:
            values[key] = value

    raw_dirs = values.get("CROPPA_SRC_DIRS", "")
    src_dirs = [part for part in raw_dirs.split(os.pathsep) if part.strip()]

    raw_max = values.get("CROPPA_MAX_CROPS")
    try:
        max_crops = int(raw_max) if raw_max else None
    except ValueError as exc:
        raise ValueError(f"CROPPA_MAX_CROPS must be an integer, got {raw_max!r}") from exc

    config = CroppaConfig.create(
        src_dirs,
        host=values.get("CROPPA_HOST", ""),
        max_crops=max_crops,
    )
    logger.debug("Loaded config with %s source dirs", len(config.src_dirs))
    return config


def _read_env_file(env_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if "=" not in stripped:
                continue
            key, raw_value = stripped.split("=", 1)
            key = key.strip()
            if key in _ENV_KEYS:
                value = raw_value.strip().strip('"').strip("'")
                if value:
                    values[key] = value
    except OSError:
        logger.debug("Unable to read %s for croppa settings", env_path, exc_info=True)
    return values
