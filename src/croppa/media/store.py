from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Protocol

logger = logging.getLogger(__name__)


class DerivedStore(Protocol):
    """Lookup and persistence of derived files.

    Presence of a file is the only cache signal; no metadata is kept.
    """

    def exists(self, path: Path) -> bool: ...

    def read(self, path: Path) -> bytes: ...

    def is_writable(self, directory: Path) -> bool: ...

    def family(self, directory: Path, stem: str) -> List[Path]: ...

    def write(self, path: Path, content: bytes) -> None: ...

    def remove(self, path: Path) -> None: ...


class FilesystemStore:
    """:class:`DerivedStore` backed by the local filesystem."""

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def is_writable(self, directory: Path) -> bool:
        return directory.is_dir() and os.access(directory, os.W_OK)

    def family(self, directory: Path, stem: str) -> List[Path]:
        """Return every entry in *directory* whose name contains *stem*."""

        return sorted(entry for entry in directory.iterdir() if stem in entry.name)

    def write(self, path: Path, content: bytes) -> None:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=".croppa-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            # mkstemp creates 0600 files; the web server needs to read them
            os.chmod(temp_name, 0o644)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s bytes to %s", len(content), path)

    def remove(self, path: Path) -> None:
        path.unlink()
