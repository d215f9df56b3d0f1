from __future__ import annotations

import struct
import zlib
from pathlib import Path

import pytest
from PIL import Image


def save_image(path: Path, size: tuple[int, int] = (400, 200), color: str = "white") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


def save_oversized_png(path: Path, size: tuple[int, int] = (20000, 10000)) -> Path:
    """Write a PNG that only has a header, claiming more pixels than Pillow allows."""

    def chunk(tag: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", zlib.crc32(tag + data))

    header = struct.pack(">IIBBBBB", size[0], size[1], 8, 2, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b""))
    return path


@pytest.fixture()
def public_root(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    (root / "uploads").mkdir(parents=True)
    return root


@pytest.fixture()
def uploads(public_root: Path) -> Path:
    return (public_root / "uploads").resolve()


@pytest.fixture()
def source_image(uploads: Path) -> Path:
    return save_image(uploads / "photo.jpg")
