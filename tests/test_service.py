from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from croppa.config import CroppaConfig
from croppa.errors import DimensionsUnreadable, ImageTooLarge, MissingDimensionForOption
from croppa.models import PassThrough, Served
from croppa.service import Croppa

from conftest import save_oversized_png


@pytest.fixture()
def croppa(public_root: Path) -> Croppa:
    return Croppa(CroppaConfig.create([public_root], host="https://cdn.example.com/"))


def test_handle_serves_existing_file(croppa: Croppa, source_image: Path) -> None:
    result = croppa.handle("/uploads/photo.jpg")

    assert isinstance(result, Served)
    assert result.content == source_image.read_bytes()
    assert result.content_type == "image/jpeg"


@pytest.mark.parametrize(
    "request_path",
    ["/uploads/missing.jpg", "/uploads/nothing-100x100.jpg", "/uploads/photo-100x100.tiff"],
)
def test_handle_passes_through(croppa: Croppa, source_image: Path, request_path: str) -> None:
    result = croppa.handle(request_path)

    assert isinstance(result, PassThrough)
    assert result.request_path == request_path


def test_handle_generates_then_serves_from_disk(croppa: Croppa, uploads: Path, source_image: Path) -> None:
    first = croppa.handle("/uploads/photo-100x_.jpg")

    assert isinstance(first, Served)
    assert first.path == uploads / "photo-100x_.jpg"
    assert first.content_type == "image/jpeg"
    with Image.open(first.path) as output:
        assert output.size == (100, 50)

    second = croppa.handle("/uploads/photo-100x_.jpg")
    assert isinstance(second, Served)
    assert second.content == first.content


def test_handle_raises_for_fatal_failures(croppa: Croppa, uploads: Path, source_image: Path) -> None:
    with pytest.raises(MissingDimensionForOption) as excinfo:
        croppa.handle("/uploads/photo-100x_-quadrant(T).jpg")

    assert excinfo.value.kind == "MissingDimensionForOption"
    assert not (uploads / "photo-100x_-quadrant(T).jpg").exists()


def test_handle_ignores_unknown_options(croppa: Croppa, source_image: Path) -> None:
    result = croppa.handle("/uploads/photo-60x60-grayscale.jpg")

    assert isinstance(result, Served)
    with Image.open(result.path) as output:
        assert output.size == (60, 60)


def test_url_and_tag(croppa: Croppa) -> None:
    assert croppa.url("/uploads/photo.jpg", 200, 100, ["resize"]) == (
        "https://cdn.example.com/uploads/photo-200x100-resize.jpg"
    )
    assert croppa.url("") is None
    assert croppa.tag("/uploads/a&b.jpg", 200) == (
        '<img src="https://cdn.example.com/uploads/a&amp;b-200x_.jpg" />'
    )


def test_sizes_reports_generated_dimensions(croppa: Croppa, source_image: Path) -> None:
    assert croppa.sizes("/uploads/photo.jpg", 100) is None

    croppa.handle("/uploads/photo-100x_.jpg")

    assert croppa.sizes("/uploads/photo.jpg", 100) == "width:100px; height:50px;"


def test_sizes_unreadable_file(croppa: Croppa, uploads: Path) -> None:
    (uploads / "broken-30x30.jpg").write_bytes(b"not an image")

    with pytest.raises(DimensionsUnreadable):
        croppa.sizes("/uploads/broken.jpg", 30, 30)


def test_delete_cascades(croppa: Croppa, uploads: Path, source_image: Path) -> None:
    for request_path in ("/uploads/photo-10x_.jpg", "/uploads/photo-_x10.jpg", "/uploads/photo-10x10-resize.jpg"):
        croppa.handle(request_path)
    assert len(list(uploads.iterdir())) == 4

    assert croppa.delete("/uploads/photo.jpg") is True
    assert list(uploads.iterdir()) == []
    assert croppa.delete("/uploads/photo.jpg") is False


def test_oversized_source_fails_cleanly_and_can_be_deleted(croppa: Croppa, uploads: Path) -> None:
    save_oversized_png(uploads / "pano.png")

    with pytest.raises(ImageTooLarge) as excinfo:
        croppa.handle("/uploads/pano-100x_.png")
    assert excinfo.value.kind == "ImageTooLarge"
    assert sorted(entry.name for entry in uploads.iterdir()) == ["pano.png"]

    assert croppa.delete("/uploads/pano.png") is True
    assert list(uploads.iterdir()) == []


def test_sizes_of_oversized_file_is_unreadable(croppa: Croppa, uploads: Path) -> None:
    save_oversized_png(uploads / "pano-30x_.png")

    with pytest.raises(DimensionsUnreadable):
        croppa.sizes("/uploads/pano.png", 30)
