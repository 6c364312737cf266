"""Tests for photo preparation."""

from io import BytesIO

import pytest
from PIL import Image

from barista_log.exceptions import ImageError
from barista_log.media import prepare_photo


def _open(data):
    return Image.open(BytesIO(data))


def test_prepare_photo_from_pil_image():
    data = prepare_photo(Image.new("RGB", (40, 30), "brown"))

    assert data[:2] == b"\xff\xd8"
    assert _open(data).size == (40, 30)


def test_prepare_photo_converts_transparent_image():
    data = prepare_photo(Image.new("RGBA", (10, 10), (0, 0, 0, 0)))

    assert _open(data).mode == "RGB"


def test_prepare_photo_from_path_and_bytes(tmp_path):
    path = tmp_path / "bag.png"
    Image.new("RGB", (20, 20), "white").save(path)

    assert _open(prepare_photo(path)).format == "JPEG"
    assert _open(prepare_photo(str(path))).format == "JPEG"
    assert _open(prepare_photo(path.read_bytes())).format == "JPEG"


def test_prepare_photo_bounds_longest_side():
    data = prepare_photo(Image.new("RGB", (800, 400)), max_size=200)

    assert _open(data).size == (200, 100)


def test_prepare_photo_missing_file(tmp_path):
    with pytest.raises(ImageError, match="not found"):
        prepare_photo(tmp_path / "nope.jpg")


def test_prepare_photo_rejects_garbage_bytes():
    with pytest.raises(ImageError):
        prepare_photo(b"definitely not an image")
