"""Tests for thumbnail derivation."""
import io

import pytest
from PIL import Image, features

from filedepot.files.errors import DecodeError
from filedepot.files.thumbnails import ThumbnailDeriver


@pytest.fixture
def deriver() -> ThumbnailDeriver:
    return ThumbnailDeriver(max_size=(300, 300))


def _write(tmp_path, name: str, data: bytes):
    path = tmp_path / name
    path.write_bytes(data)
    return path


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestThumbnailDeriver:
    """Tests for ThumbnailDeriver."""

    @pytest.mark.parametrize("file_type", ["pdf", "txt", "svg", "", "bmp"])
    def test_unsupported_types_are_skipped(self, tmp_path, deriver, file_type):
        """Test non-raster types yield no thumbnail."""
        path = _write(tmp_path, "file", b"whatever")
        assert deriver.derive(path, file_type) is None

    def test_large_image_fits_bounding_box(self, tmp_path, deriver, make_image):
        """Test a large image shrinks to fit the box."""
        path = _write(tmp_path, "big.png", make_image("PNG", (1200, 900)))
        thumb = _open(deriver.derive(path, "png"))
        assert thumb.size == (300, 225)

    def test_tall_image_keeps_aspect_ratio(self, tmp_path, deriver, make_image):
        """Test a tall image keeps its aspect ratio."""
        path = _write(tmp_path, "tall.png", make_image("PNG", (200, 900)))
        width, height = _open(deriver.derive(path, "png")).size
        assert height == 300
        assert 60 <= width <= 70

    def test_small_image_is_never_enlarged(self, tmp_path, deriver, make_image):
        """Test a small image keeps its size."""
        path = _write(tmp_path, "small.jpg", make_image("JPEG", (120, 80)))
        thumb = _open(deriver.derive(path, "jpg"))
        assert thumb.size == (120, 80)

    def test_one_side_over_limit_only_shrinks_that_much(self, tmp_path, deriver, make_image):
        """Test scaling is driven by the side over the limit."""
        path = _write(tmp_path, "wide.gif", make_image("GIF", (600, 100), mode="P"))
        thumb = _open(deriver.derive(path, "gif"))
        assert thumb.size == (300, 50)

    @pytest.mark.parametrize(
        "pil_format, file_type",
        [("JPEG", "jpg"), ("JPEG", "jpeg"), ("PNG", "png"), ("GIF", "gif")],
    )
    def test_output_keeps_raster_format(self, tmp_path, deriver, make_image, pil_format, file_type):
        """Test the thumbnail is encoded in the original's format."""
        mode = "P" if pil_format == "GIF" else "RGB"
        path = _write(tmp_path, f"img.{file_type}", make_image(pil_format, (500, 500), mode=mode))
        thumb = _open(deriver.derive(path, file_type))
        assert thumb.format == pil_format
        assert max(thumb.size) <= 300

    @pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP")
    def test_webp(self, tmp_path, deriver, make_image):
        """Test WebP thumbnails."""
        path = _write(tmp_path, "img.webp", make_image("WEBP", (800, 400)))
        thumb = _open(deriver.derive(path, "webp"))
        assert thumb.format == "WEBP"
        assert thumb.size == (300, 150)

    def test_alpha_image_named_jpg_is_flattened(self, tmp_path, deriver, make_image):
        """Test alpha is dropped when encoding JPEG."""
        path = _write(tmp_path, "alpha.jpg", make_image("PNG", (400, 400), mode="RGBA"))
        thumb = _open(deriver.derive(path, "jpg"))
        assert thumb.format == "JPEG"
        assert thumb.mode == "RGB"

    def test_garbage_bytes_raise_decode_error(self, tmp_path, deriver):
        """Test non-image bytes raise DecodeError."""
        path = _write(tmp_path, "fake.png", b"definitely not a png")
        with pytest.raises(DecodeError):
            deriver.derive(path, "png")

    def test_missing_original_raises_decode_error(self, tmp_path, deriver):
        """Test a missing original raises DecodeError."""
        with pytest.raises(DecodeError):
            deriver.derive(tmp_path / "gone.png", "png")

    def test_custom_bounding_box(self, tmp_path, make_image):
        """Test a custom bounding box is honoured."""
        path = _write(tmp_path, "img.png", make_image("PNG", (400, 200)))
        thumb = _open(ThumbnailDeriver(max_size=(100, 100)).derive(path, "png"))
        assert thumb.size == (100, 50)
