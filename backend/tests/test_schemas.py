"""Tests for shared schemas and filename helpers."""
import pytest

from filedepot.files.schemas import (
    SUPPORTED_RASTER_TYPES,
    UploadFailure,
    UploadResponse,
    UploadSuccess,
    is_thumbnail_eligible,
    sanitize_filename,
    thumbnail_url,
)


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("photo.jpg", "photo.jpg"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\report.pdf", "report.pdf"),
            ("evil\r\nSet-Cookie: x.txt", "evilSet-Cookie: x.txt"),
            ("tab\there.txt", "tabhere.txt"),
            ("", "unnamed"),
            (None, "unnamed"),
            ("dir/", "unnamed"),
        ],
    )
    def test_sanitize(self, raw, expected):
        """Test path components and control characters are stripped."""
        assert sanitize_filename(raw) == expected


class TestThumbnailEligibility:
    """Tests for thumbnail eligibility."""

    def test_supported_set(self):
        """Test the raster types that get thumbnails."""
        assert SUPPORTED_RASTER_TYPES == {"jpg", "jpeg", "png", "gif", "webp"}

    @pytest.mark.parametrize("file_type", ["pdf", "JPG", "svg", ""])
    def test_not_eligible(self, file_type):
        """Test other types get no thumbnail URL."""
        assert not is_thumbnail_eligible(file_type)
        assert thumbnail_url(1, file_type) is None

    def test_url_for_eligible_type(self):
        """Test the thumbnail URL for an eligible type."""
        assert thumbnail_url(7, "webp") == "/thumbnails/7"


class TestUploadResponse:
    """Tests for the upload envelope."""

    def test_serializes_mixed_results_in_camel_case(self):
        """Test successes and failures serialize with camelCase keys."""
        body = UploadResponse(
            results=[
                UploadSuccess(id=1, name="a.png", type="png", size=3, url="/files/1", thumbnail_url="/thumbnails/1"),
                UploadFailure(name="b.txt", error="disk full"),
            ]
        ).model_dump(mode="json", by_alias=True)

        assert body == {
            "success": True,
            "results": [
                {
                    "id": 1,
                    "name": "a.png",
                    "type": "png",
                    "size": 3,
                    "url": "/files/1",
                    "thumbnailUrl": "/thumbnails/1",
                },
                {"name": "b.txt", "error": "disk full"},
            ],
        }
