"""Tests for input validation utilities."""

import pytest
from pathlib import Path

from core.exceptions import ConfigurationError
from utils.validation import (
    validate_file_path,
    validate_image_reference,
    validate_scan_target,
)


class TestValidateImageReference:
    """Tests for image reference validation."""

    @pytest.mark.parametrize("image", [
        "alpine:3.9",
        "alpine",
        "ghcr.io/aquasecurity/trivy:0.19.2",
        "localhost:5000/team/app:1.0",
        "my_custom_image:v1.0",
        "alpine@sha256:" + "a" * 64,
    ])
    def test_valid(self, image):
        """Test common reference forms are accepted."""
        assert validate_image_reference(image) == image

    def test_strips_whitespace(self):
        """Test surrounding whitespace is removed."""
        assert validate_image_reference("  alpine:3.9  ") == "alpine:3.9"

    def test_empty_image(self):
        """Test empty image reference."""
        with pytest.raises(ConfigurationError) as exc:
            validate_image_reference("   ")
        assert "cannot be empty" in str(exc.value)

    def test_invalid_characters(self):
        """Test image with shell metacharacters."""
        for img in ['alpine"3.9', "alpine;latest", "alpine&latest", "alpine|latest", "alpine$x", "alpine`x"]:
            with pytest.raises(ConfigurationError) as exc:
                validate_image_reference(img)
            assert "invalid characters" in str(exc.value)

    def test_invalid_format(self):
        """Test malformed references."""
        with pytest.raises(ConfigurationError) as exc:
            validate_image_reference("alpine:3.9:extra")
        assert "Invalid image reference format" in str(exc.value)
        assert exc.value.field == "image"


class TestValidateFilePath:
    """Tests for file path validation."""

    def test_existing_file(self, tmp_path):
        """Test an existing file is returned as a Path."""
        archive = tmp_path / "image.tar"
        archive.write_bytes(b"tar")
        assert validate_file_path(archive) == archive

    def test_missing_file(self, tmp_path):
        """Test a missing file is rejected."""
        with pytest.raises(ConfigurationError) as exc:
            validate_file_path(tmp_path / "missing.tar", "tarball")
        assert "File not found" in str(exc.value)
        assert exc.value.field == "tarball"

    def test_missing_allowed(self, tmp_path):
        """Test existence check can be skipped."""
        assert validate_file_path(tmp_path / "new.tar", must_exist=False) == tmp_path / "new.tar"

    def test_directory_rejected(self, tmp_path):
        """Test a directory is not a file."""
        with pytest.raises(ConfigurationError):
            validate_file_path(tmp_path)


class TestValidateScanTarget:
    """Tests for scan target selection."""

    def test_image_only(self):
        """Test an image target."""
        assert validate_scan_target("alpine:3.9", None) == ("alpine:3.9", None)

    def test_tarball_only(self, tmp_path):
        """Test an archive target."""
        archive = tmp_path / "image.tar"
        archive.write_bytes(b"tar")
        assert validate_scan_target(None, str(archive)) == (None, str(archive))

    @pytest.mark.parametrize("image,tarball", [(None, None), ("", ""), ("  ", None)])
    def test_neither(self, image, tarball):
        """Test a missing target is rejected."""
        with pytest.raises(ConfigurationError) as exc:
            validate_scan_target(image, tarball)
        assert str(exc.value) == "image or tarball input required"

    def test_both(self, tmp_path):
        """Test both targets at once are rejected."""
        archive = tmp_path / "image.tar"
        archive.write_bytes(b"tar")
        with pytest.raises(ConfigurationError) as exc:
            validate_scan_target("alpine:3.9", str(archive))
        assert "mutually exclusive" in str(exc.value)

    def test_missing_tarball(self, tmp_path):
        """Test a tarball that does not exist is rejected."""
        with pytest.raises(ConfigurationError):
            validate_scan_target(None, str(tmp_path / "missing.tar"))
