"""
Input validation utilities for container-scan.

Provides validation functions for image references, image archives and the
scan target, run before any release lookup or scanner process.
"""

import re
from pathlib import Path
from typing import Optional

from core.exceptions import ConfigurationError

IMAGE_REFERENCE_PATTERN = re.compile(
    r"^([a-z0-9]+([\._\-][a-z0-9]+)*(:[0-9]+)?/)?"
    r"[a-z0-9]+([\._\-]+[a-z0-9]+)*(/[a-z0-9]+([\._\-]+[a-z0-9]+)*)*"
    r"(:[a-zA-Z0-9\._\-]+)?"
    r"(@sha256:[a-f0-9]{64})?$",
    re.IGNORECASE,
)


def validate_image_reference(image: str, field_name: str = "image") -> str:
    """
    Validate and normalize container image reference.

    Args:
        image: Image reference to validate
        field_name: Field name for error messages

    Returns:
        Normalized image reference

    Raises:
        ConfigurationError: If image reference is invalid

    Examples:
        >>> validate_image_reference("alpine:3.9")
        'alpine:3.9'
        >>> validate_image_reference("localhost:5000/team/app:1.0")
        'localhost:5000/team/app:1.0'
    """
    if not image or not image.strip():
        raise ConfigurationError("Image reference cannot be empty", field_name)

    image = image.strip()

    # Reject shell metacharacters outright
    if any(char in image for char in ['"', "'", ";", "&", "|", "$", "`", "\n", "\r", " "]):
        raise ConfigurationError(
            f"Image reference contains invalid characters: {image}",
            field_name
        )

    if not IMAGE_REFERENCE_PATTERN.match(image):
        raise ConfigurationError(
            f"Invalid image reference format: {image}",
            field_name
        )

    return image


def validate_file_path(path: Path, field_name: str = "path", must_exist: bool = True) -> Path:
    """
    Validate file path.

    Args:
        path: Path to validate
        field_name: Field name for error messages
        must_exist: Whether file must already exist

    Returns:
        Validated Path object

    Raises:
        ConfigurationError: If path is invalid
    """
    if not path or not str(path).strip():
        raise ConfigurationError("File path cannot be empty", field_name)

    path = Path(path)
    if must_exist and not path.is_file():
        raise ConfigurationError(f"File not found: {path}", field_name)

    return path


def validate_scan_target(image: Optional[str], tarball: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    Validate that exactly one scan target is configured.

    Args:
        image: Image reference (optional)
        tarball: Image archive path (optional)

    Returns:
        Tuple of (image, tarball) with exactly one set

    Raises:
        ConfigurationError: If neither or both are set, or the target is invalid
    """
    image = image.strip() if image else None
    tarball = tarball.strip() if tarball else None

    if not image and not tarball:
        raise ConfigurationError("image or tarball input required")
    if image and tarball:
        raise ConfigurationError("image and tarball inputs are mutually exclusive")

    if image:
        return validate_image_reference(image), None
    return None, str(validate_file_path(Path(tarball), "tarball"))


__all__ = [
    "validate_image_reference",
    "validate_file_path",
    "validate_scan_target",
]
