"""
Exception hierarchy for container-scan.

Provides a standardized exception hierarchy for consistent error handling
across the application. All exceptions inherit from ContainerScanError and
propagate to the CLI, which reports a single failure message.
"""

from typing import Optional


class ContainerScanError(Exception):
    """Base exception for all container-scan errors."""
    pass


class ConfigurationError(ContainerScanError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            field: Configuration key that is invalid (optional)
        """
        self.field = field
        if field:
            super().__init__(f"Invalid configuration for {field}: {message}")
        else:
            super().__init__(message)


class ReleaseNotFoundError(ContainerScanError):
    """The release index has no entry for the requested version."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Cannot find trivy {version} release")


class ReleaseFetchError(ContainerScanError):
    """The release index could not be fetched."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None, body: str = ""):
        """
        Initialize release fetch error.

        Args:
            url: Release index URL
            reason: Reason for failure
            status_code: HTTP status code, if a response was received
            body: Response body, if any
        """
        self.url = url
        self.reason = reason
        self.status_code = status_code
        self.body = body
        message = f"Failed to fetch release index {url}: {reason}"
        if status_code is not None:
            message += f" (status {status_code})"
        if body:
            message += f"\nBody: {body.strip()}"
        super().__init__(message)


class InvalidVersionError(ContainerScanError):
    """A resolved version is not a valid semantic version."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f'Invalid trivy version "{version}".')


class VersionParseError(ContainerScanError):
    """The scanner version output could not be parsed."""

    def __init__(self, output: str = ""):
        self.output = output
        super().__init__("Cannot parse trivy version")


class DownloadError(ContainerScanError):
    """Release archive download failed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download {url}: {reason}")


class ExtractionError(ContainerScanError):
    """Release archive extraction failed."""

    def __init__(self, archive: str, reason: str):
        self.archive = archive
        self.reason = reason
        super().__init__(f"Failed to extract {archive}: {reason}")


class ScanExecutionError(ContainerScanError):
    """The scanner exited with an error."""

    def __init__(self, scan_format: str, stderr: str, exit_code: int):
        """
        Initialize scan execution error.

        Args:
            scan_format: Output format being produced
            stderr: Trimmed stderr of the scanner process
            exit_code: Exit code of the scanner process
        """
        self.scan_format = scan_format
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(stderr)


class ScanResultMissingError(ContainerScanError):
    """The scanner exited but did not write its result file."""

    def __init__(self, scan_format: str):
        self.scan_format = scan_format
        super().__init__(f"Scan result not found for {scan_format} output format")


class ReportParseError(ContainerScanError):
    """The structured scan report is malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid scan report {path}: {reason}")


__all__ = [
    "ContainerScanError",
    "ConfigurationError",
    "ReleaseNotFoundError",
    "ReleaseFetchError",
    "InvalidVersionError",
    "VersionParseError",
    "DownloadError",
    "ExtractionError",
    "ScanExecutionError",
    "ScanResultMissingError",
    "ReportParseError",
]
