"""
Domain models for container vulnerability scanning.

This module defines the core data structures used throughout the application.
All models are immutable (frozen dataclasses) to prevent accidental mutation.
"""

import platform as host_platform
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Optional

from constants import TITLE_MAX_LENGTH
from utils.formatting import truncate_text


class SeverityLevel(IntEnum):
    """Severity levels reported by the scanner, totally ordered by value."""

    UNKNOWN = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5


SEVERITY_NAMES: dict[str, SeverityLevel] = {
    "UNKNOWN": SeverityLevel.UNKNOWN,
    "LOW": SeverityLevel.LOW,
    "MEDIUM": SeverityLevel.MEDIUM,
    "HIGH": SeverityLevel.HIGH,
    "CRITICAL": SeverityLevel.CRITICAL,
}
"""Canonical uppercase severity tokens. Tokens not listed here are not part of the order."""


class ScanFormat(str, Enum):
    """Output formats produced for a single scan, in execution order."""

    TABLE = "table"
    JSON = "json"
    SARIF = "sarif"


class AnnotationChannel(str, Enum):
    """Display channels a classified finding can be routed to."""

    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host operating system family and architecture.

    Attributes:
        os_family: Platform name (win32, darwin, linux, ...)
        arch: Architecture name (x64, ia32, arm64, ...)
    """

    os_family: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os_family == "win32"

    @classmethod
    def detect(cls) -> "PlatformInfo":
        """Read the current host platform once."""
        system = host_platform.system().lower()
        os_family = {"windows": "win32", "darwin": "darwin", "linux": "linux"}.get(system, system)

        machine = host_platform.machine().lower()
        arch = {
            "x86_64": "x64",
            "amd64": "x64",
            "i386": "ia32",
            "i686": "ia32",
            "x86": "ia32",
            "aarch64": "arm64",
            "arm64": "arm64",
            "armv7l": "arm",
            "ppc64le": "ppc64",
            "s390x": "s390x",
        }.get(machine, machine)

        return cls(os_family=os_family, arch=arch)


@dataclass(frozen=True)
class ReleaseDescriptor:
    """
    A concrete scanner release resolved from a version specifier.

    Attributes:
        tag: Release tag as published (e.g., "v0.19.2")
        download_assets: Asset metadata reported by the release index
        release_id: Release identifier in the index (optional)
    """

    tag: str
    download_assets: dict[str, Any] = field(default_factory=dict)
    release_id: Optional[int] = None

    @property
    def version(self) -> str:
        """Release tag with leading and trailing "v" characters stripped."""
        return self.tag.strip().strip("v")


@dataclass(frozen=True)
class InstalledBinary:
    """
    A scanner executable installed in the tool cache.

    Attributes:
        path: Absolute path of the executable
        version: Normalized version it was installed for
    """

    path: Path
    version: str


@dataclass(frozen=True)
class ScanRequest:
    """
    A single logical scan of one image or image archive.

    Attributes:
        binary_path: Scanner executable
        image: Image reference to scan (exclusive with tarball)
        tarball: Image archive to scan (exclusive with image)
        severity: Severity filter passed through to the scanner
        ignore_unfixed: Skip findings without a fixed version
        auth_token: Token exported to the scanner process
        sarif_template: Template used to render the SARIF report (optional)
    """

    binary_path: Path
    image: Optional[str] = None
    tarball: Optional[str] = None
    severity: Optional[str] = None
    ignore_unfixed: bool = False
    auth_token: Optional[str] = None
    sarif_template: Optional[Path] = None

    @property
    def target(self) -> str:
        """Image reference or archive path being scanned (for logging)."""
        return self.image or self.tarball or ""


@dataclass(frozen=True)
class Vulnerability:
    """
    A single finding reported by the scanner.

    Attributes:
        id: Vulnerability identifier (e.g., CVE-2021-44228)
        package_name: Affected package
        installed_version: Installed package version
        severity: Severity token as reported (e.g., "HIGH")
        fixed_version: First fixed package version (optional)
        title: Short human title (optional)
        description: Long description (optional)
        primary_url: Advisory URL (optional)
    """

    id: str
    package_name: str
    installed_version: str
    severity: str
    fixed_version: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    primary_url: Optional[str] = None

    @classmethod
    def from_report_dict(cls, data: dict[str, Any]) -> "Vulnerability":
        """
        Create from a JSON report entry.

        A missing title is replaced by the truncated description.
        """
        title = data.get("Title") or None
        description = data.get("Description") or None
        if not title and description:
            title = truncate_text(description, TITLE_MAX_LENGTH)

        return cls(
            id=data.get("VulnerabilityID") or "",
            package_name=data.get("PkgName") or "",
            installed_version=data.get("InstalledVersion") or "",
            severity=data.get("Severity") or "",
            fixed_version=data.get("FixedVersion") or None,
            title=title,
            description=description,
            primary_url=data.get("PrimaryURL") or None,
        )


@dataclass(frozen=True)
class ScanResult:
    """
    Artifacts and findings of a single scan.

    Attributes:
        table_file: Human-readable report
        json_file: Structured report
        sarif_file: SARIF report, unset when the format was skipped
        vulnerabilities: Findings in report order
    """

    table_file: Optional[Path] = None
    json_file: Optional[Path] = None
    sarif_file: Optional[Path] = None
    vulnerabilities: tuple[Vulnerability, ...] = ()


@dataclass(frozen=True)
class ClassificationResult:
    """
    Outcome of evaluating one finding against the severity threshold.

    Attributes:
        vulnerability: The classified finding
        severity: Recognized severity level
        annotation_message: Message surfaced for the finding
        unhealthy: Whether the finding fails the run
        channel: Display channel the finding is routed to
        console_line: Colored tabular line, set for unhealthy findings only
    """

    vulnerability: Vulnerability
    severity: SeverityLevel
    annotation_message: str
    unhealthy: bool
    channel: AnnotationChannel
    console_line: Optional[str] = None


@dataclass(frozen=True)
class ClassificationReport:
    """
    Classification of every finding of a run.

    Attributes:
        results: Classified findings in report order
        informational: Findings with an unrecognized severity, in report order
        any_unhealthy: Whether at least one finding failed the threshold
    """

    results: tuple[ClassificationResult, ...] = ()
    informational: tuple[Vulnerability, ...] = ()
    any_unhealthy: bool = False

    @property
    def unhealthy_results(self) -> list[ClassificationResult]:
        return [r for r in self.results if r.unhealthy]


@dataclass(frozen=True)
class RunOutcome:
    """
    Final result of a scan run.

    Attributes:
        healthy: Whether the run passed the severity threshold
        message: Human-readable summary
        outputs: Named output values (only non-empty report files)
        classification: Classification of the findings
    """

    healthy: bool
    message: str
    outputs: dict[str, str] = field(default_factory=dict)
    classification: Optional[ClassificationReport] = None
