"""
container-scan - Container image vulnerability scanning with Trivy

Installs a pinned or latest Trivy release, scans a container image or image
archive, and fails the run when findings reach a configured severity threshold.
"""

__version__ = "1.0.0"
__author__ = "container-scan contributors"

from core.models import (
    ScanRequest,
    ScanResult,
    SeverityLevel,
    Vulnerability,
)

__all__ = [
    "ScanRequest",
    "ScanResult",
    "SeverityLevel",
    "Vulnerability",
]
