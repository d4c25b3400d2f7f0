"""Core business logic for scanner installation, scanning and classification."""

from core.models import (
    ScanRequest,
    ScanResult,
    SeverityLevel,
    Vulnerability,
)
from core.cache import DirectoryToolCache
from core.classifier import Classifier
from core.scanner import ScanExecutor

__all__ = [
    "ScanRequest",
    "ScanResult",
    "SeverityLevel",
    "Vulnerability",
    "DirectoryToolCache",
    "Classifier",
    "ScanExecutor",
]
