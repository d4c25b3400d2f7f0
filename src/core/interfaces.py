"""
Plugin interfaces for tool caching and annotation output.

Defines the contracts the scan workflow depends on, so that filesystem
caches and host-platform annotation mechanisms can be swapped out (for
example with in-memory implementations in tests).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class ToolCache(ABC):
    """
    Append-only store of installed tool directories keyed by (name, version).

    Entries are never overwritten or evicted once stored. Implementations
    report every lookup through _record_lookup so hit/miss counts are kept
    per cache instance.
    """

    def __init__(self):
        self.hits = 0
        self.misses = 0

    def _record_lookup(self, entry: Optional[Path]) -> Optional[Path]:
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def summary(self) -> str:
        """Describe lookups served by this cache, e.g. "Tool cache: 1 hits, 1 misses"."""
        if self.hits + self.misses == 0:
            return "No cache activity"
        return f"Tool cache: {self.hits} hits, {self.misses} misses"

    @abstractmethod
    def find(self, tool: str, version: str) -> Optional[Path]:
        """
        Look up an installed tool directory.

        Args:
            tool: Tool name (e.g., "trivy")
            version: Normalized version (e.g., "0.19.2")

        Returns:
            Directory holding the tool, or None if not cached
        """
        pass

    @abstractmethod
    def store(self, tool: str, version: str, source_dir: Path) -> Path:
        """
        Register an extracted tool directory.

        Args:
            tool: Tool name
            version: Normalized version
            source_dir: Directory holding the extracted release

        Returns:
            Directory holding the cached tool
        """
        pass


class AnnotationSink(ABC):
    """
    Destination for per-finding annotations.

    Implementations decide how a message is displayed; the classifier only
    decides which channel a finding goes to.
    """

    @abstractmethod
    def notice(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass


__all__ = [
    "ToolCache",
    "AnnotationSink",
]
