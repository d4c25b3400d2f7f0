"""
Tool cache for installed scanner releases.

Installed releases are kept in an append-only directory tree keyed by tool
name, version and architecture. An entry only becomes visible to lookups once
its completion marker has been written, so an interrupted install is never
returned as a cache hit.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from core.interfaces import ToolCache

logger = logging.getLogger(__name__)


class DirectoryToolCache(ToolCache):
    """
    Filesystem tool cache.

    Layout: <cache_dir>/<tool>/<version>/<arch>/ with a sibling
    <arch>.complete marker file. Entries are copied into a staging
    directory first and renamed into place before the marker is written.
    """

    def __init__(self, cache_dir: Path, arch: str):
        """
        Initialize tool cache.

        Args:
            cache_dir: Root directory of the cache
            arch: Architecture the cached tools were built for
        """
        super().__init__()
        self.cache_dir = cache_dir
        self.arch = arch

    def _get_entry_path(self, tool: str, version: str) -> Path:
        """Get directory of a cache entry."""
        return self.cache_dir / tool / version / self.arch

    def _get_marker_path(self, tool: str, version: str) -> Path:
        """Get completion marker of a cache entry."""
        return self.cache_dir / tool / version / f"{self.arch}.complete"

    def find(self, tool: str, version: str) -> Optional[Path]:
        entry = self._get_entry_path(tool, version)
        if entry.is_dir() and self._get_marker_path(tool, version).is_file():
            logger.debug(f"Cache hit for {tool} {version}: {entry}")
            return self._record_lookup(entry)

        logger.debug(f"Cache miss for {tool} {version}")
        return self._record_lookup(None)

    def store(self, tool: str, version: str, source_dir: Path) -> Path:
        entry = self._get_entry_path(tool, version)
        marker = self._get_marker_path(tool, version)

        if entry.is_dir() and marker.is_file():
            logger.debug(f"{tool} {version} already cached at {entry}, keeping existing entry")
            return entry

        # Leftovers of an install that never completed
        if entry.exists():
            logger.debug(f"Removing incomplete cache entry {entry}")
            shutil.rmtree(entry)

        staging = entry.with_name(f"{self.arch}.staging")
        if staging.exists():
            shutil.rmtree(staging)

        try:
            shutil.copytree(source_dir, staging)
            staging.rename(entry)
            marker.write_text("")
        except OSError:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        logger.debug(f"Cached {tool} {version} at {entry}")
        return entry


class InMemoryToolCache(ToolCache):
    """Tool cache that keeps entries in a dictionary and never copies files."""

    def __init__(self):
        super().__init__()
        self.entries: dict[tuple[str, str], Path] = {}

    def find(self, tool: str, version: str) -> Optional[Path]:
        return self._record_lookup(self.entries.get((tool, version)))

    def store(self, tool: str, version: str, source_dir: Path) -> Path:
        return self.entries.setdefault((tool, version), source_dir)


__all__ = [
    "DirectoryToolCache",
    "InMemoryToolCache",
]
