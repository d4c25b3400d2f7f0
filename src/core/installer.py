"""
Scanner installation.

Resolves a version specifier to a release, then returns the cached
executable for that release or downloads, extracts and caches it.
"""

import logging
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path

import requests

from constants import DOWNLOAD_CHUNK_SIZE, DOWNLOAD_TIMEOUT, GITHUB_HOST, TOOL_NAME, TOOL_PROJECT
from core.exceptions import DownloadError, ExtractionError, InvalidVersionError
from core.interfaces import ToolCache
from core.models import InstalledBinary, PlatformInfo
from core.version import is_valid_semver
from integrations.github_releases import ReleaseResolver

logger = logging.getLogger(__name__)

PLATFORM_NAMES = {
    "win32": "Windows",
    "darwin": "macOS",
}
"""Release platform names; any other OS family maps to Linux."""

ARCH_NAMES = {
    "x64": "64bit",
    "ia32": "32bit",
}
"""Release architecture names; unmapped architectures use their raw name."""


class BinaryInstaller:
    """
    Installs scanner releases into a tool cache.

    Installing the same resolved version twice returns the same path and
    performs no download the second time.
    """

    def __init__(
        self,
        resolver: ReleaseResolver,
        cache: ToolCache,
        platform: PlatformInfo,
        tool: str = TOOL_NAME,
        project: str = TOOL_PROJECT,
        host: str = GITHUB_HOST,
    ):
        """
        Initialize installer.

        Args:
            resolver: Release index client
            cache: Tool cache holding extracted releases
            platform: Target OS family and architecture
            tool: Tool name, used for archive names and cache keys
            project: Upstream project publishing release archives
            host: Host serving release archives
        """
        self.resolver = resolver
        self.cache = cache
        self.platform = platform
        self.tool = tool
        self.project = project
        self.host = host

    @property
    def binary_name(self) -> str:
        return f"{self.tool}.exe" if self.platform.is_windows else self.tool

    def archive_filename(self, version: str) -> str:
        """
        Build the release archive name for the target platform.

        Examples:
            linux/x64 -> trivy_0.19.2_Linux-64bit.tar.gz
            win32/ia32 -> trivy_0.19.2_Windows-32bit.zip
        """
        platform_name = PLATFORM_NAMES.get(self.platform.os_family, "Linux")
        arch_name = ARCH_NAMES.get(self.platform.arch, self.platform.arch)
        ext = ".zip" if self.platform.is_windows else ".tar.gz"
        return f"{self.tool}_{version}_{platform_name}-{arch_name}{ext}"

    def download_url(self, version: str) -> str:
        """Build the release archive download URL."""
        return (
            f"https://{self.host}/{self.project}/releases/download/"
            f"v{version}/{self.archive_filename(version)}"
        )

    def install(self, version_spec: str) -> InstalledBinary:
        """
        Install the scanner release matching a version specifier.

        Args:
            version_spec: "latest", a tag, or a commit-like token

        Returns:
            InstalledBinary with the executable path

        Raises:
            ReleaseNotFoundError: If no release matches
            ReleaseFetchError: If the release index cannot be fetched
            InvalidVersionError: If the release version is not a semantic version
            DownloadError: If the archive cannot be downloaded
            ExtractionError: If the archive cannot be extracted
        """
        release = self.resolver.resolve(version_spec)
        version = release.version

        tool_dir = self.cache.find(self.tool, version)
        if tool_dir:
            logger.info(f"✓ {self.tool} {version} (cached)")
        else:
            if not is_valid_semver(version):
                raise InvalidVersionError(version)
            tool_dir = self._download_and_cache(version)

        exe_path = tool_dir / self.binary_name
        logger.debug(f"Exe path is {exe_path}")

        logger.info("Fixing perms")
        self._prepare_binary(exe_path)
        logger.info(self.cache.summary())

        return InstalledBinary(path=exe_path, version=version)

    def _download_and_cache(self, version: str) -> Path:
        """Download, extract and cache a release, cleaning up temporary files."""
        work_dir = Path(tempfile.mkdtemp(prefix=f"{self.tool}-install-"))
        try:
            archive = work_dir / self.archive_filename(version)
            self._download(self.download_url(version), archive)

            extract_dir = work_dir / "extracted"
            extract_dir.mkdir()
            self._extract(archive, extract_dir)
            self._prepare_binary(extract_dir / self.binary_name)

            cached = self.cache.store(self.tool, version, extract_dir)
            logger.debug(f"Cached to {cached}")
        except OSError as e:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise ExtractionError(str(work_dir), str(e)) from e
        except Exception:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise

        # In-memory caches keep referencing the extracted files
        if not cached.is_relative_to(work_dir):
            shutil.rmtree(work_dir, ignore_errors=True)
        return cached

    def _prepare_binary(self, exe_path: Path) -> None:
        """Check the extracted release holds the executable and make it runnable."""
        if not exe_path.is_file():
            raise ExtractionError(str(exe_path.parent), f"release has no {self.binary_name}")
        try:
            exe_path.chmod(0o755)
        except OSError as e:
            raise ExtractionError(str(exe_path), f"cannot make executable: {e}") from e

    def _download(self, url: str, destination: Path) -> None:
        """Stream a release archive to disk."""
        logger.info(f"Downloading {url}")
        try:
            with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise DownloadError(url, f"HTTP {status}") from e
        except requests.RequestException as e:
            raise DownloadError(url, str(e)) from e
        except OSError as e:
            raise DownloadError(url, f"cannot write {destination}: {e}") from e
        logger.debug(f"Downloaded to {destination}")

    def _extract(self, archive: Path, destination: Path) -> None:
        """Extract a release archive (zip on Windows, tarball elsewhere)."""
        logger.info(f"Extracting {self.tool}")
        try:
            if self.platform.is_windows:
                with zipfile.ZipFile(archive) as zf:
                    zf.extractall(destination)
            else:
                with tarfile.open(archive, "r:*") as tf:
                    if hasattr(tarfile, "data_filter"):
                        tf.extractall(destination, filter="data")
                    else:
                        tf.extractall(destination)
        except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
            raise ExtractionError(archive.name, str(e)) from e
        logger.debug(f"Extracted to {destination}")


__all__ = ["BinaryInstaller"]
