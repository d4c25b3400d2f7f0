"""
Release index integration for scanner releases.

Resolves a version specifier ("latest", a tag, or a commit-like token) to a
concrete release, either from the live GitHub releases endpoint or from a
mirrored JSON index mapping versions to release objects.
"""

import logging
import re
from typing import Any, Optional

import requests
from packaging.version import InvalidVersion, Version

from constants import GITHUB_HOST, RELEASE_INDEX_TIMEOUT, TOOL_PROJECT
from core.exceptions import ReleaseFetchError, ReleaseNotFoundError
from core.models import ReleaseDescriptor

logger = logging.getLogger(__name__)

BARE_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+")


class ReleaseResolver:
    """
    Client for a scanner release index.

    Makes a single request per resolution; failures are not retried.
    """

    def __init__(
        self,
        project: str = TOOL_PROJECT,
        host: str = GITHUB_HOST,
        mirror_url: Optional[str] = None,
        timeout: int = RELEASE_INDEX_TIMEOUT,
    ):
        """
        Initialize release resolver.

        Args:
            project: Upstream project (owner/name)
            host: Host serving the releases page
            mirror_url: JSON index mapping versions to releases (optional)
            timeout: Request timeout in seconds
        """
        self.project = project
        self.host = host
        self.mirror_url = mirror_url
        self.timeout = timeout

    def resolve(self, version_spec: str) -> ReleaseDescriptor:
        """
        Resolve a version specifier to a release.

        Args:
            version_spec: "latest", a tag (e.g., "v0.19.2"), or a commit-like token

        Returns:
            ReleaseDescriptor for the matching release

        Raises:
            ReleaseNotFoundError: If the index has no entry for the specifier
            ReleaseFetchError: If the index cannot be fetched
        """
        if self.mirror_url:
            release = self._resolve_from_mirror(version_spec)
        else:
            release = self._resolve_live(version_spec)

        tag = release.get("tag_name") if isinstance(release, dict) else None
        if not tag:
            raise ReleaseNotFoundError(version_spec)

        logger.debug(f"Release {tag} found")
        return ReleaseDescriptor(
            tag=tag,
            download_assets={"assets": release.get("assets", [])},
            release_id=release.get("id"),
        )

    def release_url(self, version_spec: str) -> str:
        """Build the live releases endpoint for a specifier."""
        base = f"https://{self.host}/{self.project}/releases"
        if version_spec == "latest":
            return f"{base}/latest"

        tag = version_spec
        if BARE_VERSION_PATTERN.match(tag):
            tag = f"v{tag}"
        return f"{base}/tag/{tag}"

    def _resolve_live(self, version_spec: str) -> dict[str, Any]:
        """Fetch a single release object from the live endpoint."""
        return self._fetch_json(self.release_url(version_spec), version_spec)

    def _resolve_from_mirror(self, version_spec: str) -> dict[str, Any]:
        """Look up a release in the mirrored version index."""
        index = self._fetch_json(self.mirror_url, version_spec)
        if not isinstance(index, dict):
            raise ReleaseFetchError(self.mirror_url, "release index is not a JSON object")

        if version_spec == "latest":
            if "latest" in index:
                return index["latest"]
            newest = _newest_version_key(index)
            if newest is None:
                raise ReleaseNotFoundError(version_spec)
            return index[newest]

        for key in (version_spec, f"v{version_spec}", version_spec.lstrip("v")):
            if key in index:
                return index[key]

        raise ReleaseNotFoundError(version_spec)

    def _fetch_json(self, url: str, version_spec: str) -> Any:
        """
        GET a JSON document.

        Raises:
            ReleaseNotFoundError: On 404
            ReleaseFetchError: On transport failure, other non-2xx, or invalid JSON
        """
        logger.debug(f"Fetching release index {url}")
        try:
            response = requests.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ReleaseFetchError(url, str(e)) from e

        if response.status_code == 404:
            raise ReleaseNotFoundError(version_spec)

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ReleaseFetchError(
                url,
                "unexpected response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ReleaseFetchError(
                url,
                f"invalid JSON: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e


def _newest_version_key(index: dict[str, Any]) -> Optional[str]:
    """Return the key holding the highest version, ignoring non-version keys."""
    newest = None
    newest_version = None
    for key in index:
        try:
            version = Version(key.lstrip("v"))
        except InvalidVersion:
            continue
        if newest_version is None or version > newest_version:
            newest, newest_version = key, version
    return newest


__all__ = ["ReleaseResolver"]
