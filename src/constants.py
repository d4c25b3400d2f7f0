"""
Centralized configuration constants for container-scan.

This module provides a single source of truth for configuration values
that are used across multiple modules, making them easier to update
and maintain.
"""

# ============================================================================
# Scanner Tool
# ============================================================================

TOOL_NAME = "trivy"
"""Name of the scanner executable and its cache key."""

DEFAULT_TOOL_VERSION = "latest"
"""Version specifier used when none is configured."""

GITHUB_HOST = "github.com"
"""Host serving release metadata and release archives."""

TOOL_PROJECT = "aquasecurity/trivy"
"""Upstream project publishing scanner releases."""

SARIF_TEMPLATE_RELATIVE_PATH = "contrib/sarif.tpl"
"""SARIF template shipped inside the release archive, relative to the binary."""

AUTH_TOKEN_ENV_VAR = "GITHUB_TOKEN"
"""Environment variable carrying the auth token into the scanner process."""

# ============================================================================
# Cache
# ============================================================================

TOOL_CACHE_ENV_VAR = "RUNNER_TOOL_CACHE"
"""Environment variable pointing at a shared tool cache directory."""

DEFAULT_TOOL_CACHE_DIR = "~/.cache/container-scan/tools"
"""Tool cache directory used when no other location is configured."""

# ============================================================================
# Report Normalization
# ============================================================================

TITLE_MAX_LENGTH = 48
"""Maximum length of a title backfilled from a description, marker included."""

TITLE_ELLIPSIS = "..."
"""Marker appended to a truncated description."""

# ============================================================================
# Timeouts (in seconds)
# ============================================================================

RELEASE_INDEX_TIMEOUT = 30
"""Timeout for release index requests (30 seconds)."""

DOWNLOAD_TIMEOUT = 300
"""Timeout for release archive downloads (5 minutes)."""

DOWNLOAD_CHUNK_SIZE = 1024 * 1024
"""Chunk size for streamed archive downloads (1 MiB)."""

# ============================================================================
# Outputs
# ============================================================================

OUTPUTS_FILE_ENV_VAR = "GITHUB_OUTPUT"
"""Environment variable naming the file that receives run outputs."""

INPUT_ENV_PREFIX = "INPUT_"
"""Prefix of environment variables carrying run configuration."""
