"""
Run configuration.

Settings are merged from command-line flags, INPUT_* environment variables
and an optional YAML file, in that order of precedence, into an immutable
ScanConfig.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from constants import (
    DEFAULT_TOOL_CACHE_DIR,
    DEFAULT_TOOL_VERSION,
    INPUT_ENV_PREFIX,
    TOOL_CACHE_ENV_VAR,
)
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "True", "TRUE"}
FALSE_VALUES = {"false", "False", "FALSE"}


@dataclass(frozen=True)
class ScanConfig:
    """
    Configuration of a single scan run.

    Attributes:
        trivy_version: Scanner version specifier ("latest", tag, or commit-like)
        image: Image reference to scan
        tarball: Image archive to scan
        severity: Severity filter passed through to the scanner
        severity_threshold: Minimum severity failing the run (unset = never fail)
        annotations: Emit one annotation per finding
        github_token: Token exported to the scanner process
        ignore_unfixed: Skip findings without a fixed version
        sarif_template: Template for the SARIF report (defaults to the bundled one)
        release_index_url: Mirrored release index URL (defaults to live releases)
        cache_dir: Tool cache directory
    """

    trivy_version: str = DEFAULT_TOOL_VERSION
    image: Optional[str] = None
    tarball: Optional[str] = None
    severity: Optional[str] = None
    severity_threshold: Optional[str] = None
    annotations: bool = False
    github_token: Optional[str] = None
    ignore_unfixed: bool = False
    sarif_template: Optional[Path] = None
    release_index_url: Optional[str] = None
    cache_dir: Optional[Path] = None

    @property
    def tool_cache_dir(self) -> Path:
        """Configured cache directory, else RUNNER_TOOL_CACHE, else the user cache."""
        if self.cache_dir:
            return Path(self.cache_dir).expanduser()
        runner_cache = os.environ.get(TOOL_CACHE_ENV_VAR)
        if runner_cache:
            return Path(runner_cache)
        return Path(DEFAULT_TOOL_CACHE_DIR).expanduser()


BOOLEAN_KEYS = {"annotations", "ignore_unfixed"}
PATH_KEYS = {"sarif_template", "cache_dir"}


def parse_bool(value: Any, key: str) -> bool:
    """
    Parse a boolean setting.

    Accepts real booleans and the strings true/True/TRUE and false/False/FALSE.

    Raises:
        ConfigurationError: For any other value
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{value!r} is not a boolean (expected true or false)",
        key,
    )


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or not a YAML mapping
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read {path}: {e}", "config") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse {path}: {e}", "config") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping", "config")
    return data


def settings_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect INPUT_<KEY> variables for every known setting, skipping empty values."""
    settings = {}
    for f in fields(ScanConfig):
        value = environ.get(f"{INPUT_ENV_PREFIX}{f.name.upper()}", "")
        if value.strip():
            settings[f.name] = value
    return settings


def build_config(
    cli_settings: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
) -> ScanConfig:
    """
    Merge configuration sources into a ScanConfig.

    Args:
        cli_settings: Values given on the command line (None means unset)
        environ: Environment variables (defaults to os.environ)
        config_file: YAML file with settings (optional)

    Returns:
        ScanConfig

    Raises:
        ConfigurationError: For unknown keys or invalid values
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(ScanConfig)}

    merged: dict[str, Any] = {}
    if config_file:
        file_settings = load_config_file(config_file)
        unknown = set(file_settings) - known
        if unknown:
            raise ConfigurationError(f"unknown keys {', '.join(sorted(unknown))}", "config")
        merged.update({k: v for k, v in file_settings.items() if v is not None})

    merged.update(settings_from_env(environ))
    merged.update({k: v for k, v in (cli_settings or {}).items() if v is not None and k in known})

    for key in BOOLEAN_KEYS & merged.keys():
        merged[key] = parse_bool(merged[key], key)
    for key in PATH_KEYS & merged.keys():
        merged[key] = Path(str(merged[key])).expanduser()
    for key in known - BOOLEAN_KEYS - PATH_KEYS:
        if key in merged:
            merged[key] = str(merged[key]).strip() or None

    if not merged.get("trivy_version"):
        merged["trivy_version"] = DEFAULT_TOOL_VERSION

    logger.debug(f"Configuration keys set: {', '.join(sorted(merged))}")
    return ScanConfig(**merged)


__all__ = [
    "ScanConfig",
    "build_config",
    "load_config_file",
    "parse_bool",
    "settings_from_env",
]
