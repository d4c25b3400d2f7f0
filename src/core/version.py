"""
Scanner version helpers.

Parses the scanner's version output and checks versions against ranges.
Commit-pinned builds report a short commit hash as their version and are
accepted by every range.
"""

import logging
import re
from pathlib import Path
from typing import Union

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from core.exceptions import ScanExecutionError, VersionParseError
from core.process import ProcessRunner

logger = logging.getLogger(__name__)

SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
"""Strict semantic version (MAJOR.MINOR.PATCH[-prerelease][+build])."""

COMMIT_PATTERN = re.compile(r"^[0-9a-f]{7}$")
"""Short commit hash reported by commit-pinned builds."""


def is_valid_semver(version: str) -> bool:
    """Check that a normalized version is a strict semantic version."""
    return SEMVER_PATTERN.match(version.strip()) is not None


def parse_version(output: str) -> str:
    """
    Extract the scanner version from its version output.

    The output is line-oriented "Key: value" pairs; the first line keyed
    exactly "Version" wins. Values may themselves contain colons.

    Args:
        output: Stdout of the version command

    Returns:
        Version string (e.g., "0.19.2")

    Raises:
        VersionParseError: If no "Version" line is present

    Examples:
        >>> parse_version("Version: 0.19.2\\nVulnerability DB:\\n  Version: 1")
        '0.19.2'
    """
    for line in output.split("\n"):
        key, _, rest = line.partition(":")
        value = rest.strip()
        if not key or not value:
            continue
        if key == "Version":
            return value
    raise VersionParseError(output)


WILDCARDS = {"x", "X", "*"}

PARTIAL_VERSION_PATTERN = re.compile(
    r"^v?(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?([-+].*)?$"
)
"""Version with optional minor/patch, wildcards and prerelease/build suffix."""

COMPARATOR_PATTERN = re.compile(r"^(>=|<=|!=|>|<|=|\^|~>|~)?\s*(.*)$")

HYPHEN_RANGE_PATTERN = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")


def _bump(numbers: list[int], index: int) -> str:
    """Upper bound that increments numbers[index] and zeroes the rest."""
    bumped = numbers[:index] + [numbers[index] + 1]
    return ".".join(str(n) for n in bumped + [0] * (3 - len(bumped)))


def _expand_comparator(token: str) -> list[str]:
    """
    Translate one semver comparator into PEP 440 specifiers.

    Examples:
        ^0.19.2 -> >=0.19.2, <0.20.0
        ~0.20.0 -> >=0.20.0, <0.21.0
        0.20.x  -> >=0.20.0, <0.21.0
        =0.20.0 -> ==0.20.0
    """
    operator, version = COMPARATOR_PATTERN.match(token).groups()
    operator = operator or "="

    if version in WILDCARDS or not version:
        return []

    match = PARTIAL_VERSION_PATTERN.match(version)
    if not match:
        raise ValueError(f"invalid comparator {token!r}")

    numbers = []
    for part in match.groups()[:3]:
        if part is None or part in WILDCARDS:
            break
        numbers.append(int(part))
    if not numbers:
        return []

    full = len(numbers) == 3
    exact = version.lstrip("v")
    lower = exact if full else ".".join(str(n) for n in numbers + [0] * (3 - len(numbers)))

    if operator == "<=" and not full:
        return [f"<{_bump(numbers, len(numbers) - 1)}"]
    if operator == ">" and not full:
        return [f">={_bump(numbers, len(numbers) - 1)}"]
    if operator in (">=", "<=", ">", "<", "!="):
        return [f"{operator}{lower}"]

    if operator == "^":
        nonzero = [i for i, n in enumerate(numbers) if n != 0]
        index = nonzero[0] if nonzero else len(numbers) - 1
        return [f">={lower}", f"<{_bump(numbers, index)}"]

    if operator in ("~", "~>"):
        index = 1 if len(numbers) >= 2 else 0
        return [f">={lower}", f"<{_bump(numbers, index)}"]

    if full:
        return [f"=={exact}"]
    return [f">={lower}", f"<{_bump(numbers, len(numbers) - 1)}"]


def semver_range_to_specifiers(version_range: str) -> SpecifierSet:
    """
    Convert one semver range (no "||") into a PEP 440 SpecifierSet.

    Comparators are separated by whitespace or commas. Caret, tilde,
    x-ranges, bare or "=" versions and "a - b" hyphen ranges are supported.

    Raises:
        ValueError: If a comparator cannot be parsed
        InvalidSpecifier: If the translated specifier is rejected
    """
    hyphen = HYPHEN_RANGE_PATTERN.match(version_range)
    if hyphen:
        version_range = f">={hyphen.group(1)} <={hyphen.group(2)}"

    # ">= 0.19.2" is one comparator
    version_range = re.sub(r"(>=|<=|!=|~>|[><=^~])\s+", r"\1", version_range.strip())

    specifiers = []
    for token in re.split(r"[\s,]+", version_range):
        if token:
            specifiers.extend(_expand_comparator(token))
    return SpecifierSet(",".join(specifiers))


def satisfies(version: str, version_range: str) -> bool:
    """
    Check a version against a semver range.

    Args:
        version: Version to check (e.g., "0.20.0")
        version_range: Range such as ">=0.19.2 <0.21.0", "^0.20.0", "~0.20.0",
            "0.20.x" or ">=0.21.0 || 0.19.x"

    Returns:
        True if the version is in range, or if it is a short commit hash
    """
    if COMMIT_PATTERN.match(version):
        return True

    try:
        candidate = Version(version.lstrip("v"))
    except InvalidVersion as e:
        logger.debug(f"Cannot compare {version!r}: {e}")
        return False

    for alternative in version_range.split("||"):
        try:
            specifiers = semver_range_to_specifiers(alternative)
        except (ValueError, InvalidSpecifier) as e:
            logger.debug(f"Cannot parse range {version_range!r}: {e}")
            return False
        if candidate in specifiers:
            return True
    return False


def get_version(binary: Union[str, Path], runner: ProcessRunner) -> str:
    """
    Query the version of an installed scanner.

    Raises:
        ScanExecutionError: If the version command fails with an error message
        VersionParseError: If the output has no version line
    """
    result = runner.run(binary, ["--version"], silent=True)
    if result.stderr and not result.succeeded:
        raise ScanExecutionError("version", result.stderr.strip(), result.exit_code)
    return parse_version(result.stdout.strip())


__all__ = [
    "is_valid_semver",
    "parse_version",
    "satisfies",
    "semver_range_to_specifiers",
    "get_version",
]
