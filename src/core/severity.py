"""
Severity model and threshold evaluation.

Severity tokens outside SEVERITY_NAMES are not part of the order: they are
reported as informational findings and never contribute to pass/fail.
"""

from typing import Optional

from core.exceptions import ConfigurationError
from core.models import SEVERITY_NAMES, SeverityLevel


def parse_severity(token: Optional[str]) -> Optional[SeverityLevel]:
    """
    Map a reported severity token to its level.

    Args:
        token: Severity as reported by the scanner (e.g., "HIGH")

    Returns:
        SeverityLevel, or None when the token is not a canonical name
    """
    if not token:
        return None
    return SEVERITY_NAMES.get(token)


def get_severity_name(level: SeverityLevel) -> str:
    """Return the canonical uppercase token of a level."""
    for name, value in SEVERITY_NAMES.items():
        if value == level:
            return name
    raise KeyError(level)


def parse_threshold(name: Optional[str]) -> Optional[SeverityLevel]:
    """
    Parse the configured severity threshold.

    Args:
        name: Threshold name in any case, empty or None for "never fail"

    Returns:
        SeverityLevel, or None when no threshold is configured

    Raises:
        ConfigurationError: If the name is not a known severity
    """
    if name is None or not name.strip():
        return None

    level = SEVERITY_NAMES.get(name.strip().upper())
    if level is None:
        allowed = ", ".join(SEVERITY_NAMES)
        raise ConfigurationError(
            f"unknown severity {name!r} (expected one of {allowed})",
            "severity_threshold",
        )
    return level


def meets_threshold(level: SeverityLevel, threshold: Optional[SeverityLevel]) -> bool:
    """
    Check whether a finding fails the threshold.

    The comparison is inclusive: a finding at exactly the threshold fails.
    No threshold means nothing ever fails.
    """
    if threshold is None:
        return False
    return level >= threshold


__all__ = [
    "parse_severity",
    "get_severity_name",
    "parse_threshold",
    "meets_threshold",
]
