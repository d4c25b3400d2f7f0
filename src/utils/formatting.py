"""
Formatting utilities for container-scan output.

Provides common formatting functions for numbers, truncated text, and
severity-colored console lines.
"""

from constants import TITLE_ELLIPSIS


class Colors:
    """ANSI color codes for console styling."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    WHITE = "\033[37m"

    BG_RED = "\033[41m"


SEVERITY_COLORS = {
    "CRITICAL": Colors.BOLD + Colors.BG_RED + Colors.WHITE,
    "HIGH": Colors.RED,
    "MEDIUM": Colors.YELLOW,
    "LOW": Colors.BLUE,
    "UNKNOWN": Colors.MAGENTA,
}
"""Console style per uppercase severity token."""


def format_number(num: int) -> str:
    """
    Format number with thousands separators.

    Args:
        num: Integer to format

    Returns:
        Formatted number string with commas (e.g., "1,234,567")

    Examples:
        >>> format_number(1234567)
        '1,234,567'
        >>> format_number(100)
        '100'
    """
    return f"{num:,}"


def truncate_text(text: str, max_length: int, marker: str = TITLE_ELLIPSIS) -> str:
    """
    Truncate text so that the result, marker included, fits in max_length.

    Args:
        text: Text to truncate
        max_length: Maximum length of the result
        marker: Suffix appended when text is cut

    Returns:
        Original text if short enough, otherwise a prefix ending with marker

    Examples:
        >>> truncate_text("short", 48)
        'short'
        >>> truncate_text("abcdefghij", 8)
        'abcde...'
    """
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(marker), 0)].rstrip() + marker


def colorize(text: str, severity: str) -> str:
    """Wrap text in the console style for a severity token, if it has one."""
    style = SEVERITY_COLORS.get(severity.upper())
    if not style:
        return text
    return f"{style}{text}{Colors.RESET}"


def format_finding_row(
    package_name: str,
    vulnerability_id: str,
    severity: str,
    title: str,
) -> str:
    """
    Format a finding as a fixed-width console row.

    Columns are package (30), id (20), severity (10, colored), title.

    Examples:
        >>> format_finding_row("openssl", "CVE-2021-3711", "LOW", "overflow")  # doctest: +SKIP
        'openssl                        CVE-2021-3711        \\x1b[34mLOW       \\x1b[0m overflow'
    """
    return (
        f"{package_name:<30} "
        f"{vulnerability_id:<20} "
        f"{colorize(f'{severity:<10}', severity)} "
        f"{title}"
    )
