"""
Logging helpers for container-scan.

Each phase of a scan run (install, scan, report, annotations) is logged as a
titled group, and failures are logged as a single error section.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Union

SEPARATOR_WIDTH = 60


def _separator(char: str = "=") -> str:
    return char * SEPARATOR_WIDTH


@contextmanager
def log_group(
    title: str,
    logger: Optional[logging.Logger] = None,
) -> Iterator[None]:
    """
    Log a run phase as a titled group.

    The title is logged under a separator when the phase starts. When it
    ends, the elapsed time is logged at debug level; if it raises, the
    failure is noted and the exception propagates unchanged.

    Args:
        title: Phase title (e.g., "Download and install trivy")
        logger: Logger instance (defaults to root logger if not provided)

    Examples:
        >>> with log_group("Download and install trivy"):
        ...     installer.install("latest")
        ============================================================
        Download and install trivy
        ============================================================
    """
    if logger is None:
        logger = logging.getLogger()

    logger.info(_separator())
    logger.info(title)
    logger.info(_separator())

    started = time.monotonic()
    try:
        yield
    except Exception:
        logger.debug(f"{title}: failed after {time.monotonic() - started:.1f}s")
        raise
    logger.debug(f"{title}: done in {time.monotonic() - started:.1f}s")


def log_error_section(
    title: str,
    error: Union[BaseException, str],
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a failure as one error section.

    Multi-line messages (such as a release index error carrying the response
    body) are logged line by line.

    Args:
        title: Section title
        error: Exception or message to report
        logger: Logger instance (defaults to root logger if not provided)

    Examples:
        >>> log_error_section("Scan failed", ReleaseNotFoundError("v9.9.9"))
        ============================================================
        Scan failed
        Cannot find trivy v9.9.9 release
        ============================================================
    """
    if logger is None:
        logger = logging.getLogger()

    logger.error(_separator())
    logger.error(title)
    for line in str(error).strip().splitlines() or [type(error).__name__]:
        logger.error(line)
    logger.error(_separator())


__all__ = [
    "log_group",
    "log_error_section",
]
