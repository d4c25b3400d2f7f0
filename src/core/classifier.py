"""
Finding classification against a severity threshold.

Each finding with a recognized severity gets an annotation message, a
display channel and an unhealthy flag. Findings are processed sequentially
in report order, and annotations are emitted in that same order.
"""

import logging
from typing import Iterable, Optional

from core.interfaces import AnnotationSink
from core.models import (
    AnnotationChannel,
    ClassificationReport,
    ClassificationResult,
    SeverityLevel,
    Vulnerability,
)
from core.severity import get_severity_name, meets_threshold, parse_severity
from utils.formatting import format_finding_row

logger = logging.getLogger(__name__)

SEVERITY_CHANNELS: dict[SeverityLevel, AnnotationChannel] = {
    SeverityLevel.UNKNOWN: AnnotationChannel.NOTICE,
    SeverityLevel.LOW: AnnotationChannel.NOTICE,
    SeverityLevel.MEDIUM: AnnotationChannel.WARNING,
    SeverityLevel.HIGH: AnnotationChannel.WARNING,
    SeverityLevel.CRITICAL: AnnotationChannel.WARNING,
}
"""Channel for findings that do not fail the threshold. Unhealthy findings go to ERROR."""


def annotation_message(vuln: Vulnerability) -> str:
    """Build the annotation message for a finding."""
    return (
        f"{vuln.id} - {vuln.severity} severity - "
        f"{vuln.title or ''} vulnerability in {vuln.package_name}"
    )


class Classifier:
    """
    Classifies findings against a configured severity threshold.

    A threshold of None means "never fail": findings are still annotated
    but none is marked unhealthy.
    """

    def __init__(self, threshold: Optional[SeverityLevel] = None):
        """
        Initialize classifier.

        Args:
            threshold: Minimum severity that fails the run (inclusive)
        """
        self.threshold = threshold

    def classify_one(self, vuln: Vulnerability) -> Optional[ClassificationResult]:
        """
        Classify a single finding.

        Returns:
            ClassificationResult, or None if the severity is not recognized
        """
        level = parse_severity(vuln.severity)
        if level is None:
            return None

        unhealthy = meets_threshold(level, self.threshold)
        if unhealthy:
            channel = AnnotationChannel.ERROR
            console_line = format_finding_row(
                vuln.package_name,
                vuln.id,
                get_severity_name(level),
                vuln.title or "",
            )
        else:
            channel = SEVERITY_CHANNELS[level]
            console_line = None

        return ClassificationResult(
            vulnerability=vuln,
            severity=level,
            annotation_message=annotation_message(vuln),
            unhealthy=unhealthy,
            channel=channel,
            console_line=console_line,
        )

    def classify(self, vulns: Iterable[Vulnerability]) -> ClassificationReport:
        """
        Classify all findings of a run in order.

        Args:
            vulns: Findings in report order

        Returns:
            ClassificationReport with results, informational findings, and
            the run-level unhealthy flag
        """
        results = []
        informational = []
        any_unhealthy = False

        for vuln in vulns:
            result = self.classify_one(vuln)
            if result is None:
                logger.debug(f"Unrecognized severity {vuln.severity!r} for {vuln.id}, not evaluated")
                informational.append(vuln)
                continue
            results.append(result)
            any_unhealthy = any_unhealthy or result.unhealthy

        return ClassificationReport(
            results=tuple(results),
            informational=tuple(informational),
            any_unhealthy=any_unhealthy,
        )


def emit_annotations(report: ClassificationReport, sink: AnnotationSink) -> None:
    """
    Send classified findings to an annotation sink, in report order.

    Unhealthy findings also print their colored console line. Findings with
    an unrecognized severity are sent as notices.
    """
    channels = {
        AnnotationChannel.NOTICE: sink.notice,
        AnnotationChannel.WARNING: sink.warning,
        AnnotationChannel.ERROR: sink.error,
    }

    for result in report.results:
        if result.console_line:
            logger.info(result.console_line)
        channels[result.channel](result.annotation_message)

    for vuln in report.informational:
        sink.notice(annotation_message(vuln))


class LoggingAnnotationSink(AnnotationSink):
    """Annotation sink that writes each channel to the matching log level."""

    def __init__(self, sink_logger: Optional[logging.Logger] = None):
        self.logger = sink_logger or logger

    def notice(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


__all__ = [
    "SEVERITY_CHANNELS",
    "Classifier",
    "LoggingAnnotationSink",
    "annotation_message",
    "emit_annotations",
]
