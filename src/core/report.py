"""
Structured scan report parsing.

Reads the scanner's JSON report and flattens it into findings, keeping the
report's order: results in file order, vulnerabilities in file order within
each result.
"""

import json
import logging
from pathlib import Path

from core.exceptions import ReportParseError
from core.models import Vulnerability

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Normalizes a JSON scan report into an ordered list of findings."""

    def aggregate(self, json_file: Path) -> tuple[Vulnerability, ...]:
        """
        Parse a JSON report.

        A report without results, or results without vulnerabilities, yields
        an empty sequence.

        Args:
            json_file: Path to the JSON report

        Returns:
            Findings in report order

        Raises:
            ReportParseError: If the file cannot be read or is not a JSON object
        """
        try:
            content = Path(json_file).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ReportParseError(str(json_file), str(e)) from e

        if not content:
            raise ReportParseError(str(json_file), "report is empty")

        try:
            report = json.loads(content)
        except json.JSONDecodeError as e:
            raise ReportParseError(str(json_file), str(e)) from e

        if not isinstance(report, dict):
            raise ReportParseError(str(json_file), f"expected an object, got {type(report).__name__}")

        return tuple(self._iter_vulnerabilities(report, str(json_file)))

    def _iter_vulnerabilities(self, report: dict, source: str):
        results = report.get("Results") or []
        if not isinstance(results, list):
            logger.warning(f"Unexpected Results format in {source}: {type(results)}")
            return

        for result in results:
            if not isinstance(result, dict):
                logger.warning(f"Malformed result entry in {source}, skipping")
                continue

            vulns = result.get("Vulnerabilities") or []
            if not isinstance(vulns, list):
                logger.warning(
                    f"Unexpected Vulnerabilities format for {result.get('Target', '?')} in {source}"
                )
                continue

            for vuln in vulns:
                if not isinstance(vuln, dict):
                    logger.warning(f"Malformed vulnerability entry in {source}, skipping")
                    continue
                yield Vulnerability.from_report_dict(vuln)


__all__ = ["ResultAggregator"]
