"""
Multi-format scan execution.

Runs the scanner once per output format (table, json, sarif) for a single
scan request, each run writing its own result file, then parses the JSON
report into findings.
"""

import logging
from pathlib import Path
from typing import Optional

from constants import AUTH_TOKEN_ENV_VAR, SARIF_TEMPLATE_RELATIVE_PATH
from core.exceptions import ScanExecutionError, ScanResultMissingError
from core.models import ScanFormat, ScanRequest, ScanResult
from core.process import ProcessRunner
from core.report import ResultAggregator

logger = logging.getLogger(__name__)

SILENT_FORMATS = {ScanFormat.JSON, ScanFormat.SARIF}
"""Formats whose scanner output is not echoed to the log."""


class ScanExecutor:
    """
    Scanner driver producing one report file per format.

    Every format is a fresh process; formats share nothing but the request.
    """

    def __init__(
        self,
        output_dir: Path,
        runner: Optional[ProcessRunner] = None,
        aggregator: Optional[ResultAggregator] = None,
    ):
        """
        Initialize scan executor.

        Args:
            output_dir: Run working directory receiving result files
            runner: Process runner (defaults to a new ProcessRunner)
            aggregator: JSON report parser (defaults to a new ResultAggregator)
        """
        self.output_dir = output_dir
        self.runner = runner or ProcessRunner()
        self.aggregator = aggregator or ResultAggregator()

    def scan(self, request: ScanRequest) -> ScanResult:
        """
        Scan an image or image archive in every output format.

        Args:
            request: Scan request with exactly one of image/tarball set

        Returns:
            ScanResult with report files and parsed findings

        Raises:
            ScanExecutionError: If a scanner run fails with an error message
            ScanResultMissingError: If a scanner run leaves no result file
            ReportParseError: If the JSON report is malformed
        """
        logger.info(f"🔍 Scanning {request.target}")

        table_file = self._scan_format(ScanFormat.TABLE, request)
        json_file = self._scan_format(ScanFormat.JSON, request)

        sarif_file = None
        template = self._sarif_template(request)
        if template is None:
            logger.warning("SARIF template not found, skipping SARIF report")
        else:
            sarif_file = self._scan_format(ScanFormat.SARIF, request, template=template)

        vulnerabilities = self.aggregator.aggregate(json_file)
        logger.info(f"✓ {request.target} - {len(vulnerabilities)} vulnerabilities")

        return ScanResult(
            table_file=table_file,
            json_file=json_file,
            sarif_file=sarif_file,
            vulnerabilities=vulnerabilities,
        )

    def result_path(self, scan_format: ScanFormat) -> Path:
        return self.output_dir / f"result.{scan_format.value}"

    def build_args(
        self,
        scan_format: ScanFormat,
        request: ScanRequest,
        template: Optional[Path] = None,
    ) -> list[str]:
        """Build scanner arguments for one output format."""
        args = ["image", "--no-progress", "--output", self.result_path(scan_format).as_posix()]

        if request.severity:
            args += ["--severity", request.severity]
        if request.ignore_unfixed:
            args.append("--ignore-unfixed")

        if scan_format == ScanFormat.SARIF:
            args += ["--format", "template", "--template", f"@{Path(template).as_posix()}"]
        else:
            args += ["--format", scan_format.value]

        if request.image:
            args.append(request.image)
        elif request.tarball:
            args += ["--input", request.tarball]

        return args

    def _sarif_template(self, request: ScanRequest) -> Optional[Path]:
        """Return the configured template, else the one shipped with the scanner."""
        if request.sarif_template:
            template = Path(request.sarif_template)
            return template if template.is_file() else None

        bundled = Path(request.binary_path).parent / SARIF_TEMPLATE_RELATIVE_PATH
        return bundled if bundled.is_file() else None

    def _scan_format(
        self,
        scan_format: ScanFormat,
        request: ScanRequest,
        template: Optional[Path] = None,
    ) -> Path:
        """Run the scanner for one format and return its result file."""
        result_file = self.result_path(scan_format)
        env = {AUTH_TOKEN_ENV_VAR: request.auth_token} if request.auth_token else None

        result = self.runner.run(
            request.binary_path,
            self.build_args(scan_format, request, template),
            env=env,
            silent=scan_format in SILENT_FORMATS,
        )

        if result.stderr and not result.succeeded:
            raise ScanExecutionError(scan_format.value, result.stderr.strip(), result.exit_code)
        if not result_file.exists():
            raise ScanResultMissingError(scan_format.value)

        logger.debug(f"{scan_format.value} report written to {result_file}")
        return result_file


__all__ = ["ScanExecutor"]
