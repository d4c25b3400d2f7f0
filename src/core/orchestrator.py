"""
Orchestrates the scan workflow: install, scan, report, classify.
"""
import logging
import tempfile
from pathlib import Path
from typing import Optional

from core.cache import DirectoryToolCache
from core.classifier import Classifier, LoggingAnnotationSink, emit_annotations
from core.config import ScanConfig
from core.exceptions import VersionParseError
from core.installer import BinaryInstaller
from core.interfaces import AnnotationSink
from core.models import PlatformInfo, RunOutcome, ScanRequest, ScanResult
from core.process import ProcessRunner
from core.scanner import ScanExecutor
from core.severity import get_severity_name, parse_threshold
from core.version import get_version
from integrations.github_releases import ReleaseResolver
from utils.formatting import format_number
from utils.logging_helpers import log_group
from utils.validation import validate_scan_target

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """
    Orchestrates a scan run from configuration to pass/fail outcome.

    Every step runs sequentially; the first error aborts the run.
    """

    def __init__(
        self,
        config: ScanConfig,
        installer: Optional[BinaryInstaller] = None,
        runner: Optional[ProcessRunner] = None,
        sink: Optional[AnnotationSink] = None,
        platform: Optional[PlatformInfo] = None,
        work_dir: Optional[Path] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Run configuration
            installer: Scanner installer (built from config when omitted)
            runner: Process runner shared by all scanner runs
            sink: Annotation destination (logs by default)
            platform: Target platform (detected when omitted)
            work_dir: Run working directory (a new temp directory when omitted)
        """
        self.config = config
        self.platform = platform or PlatformInfo.detect()
        self.installer = installer or self._build_installer()
        self.runner = runner or ProcessRunner()
        self.sink = sink or LoggingAnnotationSink()
        self._work_dir = work_dir

    @property
    def work_dir(self) -> Path:
        """Temporary directory holding this run's report files, created once."""
        if self._work_dir is None:
            self._work_dir = Path(tempfile.mkdtemp(prefix="container-scan-"))
            logger.debug(f"Working directory: {self._work_dir}")
        return self._work_dir

    def _build_installer(self) -> BinaryInstaller:
        cache = DirectoryToolCache(self.config.tool_cache_dir, self.platform.arch)
        resolver = ReleaseResolver(mirror_url=self.config.release_index_url)
        return BinaryInstaller(resolver, cache, self.platform)

    def _log_scanner_version(self, binary_path: Path) -> None:
        """Log the version the installed scanner reports about itself."""
        try:
            reported = get_version(binary_path, self.runner)
        except VersionParseError:
            logger.warning(f"Could not determine version of {binary_path}")
            return
        logger.info(f"Using trivy {reported}")

    def run(self) -> RunOutcome:
        """
        Execute the scan workflow.

        Returns:
            RunOutcome with outputs and the pass/fail decision

        Raises:
            ContainerScanError: On any configuration, install, or scan failure
        """
        config = self.config

        # Checked before any network or process activity
        threshold = parse_threshold(config.severity_threshold)
        image, tarball = validate_scan_target(config.image, config.tarball)

        with log_group("Download and install trivy", logger=logger):
            binary = self.installer.install(config.trivy_version)
            self._log_scanner_version(binary.path)

        request = ScanRequest(
            binary_path=binary.path,
            image=image,
            tarball=tarball,
            severity=config.severity,
            ignore_unfixed=config.ignore_unfixed,
            auth_token=config.github_token,
            sarif_template=config.sarif_template,
        )

        with log_group(f"Scanning {request.target} Docker image", logger=logger):
            executor = ScanExecutor(self.work_dir, runner=self.runner)
            result = executor.scan(request)
        outputs = collect_outputs(result)

        for name, path in (
            ("table", result.table_file),
            ("json", result.json_file),
            ("sarif", result.sarif_file),
        ):
            log_report_file(name, path)

        classification = Classifier(threshold).classify(result.vulnerabilities)

        if config.annotations:
            with log_group("Generating annotations", logger=logger):
                emit_annotations(classification, self.sink)

        unhealthy_count = len(classification.unhealthy_results)
        if classification.any_unhealthy:
            message = f"Vulnerabilities with severity {get_severity_name(threshold)} or higher found"
            logger.error(f"{message} ({format_number(unhealthy_count)} findings)")
            return RunOutcome(
                healthy=False,
                message=message,
                outputs=outputs,
                classification=classification,
            )

        message = f"Scan completed: {format_number(len(result.vulnerabilities))} vulnerabilities found"
        logger.info(message)
        return RunOutcome(
            healthy=True,
            message=message,
            outputs=outputs,
            classification=classification,
        )


def collect_outputs(result: ScanResult) -> dict[str, str]:
    """Named outputs for the JSON and SARIF reports, only when the file is non-empty."""
    outputs = {}
    for name, path in (("json", result.json_file), ("sarif", result.sarif_file)):
        if path and Path(path).is_file() and Path(path).stat().st_size > 0:
            outputs[name] = str(path)
    return outputs


def log_report_file(name: str, path: Optional[Path]) -> None:
    """Log the contents of a report file in its own group."""
    with log_group(f"Scan result ({name})", logger=logger):
        if path:
            logger.info(Path(path).read_text(encoding="utf-8").strip())


def write_outputs(outputs: dict[str, str], path: Path) -> None:
    """Append outputs as name=value lines to an outputs file."""
    with open(path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")
    logger.debug(f"Wrote {len(outputs)} outputs to {path}")


__all__ = [
    "ScanOrchestrator",
    "collect_outputs",
    "write_outputs",
]
