"""
Command-line interface for container-scan.

Installs Trivy, scans a container image or image archive, and exits non-zero
when findings reach the configured severity threshold.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from constants import DEFAULT_TOOL_VERSION, OUTPUTS_FILE_ENV_VAR
from core.config import build_config
from core.exceptions import ContainerScanError
from core.orchestrator import ScanOrchestrator, write_outputs
from utils.logging_helpers import log_error_section

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(args: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the scan command."""
    parser = argparse.ArgumentParser(
        prog="container-scan",
        description="Scan a container image for vulnerabilities with Trivy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Unset options fall back to INPUT_<OPTION> environment variables, then --config.",
    )

    target_group = parser.add_argument_group("scan target")
    scanner_group = parser.add_argument_group("scanner options")
    result_group = parser.add_argument_group("result options")
    install_group = parser.add_argument_group("install options")

    # Scan target
    target_group.add_argument("--image", default=None, help="Image reference to scan.")
    target_group.add_argument("--tarball", default=None, help="Image archive to scan.")

    # Scanner options
    scanner_group.add_argument("--severity", default=None, help="Severities to report (e.g. HIGH,CRITICAL).")
    scanner_group.add_argument("--ignore-unfixed", action="store_const", const=True, default=None, help="Ignore unfixed vulnerabilities.")
    scanner_group.add_argument("--github-token", default=None, help="Token exported to the scanner as GITHUB_TOKEN.")
    scanner_group.add_argument("--sarif-template", type=Path, default=None, help="SARIF template file.")

    # Result options
    result_group.add_argument("--severity-threshold", default=None, help="Fail when a finding has this severity or higher.")
    result_group.add_argument("--annotations", action="store_const", const=True, default=None, help="Annotate each finding.")
    result_group.add_argument("--outputs-file", type=Path, default=None, help=f"File receiving outputs (default: ${OUTPUTS_FILE_ENV_VAR}).")

    # Install options
    install_group.add_argument("--trivy-version", default=None, help=f"Trivy version (default: {DEFAULT_TOOL_VERSION}).")
    install_group.add_argument("--release-index-url", default=None, help="Mirrored release index URL.")
    install_group.add_argument("--cache-dir", type=Path, default=None, help="Tool cache directory.")

    # Other options
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")

    return parser.parse_args(args)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the scan command."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    cli_settings = {
        key: value
        for key, value in vars(args).items()
        if key not in ("config", "verbose", "outputs_file")
    }

    try:
        config = build_config(cli_settings, config_file=args.config)
        outcome = ScanOrchestrator(config).run()
    except ContainerScanError as e:
        log_error_section("Scan failed", e, logger=logger)
        return 1

    outputs_file = args.outputs_file or os.environ.get(OUTPUTS_FILE_ENV_VAR)
    if outputs_file and outcome.outputs:
        write_outputs(outcome.outputs, Path(outputs_file))
    for name, value in outcome.outputs.items():
        logger.info(f"Output {name}: {value}")

    if not outcome.healthy:
        log_error_section("Scan failed", outcome.message, logger=logger)
        return 1
    return 0


def main_dispatch():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_dispatch()
