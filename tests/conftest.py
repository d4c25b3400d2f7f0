"""
Pytest fixtures and configuration for container-scan tests.

Provides shared fixtures and test utilities across the test suite.
"""

import io
import json
import tarfile
from pathlib import Path

import pytest

from core.models import PlatformInfo, Vulnerability
from core.process import ProcessResult


SAMPLE_REPORT = {
    "SchemaVersion": 2,
    "ArtifactName": "alpine:3.9",
    "ArtifactType": "container_image",
    "Results": [
        {
            "Target": "alpine:3.9 (alpine 3.9.6)",
            "Class": "os-pkgs",
            "Type": "alpine",
            "Vulnerabilities": [
                {
                    "VulnerabilityID": "CVE-2021-36159",
                    "PkgName": "apk-tools",
                    "InstalledVersion": "2.10.6-r0",
                    "FixedVersion": "2.10.7-r0",
                    "Severity": "CRITICAL",
                    "Title": "libfetch: out-of-bounds read",
                    "Description": "libfetch before 2021-07-26 mishandles numeric strings.",
                    "PrimaryURL": "https://avd.aquasec.com/nvd/cve-2021-36159",
                },
                {
                    "VulnerabilityID": "CVE-2021-3711",
                    "PkgName": "libssl1.1",
                    "InstalledVersion": "1.1.1k-r0",
                    "FixedVersion": "1.1.1l-r0",
                    "Severity": "HIGH",
                    "Description": "In order to decrypt SM2 encrypted data an application is expected to call the API function EVP_PKEY_decrypt().",
                },
            ],
        },
        {
            "Target": "usr/lib/node_modules/app/package-lock.json",
            "Class": "lang-pkgs",
            "Type": "npm",
            "Vulnerabilities": [
                {
                    "VulnerabilityID": "GHSA-xxxx-yyyy-zzzz",
                    "PkgName": "minimist",
                    "InstalledVersion": "1.2.0",
                    "Severity": "LOW",
                    "Title": "Prototype pollution",
                },
            ],
        },
    ],
}


@pytest.fixture
def sample_report():
    """Sample JSON report with three findings in two results."""
    return json.loads(json.dumps(SAMPLE_REPORT))


@pytest.fixture
def write_report(tmp_path):
    """Write a report dict to a JSON file and return its path."""
    def _write(report, name="result.json"):
        path = tmp_path / name
        path.write_text(json.dumps(report))
        return path
    return _write


@pytest.fixture
def critical_vuln():
    """A single critical finding."""
    return Vulnerability(
        id="CVE-2021-36159",
        package_name="apk-tools",
        installed_version="2.10.6-r0",
        fixed_version="2.10.7-r0",
        severity="CRITICAL",
        title="libfetch: out-of-bounds read",
    )


@pytest.fixture
def linux_platform():
    """Linux x64 host."""
    return PlatformInfo(os_family="linux", arch="x64")


@pytest.fixture
def release_archive_bytes():
    """Gzipped tarball shaped like a scanner release."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, content in (
            ("trivy", b"#!/bin/sh\necho trivy\n"),
            ("contrib/sarif.tpl", b"{{ sarif }}"),
        ):
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


class FakeRunner:
    """
    Process runner that records calls and writes the requested output file.

    Args:
        outputs: Content written per --format value ("table", "json", "template")
        results: ProcessResult returned per --format value or "version" (default: success)
        skip_files: Formats for which no output file is written
        version_output: Stdout of the --version query
    """

    def __init__(self, outputs=None, results=None, skip_files=(), version_output="Version: 0.19.2\n"):
        self.version_output = version_output
        self.outputs = outputs or {}
        self.results = results or {}
        self.skip_files = set(skip_files)
        self.calls = []

    def run(self, binary, args, env=None, silent=False):
        self.calls.append({"binary": binary, "args": list(args), "env": env, "silent": silent})
        if "--version" in args:
            return self.results.get("version", ProcessResult(stdout=self.version_output, stderr="", exit_code=0))
        scan_format = args[args.index("--format") + 1] if "--format" in args else None
        if "--output" in args and scan_format not in self.skip_files:
            output = Path(args[args.index("--output") + 1])
            output.write_text(self.outputs.get(scan_format, ""))
        return self.results.get(scan_format, ProcessResult(stdout="", stderr="", exit_code=0))


@pytest.fixture
def fake_runner_factory():
    """Factory for FakeRunner instances."""
    return FakeRunner
