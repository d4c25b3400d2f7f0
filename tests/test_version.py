"""Tests for scanner version helpers."""

import pytest
from packaging.specifiers import SpecifierSet

from core.exceptions import ScanExecutionError, VersionParseError
from core.process import ProcessResult
from core.version import (
    get_version,
    is_valid_semver,
    parse_version,
    satisfies,
    semver_range_to_specifiers,
)

VERSION_OUTPUT = """Version: 0.19.2
Vulnerability DB:
  Type: Light
  Version: 1
  UpdatedAt: 2021-08-25 12:20:19.283438493 +0000 UTC
  NextUpdate: 2021-08-25 18:20:19.283437993 +0000 UTC
  DownloadedAt: 2021-08-25 15:16:11.547546 +0000 UTC
"""


class TestParseVersion:
    """Tests for version output parsing."""

    def test_first_version_line(self):
        """Test the top-level Version line is returned."""
        assert parse_version(VERSION_OUTPUT) == "0.19.2"

    def test_nested_version_ignored(self):
        """Test indented keys do not match."""
        with pytest.raises(VersionParseError):
            parse_version("Vulnerability DB:\n  Version: 1\n")

    def test_value_with_colon(self):
        """Test values containing colons are kept whole."""
        assert parse_version("Version: dev:abc1234") == "dev:abc1234"

    def test_no_version(self):
        """Test output without a Version line fails."""
        with pytest.raises(VersionParseError) as exc_info:
            parse_version("garbage")
        assert str(exc_info.value) == "Cannot parse trivy version"

    def test_empty_value_skipped(self):
        """Test a Version line without value is skipped."""
        assert parse_version("Version:\nVersion: 0.20.0") == "0.20.0"


class TestSatisfies:
    """Tests for version range checks."""

    @pytest.mark.parametrize("version,version_range,expected", [
        ("0.20.0", ">=0.19.2", True),
        ("0.19.2", ">=0.19.2", True),
        ("0.18.3", ">=0.19.2", False),
        ("0.20.0", ">=0.19.2 <0.21.0", True),
        ("0.21.0", ">=0.19.2 <0.21.0", False),
        ("v0.20.0", ">=0.19.2", True),
    ])
    def test_ranges(self, version, version_range, expected):
        """Test comparison against ranges."""
        assert satisfies(version, version_range) is expected

    @pytest.mark.parametrize("version,version_range,expected", [
        ("0.20.0", "^0.20.0", True),
        ("0.20.5", "^0.20.0", True),
        ("0.21.0", "^0.20.0", False),
        ("0.20.0", "^0.19.0", False),
        ("1.4.0", "^1.2.3", True),
        ("2.0.0", "^1.2.3", False),
        ("0.20.0", "~0.20.0", True),
        ("0.20.9", "~0.20.0", True),
        ("0.21.0", "~0.20.0", False),
        ("0.20.0", "0.20.x", True),
        ("0.20.3", "0.20.*", True),
        ("0.21.0", "0.20.x", False),
        ("0.20.0", "=0.20.0", True),
        ("0.20.0", "0.20.0", True),
        ("0.20.1", "=0.20.0", False),
        ("0.20.0", "*", True),
        ("0.20.0", ">= 0.19.2", True),
        ("0.20.0", "0.19.0 - 0.20.0", True),
        ("0.20.1", "0.19.0 - 0.20.0", False),
        ("0.20.0", ">=0.21.0 || 0.20.x", True),
        ("0.19.0", ">=0.21.0 || 0.20.x", False),
    ])
    def test_semver_range_forms(self, version, version_range, expected):
        """Test caret, tilde, x-range, exact, hyphen and alternative ranges."""
        assert satisfies(version, version_range) is expected

    def test_commit_hash_always_satisfies(self):
        """Test commit-pinned builds pass any range."""
        assert satisfies("abc1234", ">=99.0.0") is True

    def test_invalid_range(self):
        """Test an unparseable range is not satisfied."""
        assert satisfies("0.19.2", "not a range") is False

    def test_invalid_version(self):
        """Test an unparseable version is not satisfied."""
        assert satisfies("dev-build", ">=0.19.2") is False


class TestIsValidSemver:
    """Tests for semantic version validation."""

    @pytest.mark.parametrize("version", ["0.19.2", "1.0.0-rc.1", "1.0.0+build.5"])
    def test_valid(self, version):
        assert is_valid_semver(version)

    @pytest.mark.parametrize("version", ["nightly", "0.19", "01.2.3", "abc1234", ""])
    def test_invalid(self, version):
        assert not is_valid_semver(version)


class TestGetVersion:
    """Tests for querying an installed scanner."""

    def test_reads_version(self, fake_runner_factory):
        """Test the version command output is parsed."""
        runner = fake_runner_factory()
        runner.results["version"] = ProcessResult(stdout=VERSION_OUTPUT, stderr="", exit_code=0)

        assert get_version("/opt/trivy", runner) == "0.19.2"
        assert runner.calls[0]["args"] == ["--version"]
        assert runner.calls[0]["silent"] is True

    def test_failure(self, fake_runner_factory):
        """Test a failing version command raises its stderr."""
        runner = fake_runner_factory()
        runner.results["version"] = ProcessResult(stdout="", stderr="exec format error\n", exit_code=126)

        with pytest.raises(ScanExecutionError) as exc_info:
            get_version("/opt/trivy", runner)
        assert str(exc_info.value) == "exec format error"


class TestSemverRangeToSpecifiers:
    """Tests for range translation."""

    @pytest.mark.parametrize("version_range,expected", [
        ("^0.19.2", ">=0.19.2,<0.20.0"),
        ("^0.0.3", ">=0.0.3,<0.0.4"),
        ("~1.2", ">=1.2.0,<1.3.0"),
        ("1.x", ">=1.0.0,<2.0.0"),
        ("<=0.21", "<0.22.0"),
    ])
    def test_translation(self, version_range, expected):
        assert semver_range_to_specifiers(version_range) == SpecifierSet(expected)

    def test_invalid_comparator(self):
        with pytest.raises(ValueError):
            semver_range_to_specifiers("latest")
