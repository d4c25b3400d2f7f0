"""Tests for external process execution."""

import subprocess
from unittest.mock import Mock, patch

from core.process import LAUNCH_FAILURE_EXIT_CODE, ProcessResult, ProcessRunner


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestProcessRunner:
    """Tests for ProcessRunner.run."""

    @patch("core.process.subprocess.run")
    def test_captures_output(self, mock_run):
        """Test stdout, stderr and exit code are returned."""
        mock_run.return_value = completed(stdout="out\n", stderr="warn\n", returncode=1)

        result = ProcessRunner().run("/opt/trivy", ["--version"])

        assert result == ProcessResult(stdout="out\n", stderr="warn\n", exit_code=1)
        assert not result.succeeded
        assert mock_run.call_args[0][0] == ["/opt/trivy", "--version"]
        assert mock_run.call_args[1]["check"] is False
        assert mock_run.call_args[1]["capture_output"] is True

    @patch("core.process.subprocess.run")
    def test_env_added_to_inherited_environment(self, mock_run, monkeypatch):
        """Test extra variables are layered over the current environment."""
        monkeypatch.setenv("HOME_MARKER", "kept")
        mock_run.return_value = completed()

        ProcessRunner().run("trivy", [], env={"GITHUB_TOKEN": "ghp_test"})

        env = mock_run.call_args[1]["env"]
        assert env["GITHUB_TOKEN"] == "ghp_test"
        assert env["HOME_MARKER"] == "kept"

    @patch("core.process.subprocess.run")
    def test_output_decoded_leniently(self, mock_run):
        """Test undecodable scanner output is replaced instead of raising."""
        mock_run.return_value = completed(stdout="caf\ufffd\n")

        result = ProcessRunner().run("trivy", ["--version"])

        assert mock_run.call_args[1]["encoding"] == "utf-8"
        assert mock_run.call_args[1]["errors"] == "replace"
        assert result.stdout == "caf\ufffd\n"

    @patch("core.process.subprocess.run")
    def test_launch_failure(self, mock_run):
        """Test a missing executable is reported, not raised."""
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        result = ProcessRunner().run("/missing/trivy", ["--version"])

        assert result.exit_code == LAUNCH_FAILURE_EXIT_CODE
        assert "No such file or directory" in result.stderr
        assert result.stdout == ""

    @patch("core.process.subprocess.run")
    def test_silent_suppresses_stdout_logging(self, mock_run):
        """Test silent runs do not echo stdout."""
        mock_run.return_value = completed(stdout="secret report")

        with patch("core.process.logger") as mock_logger:
            ProcessRunner().run("trivy", [], silent=True)
            mock_logger.info.assert_not_called()

            ProcessRunner().run("trivy", [])
            mock_logger.info.assert_called_once_with("secret report")

    def test_result_succeeded(self):
        """Test exit code zero is success."""
        assert ProcessResult("", "", 0).succeeded
        assert not ProcessResult("", "", 2).succeeded


def test_runner_is_mockable():
    """Test a Mock with the runner spec can stand in for the real runner."""
    runner = Mock(spec=ProcessRunner)
    runner.run.return_value = ProcessResult("Version: 0.19.2", "", 0)
    assert runner.run("trivy", ["--version"]).stdout == "Version: 0.19.2"
