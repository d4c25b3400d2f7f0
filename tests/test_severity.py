"""Tests for the severity model and threshold rule."""

import pytest

from core.exceptions import ConfigurationError
from core.models import SeverityLevel
from core.severity import (
    get_severity_name,
    meets_threshold,
    parse_severity,
    parse_threshold,
)


class TestParseSeverity:
    """Tests for reported severity tokens."""

    @pytest.mark.parametrize("token,expected", [
        ("UNKNOWN", SeverityLevel.UNKNOWN),
        ("LOW", SeverityLevel.LOW),
        ("MEDIUM", SeverityLevel.MEDIUM),
        ("HIGH", SeverityLevel.HIGH),
        ("CRITICAL", SeverityLevel.CRITICAL),
    ])
    def test_canonical_tokens(self, token, expected):
        """Test canonical tokens map to their level."""
        assert parse_severity(token) == expected

    @pytest.mark.parametrize("token", ["NEGLIGIBLE", "SEVERE", "high", "", None])
    def test_unrecognized_tokens_are_absent(self, token):
        """Test unrecognized tokens are not coerced to Unknown."""
        assert parse_severity(token) is None


class TestParseThreshold:
    """Tests for the configured threshold."""

    def test_unset(self):
        """Test empty values mean no threshold."""
        assert parse_threshold(None) is None
        assert parse_threshold("") is None
        assert parse_threshold("  ") is None

    @pytest.mark.parametrize("name", ["HIGH", "high", " High "])
    def test_case_insensitive(self, name):
        """Test threshold names are matched regardless of case."""
        assert parse_threshold(name) == SeverityLevel.HIGH

    def test_unknown_name_raises(self):
        """Test an unrecognized threshold is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_threshold("SEVERE")
        assert exc_info.value.field == "severity_threshold"
        assert "SEVERE" in str(exc_info.value)


class TestMeetsThreshold:
    """Tests for the inclusive threshold comparison."""

    def test_boundary_is_inclusive(self):
        """Test a finding at exactly the threshold fails."""
        assert meets_threshold(SeverityLevel.HIGH, SeverityLevel.HIGH) is True

    def test_above_threshold(self):
        """Test a finding above the threshold fails."""
        assert meets_threshold(SeverityLevel.CRITICAL, SeverityLevel.HIGH) is True

    def test_below_threshold(self):
        """Test a finding below the threshold passes."""
        assert meets_threshold(SeverityLevel.MEDIUM, SeverityLevel.HIGH) is False

    @pytest.mark.parametrize("level", list(SeverityLevel))
    def test_no_threshold_never_fails(self, level):
        """Test nothing fails without a threshold."""
        assert meets_threshold(level, None) is False

    @pytest.mark.parametrize("threshold", list(SeverityLevel))
    def test_agrees_with_order(self, threshold):
        """Test the rule matches the integer order for every pair."""
        for level in SeverityLevel:
            assert meets_threshold(level, threshold) == (level.value >= threshold.value)


def test_get_severity_name():
    """Test levels map back to their canonical token."""
    assert get_severity_name(SeverityLevel.CRITICAL) == "CRITICAL"
    assert get_severity_name(SeverityLevel.UNKNOWN) == "UNKNOWN"
