"""Tests for ecosystem classification and severity mapping."""

import pytest

from dep_health.core.ecosystems import Ecosystem, Severity, classify


class TestClassify:
    """Test name-shape ecosystem heuristics."""

    @pytest.mark.parametrize("name, expected", [
        ("org.apache.commons:commons-lang3", Ecosystem.MAVEN),
        ("github.com/gin-gonic/gin", Ecosystem.GO),
        ("@babel/core", Ecosystem.NPM),
        ("Newtonsoft.Json", Ecosystem.NUGET),
        ("Serilog", Ecosystem.NUGET),
        ("rails", Ecosystem.RUBYGEMS),
        ("Rails", Ecosystem.NUGET),
        ("sinatra", Ecosystem.RUBYGEMS),
        ("lodash", Ecosystem.NPM),
        ("requests", Ecosystem.NPM),
    ])
    def test_name_shapes(self, name, expected):
        """Test each priority rule, including the npm default.

        A PascalCase single word matches the NuGet shape before the gem
        allowlist is consulted.
        """
        assert classify(name) is expected

    def test_maven_wins_over_go(self):
        """Test that ':' is checked before '/'."""
        assert classify("group/x:artifact") is Ecosystem.MAVEN


class TestEcosystemNames:
    """Test the per-API ecosystem spellings."""

    def test_osv_names(self):
        """Test names sent to OSV."""
        assert Ecosystem.PYPI.osv_name == "PyPI"
        assert Ecosystem.RUBYGEMS.osv_name == "RubyGems"

    def test_github_names(self):
        """Test names sent to the GitHub advisory API."""
        assert Ecosystem.PYPI.github_name == "pip"
        assert Ecosystem.NPM.github_name == "npm"
        assert Ecosystem.NUGET.github_name == "nuget"

    def test_parse_is_case_insensitive(self):
        """Test ecosystem lookup by user-provided name."""
        assert Ecosystem.parse("pypi") is Ecosystem.PYPI
        assert Ecosystem.parse(" Go ") is Ecosystem.GO
        with pytest.raises(ValueError):
            Ecosystem.parse("cargo")


class TestSeverity:
    """Test severity vocabulary mapping."""

    @pytest.mark.parametrize("text, expected", [
        ("CRITICAL", Severity.CRITICAL),
        ("High", Severity.HIGH),
        ("MODERATE", Severity.MEDIUM),
        ("medium", Severity.MEDIUM),
        ("low", Severity.LOW),
        ("minor", Severity.LOW),
        ("critical-high", Severity.CRITICAL),
        ("unknown", Severity.MEDIUM),
        ("", Severity.MEDIUM),
        (None, Severity.MEDIUM),
        (["HIGH"], Severity.MEDIUM),
    ])
    def test_from_text(self, text, expected):
        """Test priority substring mapping with the medium default."""
        assert Severity.from_text(text) is expected

    @pytest.mark.parametrize("score, expected", [
        (9.8, Severity.CRITICAL),
        (7.5, Severity.HIGH),
        (5.3, Severity.MEDIUM),
        (2.1, Severity.LOW),
        (None, Severity.MEDIUM),
    ])
    def test_from_score(self, score, expected):
        """Test CVSS v3 qualitative bands."""
        assert Severity.from_score(score) is expected

    def test_values_are_lower_case(self):
        """Test the fixed four-value output vocabulary."""
        assert [s.value for s in Severity] == ["critical", "high", "medium", "low"]
