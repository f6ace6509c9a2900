"""Tests for the advisory source adapters."""

import asyncio
from urllib.parse import parse_qs, urlparse

import pytest

from dep_health.core.ecosystems import Ecosystem, Severity
from dep_health.core.evaluator import is_affected
from dep_health.core.models import AdvisorySourceKind, EventRange, ExplicitVersions, RangeEvent
from dep_health.core.versions import normalize
from dep_health.errors import NetworkError
from dep_health.http.client import FetchResponse
from dep_health.sources import GitHubAdvisorySource, KnownPatternsSource, OSVSource
from dep_health.sources.github import advisory_score
from dep_health.sources.osv import map_severity, numeric_score


def _query(source, name="lodash", ecosystem=Ecosystem.NPM, version="4.17.0"):
    return asyncio.run(source.query(name, ecosystem, normalize(version)))


@pytest.fixture
def github_advisory():
    """GitHub advisory payload for lodash."""
    return {
        "ghsa_id": "GHSA-p6mc-m468-83gw",
        "cve_id": "CVE-2020-8203",
        "html_url": "https://github.com/advisories/GHSA-p6mc-m468-83gw",
        "summary": "Prototype Pollution in lodash",
        "severity": "high",
        "cvss": {"score": 7.4, "vector_string": "CVSS:3.1/AV:N/AC:H/PR:N/UI:N/S:U/C:N/I:H/A:H"},
        "published_at": "2020-07-15T19:15:48Z",
        "updated_at": "2023-11-01T00:00:00Z",
        "vulnerabilities": [
            {"package": {"ecosystem": "npm", "name": "lodash"},
             "vulnerable_version_range": ">= 3.7.0, < 4.17.19"},
            {"package": {"ecosystem": "npm", "name": "lodash-es"},
             "vulnerable_version_range": "< 4.17.15"},
        ],
    }


class TestOSVSeverity:
    """Test OSV severity extraction."""

    def test_database_specific_text_wins(self, lodash_osv_vuln):
        """Test that the textual database severity is preferred."""
        assert map_severity(lodash_osv_vuln) is Severity.HIGH

    def test_vector_string_is_not_a_score(self, lodash_osv_vuln):
        """Test that CVSS vectors are not mistaken for numbers."""
        assert numeric_score(lodash_osv_vuln["severity"]) is None

    def test_numeric_score_fallback(self):
        """Test mapping by numeric score when no text is present."""
        vuln = {"severity": [{"type": "CVSS_V3", "score": "9.1"}]}
        assert map_severity(vuln) is Severity.CRITICAL

    def test_unknown_is_medium(self):
        """Test the medium default."""
        assert map_severity({}) is Severity.MEDIUM


class TestOSVSource:
    """Test the OSV adapter."""

    def test_query_body(self, make_client):
        """Test the POST body sent to OSV."""
        client = make_client(lambda method, url, body: {"vulns": []})
        source = OSVSource(client)

        assert _query(source, "requests", Ecosystem.PYPI, "^2.25") == []

        method, url, body, headers = client.calls[0]
        assert method == "POST"
        assert url == "https://api.osv.dev/v1/query"
        assert body == {"version": "2.25.0", "package": {"name": "requests", "ecosystem": "PyPI"}}
        assert headers["Content-Type"] == "application/json"

    def test_parses_findings(self, make_client, lodash_osv_vuln):
        """Test translation of an OSV record."""
        source = OSVSource(make_client(lambda *args: {"vulns": [lodash_osv_vuln]}))

        [finding] = _query(source)

        assert finding.id == "GHSA-35jh-r3h4-6jhm"
        assert finding.source is AdvisorySourceKind.OSV
        assert finding.severity is Severity.HIGH
        assert finding.aliases == ["CVE-2021-23337"]
        assert finding.references == ["https://nvd.nist.gov/vuln/detail/CVE-2021-23337"]
        assert finding.published_at == "2021-05-06T16:05:51Z"
        assert finding.ranges == (EventRange((
            RangeEvent("introduced", "0"),
            RangeEvent("fixed", "4.17.21"),
        )),)
        assert is_affected(finding, "4.17.0")
        assert not is_affected(finding, "4.17.21")

    def test_summary_falls_back_to_details(self, make_client):
        """Test that a missing summary uses the first 200 characters of details."""
        vuln = {"id": "OSV-1", "details": "x" * 500}
        source = OSVSource(make_client(lambda *args: {"vulns": [vuln]}))
        [finding] = _query(source)
        assert finding.summary == "x" * 200

    def test_explicit_versions_and_git_ranges(self, make_client):
        """Test explicit lists, skipped GIT ranges and other packages' entries."""
        vuln = {
            "id": "OSV-2",
            "affected": [
                {"package": {"name": "lodash"}, "versions": ["4.17.0", "4.17.1"],
                 "ranges": [{"type": "GIT", "events": [{"introduced": "abc123"}]}]},
                {"package": {"name": "underscore"}, "versions": ["1.0.0"]},
            ],
        }
        source = OSVSource(make_client(lambda *args: {"vulns": [vuln]}))
        [finding] = _query(source)
        assert finding.ranges == (ExplicitVersions(("4.17.0", "4.17.1")),)

    def test_record_without_id_is_skipped(self, make_client, lodash_osv_vuln):
        """Test that a record missing its id does not poison the batch."""
        source = OSVSource(make_client(lambda *args: {"vulns": [{"summary": "no id"}, lodash_osv_vuln]}))
        assert [f.id for f in _query(source)] == ["GHSA-35jh-r3h4-6jhm"]

    @pytest.mark.parametrize("outcome", [
        NetworkError("https://api.osv.dev/v1/query", 3, ConnectionError("down")),
        FetchResponse("https://api.osv.dev/v1/query", 503, "unavailable"),
        FetchResponse("https://api.osv.dev/v1/query", 200, "<html>not json</html>"),
        FetchResponse("https://api.osv.dev/v1/query", 200, '{"vulns": "nope"}'),
        RuntimeError("unexpected"),
    ])
    def test_failures_degrade_to_empty(self, make_client, outcome):
        """Test that no failure escapes the adapter."""
        source = OSVSource(make_client(lambda *args: outcome))
        assert _query(source) == []


class TestGitHubAdvisorySource:
    """Test the GitHub advisory adapter."""

    def test_request_shape(self, make_client):
        """Test the URL and Accept header."""
        client = make_client(lambda *args: [])
        source = GitHubAdvisorySource(client)

        _query(source, "requests", Ecosystem.PYPI, "2.25.0")

        method, url, body, headers = client.calls[0]
        parsed = urlparse(url)
        assert method == "GET"
        assert parsed.netloc == "api.github.com"
        assert parsed.path == "/advisories"
        assert parse_qs(parsed.query) == {"package": ["requests"], "ecosystem": ["pip"]}
        assert headers == {"Accept": "application/vnd.github+json"}

    def test_parses_advisories(self, make_client, github_advisory):
        """Test translation and package-scoped ranges."""
        source = GitHubAdvisorySource(make_client(lambda *args: [github_advisory]))

        [finding] = _query(source)

        assert finding.id == "GHSA-p6mc-m468-83gw"
        assert finding.source is AdvisorySourceKind.GITHUB_ADVISORY
        assert finding.severity is Severity.HIGH
        assert finding.severity_score == 7.4
        assert finding.aliases == ["CVE-2020-8203"]
        assert finding.references == ["https://github.com/advisories/GHSA-p6mc-m468-83gw"]
        assert finding.ranges == (ExplicitVersions((">= 3.7.0, < 4.17.19",)),)
        assert is_affected(finding, "4.17.0")
        assert not is_affected(finding, "3.6.0")
        assert not is_affected(finding, "4.17.19")

    def test_moderate_maps_to_medium(self, make_client, github_advisory):
        """Test GitHub's "moderate" wording."""
        github_advisory["severity"] = "moderate"
        source = GitHubAdvisorySource(make_client(lambda *args: [github_advisory]))
        assert _query(source)[0].severity is Severity.MEDIUM

    def test_cvss_severities_score(self):
        """Test the newer cvss_severities layout."""
        advisory = {"cvss_severities": {"cvss_v3": {"score": 8.1}, "cvss_v4": {"score": 0}}}
        assert advisory_score(advisory) == 8.1
        assert advisory_score({}) is None

    @pytest.mark.parametrize("outcome", [
        NetworkError("https://api.github.com/advisories", 3, ConnectionError("down")),
        FetchResponse("https://api.github.com/advisories", 403, '{"message": "rate limited"}'),
        {"message": "not an array"},
    ])
    def test_failures_degrade_to_empty(self, make_client, outcome):
        """Test that errors and unexpected payloads yield no findings."""
        source = GitHubAdvisorySource(make_client(lambda *args: outcome))
        assert _query(source) == []


class TestKnownPatternsSource:
    """Test the offline known-pattern table."""

    def test_matches_package_and_ecosystem(self):
        """Test that a table entry is served for the matching package."""
        [finding] = _query(KnownPatternsSource(), "lodash", Ecosystem.NPM, "4.17.0")

        assert finding.id == "INTERNAL-LODASH-PROTOTYPE-POLLUTION"
        assert finding.source is AdvisorySourceKind.KNOWN_PATTERNS
        assert finding.severity is Severity.HIGH
        assert is_affected(finding, "4.17.11")
        assert not is_affected(finding, "4.17.12")

    def test_other_ecosystem_ignored(self):
        """Test that a same-named package in another ecosystem is not matched."""
        assert _query(KnownPatternsSource(), "lodash", Ecosystem.PYPI) == []

    def test_unknown_package(self):
        """Test a package missing from the table."""
        assert _query(KnownPatternsSource(), "left-pad") == []
