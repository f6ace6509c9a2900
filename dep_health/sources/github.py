"""GitHub global security advisory source."""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from ..config import EngineConfig
from ..core.ecosystems import Ecosystem, Severity
from ..core.models import AdvisoryFinding, AdvisorySourceKind, ExplicitVersions
from ..core.versions import NormalizedVersion
from ..http.client import FetchClient
from .base import AdvisorySource

ACCEPT_HEADER = "application/vnd.github+json"


def advisory_score(advisory: Dict[str, Any]) -> Optional[float]:
    """CVSS base score of an advisory, from ``cvss`` or ``cvss_severities``."""
    candidates = [advisory.get("cvss")]
    severities = advisory.get("cvss_severities")
    if isinstance(severities, dict):
        candidates.extend([severities.get("cvss_v4"), severities.get("cvss_v3")])

    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        score = candidate.get("score")
        if isinstance(score, (int, float)) and score > 0:
            return float(score)
    return None


class GitHubAdvisorySource(AdvisorySource):
    """Queries ``GET /advisories?package=...&ecosystem=...``."""

    name = "GitHub Advisory"

    def __init__(self, client: FetchClient, config: Optional[EngineConfig] = None) -> None:
        super().__init__()
        self.client = client
        self.config = config or client.config

    def build_url(self, package_name: str, ecosystem: Ecosystem) -> str:
        query = urlencode({"package": package_name, "ecosystem": ecosystem.github_name})
        return f"{self.config.github_api_url.rstrip('/')}/advisories?{query}"

    async def _query(
        self,
        package_name: str,
        ecosystem: Ecosystem,
        version: NormalizedVersion
    ) -> List[AdvisoryFinding]:
        response = await self.client.request(
            self.build_url(package_name, ecosystem),
            headers={"Accept": ACCEPT_HEADER},
        )

        if not response.ok:
            self.logger.warning(f"GitHub advisory API error for {package_name}: {response.status}")
            return []

        advisories = response.json()
        if not isinstance(advisories, list):
            raise TypeError(f"expected a JSON array, got {type(advisories).__name__}")
        return self.parse_advisories(advisories, package_name)

    def parse_advisories(self, advisories: List[Dict[str, Any]], package_name: str) -> List[AdvisoryFinding]:
        """Translate GitHub advisories into findings.

        Only the ``vulnerabilities`` entries naming this package contribute
        their ``vulnerable_version_range``.

        Args:
            advisories: JSON array returned by the API
            package_name: Package the query was made for

        Returns:
            Parsed findings
        """
        findings = []

        for advisory in advisories:
            if not isinstance(advisory, dict):
                continue

            ranges = []
            for vulnerability in advisory.get("vulnerabilities") or []:
                if not isinstance(vulnerability, dict):
                    continue
                affected_name = (vulnerability.get("package") or {}).get("name", "")
                if affected_name and affected_name.lower() != package_name.lower():
                    continue
                version_range = vulnerability.get("vulnerable_version_range")
                if isinstance(version_range, str) and version_range.strip():
                    ranges.append(version_range.strip())

            try:
                findings.append(AdvisoryFinding(
                    id=advisory.get("ghsa_id", ""),
                    source=AdvisorySourceKind.GITHUB_ADVISORY,
                    package_name=package_name,
                    summary=advisory.get("summary") or "",
                    severity=Severity.from_text(advisory.get("severity")),
                    severity_score=advisory_score(advisory),
                    ranges=(ExplicitVersions(tuple(ranges)),) if ranges else (),
                    references=[advisory["html_url"]] if advisory.get("html_url") else [],
                    aliases=[advisory["cve_id"]] if advisory.get("cve_id") else [],
                    published_at=advisory.get("published_at"),
                    modified_at=advisory.get("updated_at"),
                ))
            except ValueError as e:
                self.logger.debug(f"Skipping GitHub advisory: {e}")

        return findings
