"""OSV.dev advisory source."""

from typing import Any, Dict, List, Optional, Tuple

from ..config import EngineConfig
from ..core.ecosystems import Ecosystem, Severity
from ..core.models import (
    AdvisoryFinding,
    AdvisorySourceKind,
    AffectedRange,
    EventRange,
    ExplicitVersions,
    RangeEvent,
)
from ..core.versions import NormalizedVersion
from ..http.client import FetchClient
from .base import AdvisorySource

_EVENT_KINDS = (RangeEvent.INTRODUCED, RangeEvent.FIXED, RangeEvent.LAST_AFFECTED)


def numeric_score(severity: Any) -> Optional[float]:
    """First numeric ``score`` in an OSV ``severity`` array, if any.

    CVSS vector strings are not numeric and are skipped.
    """
    if not isinstance(severity, list):
        return None

    for entry in severity:
        if not isinstance(entry, dict):
            continue
        try:
            return float(entry.get("score"))
        except (TypeError, ValueError):
            continue
    return None


def map_severity(vuln: Dict[str, Any]) -> Severity:
    """Pick the best available severity signal of an OSV record."""
    database_specific = vuln.get("database_specific") or {}
    text = database_specific.get("severity") if isinstance(database_specific, dict) else None
    if isinstance(text, str) and text.strip():
        return Severity.from_text(text)

    score = numeric_score(vuln.get("severity"))
    if score is not None:
        return Severity.from_score(score)

    return Severity.from_text(vuln.get("severity"))


class OSVSource(AdvisorySource):
    """Queries ``POST /v1/query`` of the OSV API for one package version."""

    name = "OSV"

    def __init__(self, client: FetchClient, config: Optional[EngineConfig] = None) -> None:
        """Initialize the OSV source.

        Args:
            client: Shared fetch client
            config: Engine configuration (endpoint URL)
        """
        super().__init__()
        self.client = client
        self.config = config or client.config

    def build_query(self, package_name: str, ecosystem: Ecosystem, version: NormalizedVersion) -> Dict[str, Any]:
        return {
            "version": str(version),
            "package": {
                "name": package_name,
                "ecosystem": ecosystem.osv_name,
            },
        }

    async def _query(
        self,
        package_name: str,
        ecosystem: Ecosystem,
        version: NormalizedVersion
    ) -> List[AdvisoryFinding]:
        response = await self.client.request(
            self.config.osv_url,
            method="POST",
            json=self.build_query(package_name, ecosystem, version),
            headers={"Content-Type": "application/json"},
        )

        if not response.ok:
            self.logger.warning(f"OSV API error for {package_name}: {response.status}")
            return []

        data = response.json() or {}
        return self.parse_vulnerabilities(data.get("vulns") or [], package_name)

    def parse_vulnerabilities(self, vulns: List[Dict[str, Any]], package_name: str) -> List[AdvisoryFinding]:
        """Translate OSV vulnerability records into findings.

        Args:
            vulns: ``vulns`` array of an OSV query response
            package_name: Package the query was made for

        Returns:
            Parsed findings; records without an id are skipped
        """
        findings = []

        for vuln in vulns:
            if not isinstance(vuln, dict):
                continue
            try:
                findings.append(AdvisoryFinding(
                    id=vuln.get("id", ""),
                    source=AdvisorySourceKind.OSV,
                    package_name=package_name,
                    summary=vuln.get("summary") or (vuln.get("details") or "")[:200],
                    severity=map_severity(vuln),
                    severity_score=numeric_score(vuln.get("severity")),
                    ranges=self._parse_ranges(vuln.get("affected") or [], package_name),
                    references=[
                        ref["url"] for ref in vuln.get("references") or []
                        if isinstance(ref, dict) and ref.get("url")
                    ],
                    aliases=list(vuln.get("aliases") or []),
                    published_at=vuln.get("published"),
                    modified_at=vuln.get("modified"),
                ))
            except ValueError as e:
                self.logger.debug(f"Skipping OSV record {vuln.get('id', 'unknown')}: {e}")

        return findings

    def _parse_ranges(self, affected_entries: List[Any], package_name: str) -> Tuple[AffectedRange, ...]:
        ranges: List[AffectedRange] = []

        for affected in affected_entries:
            if not isinstance(affected, dict):
                continue

            affected_name = (affected.get("package") or {}).get("name", "")
            if affected_name and affected_name.lower() != package_name.lower():
                continue

            versions = [v for v in affected.get("versions") or [] if isinstance(v, str)]
            if versions:
                ranges.append(ExplicitVersions(tuple(versions)))

            for version_range in affected.get("ranges") or []:
                if not isinstance(version_range, dict):
                    continue
                # GIT ranges are expressed in commit hashes
                if str(version_range.get("type", "")).upper() == "GIT":
                    continue

                events = []
                for event in version_range.get("events") or []:
                    if not isinstance(event, dict):
                        continue
                    for kind in _EVENT_KINDS:
                        if kind in event:
                            events.append(RangeEvent(kind, str(event[kind])))
                            break
                if events:
                    ranges.append(EventRange(tuple(events)))

        return tuple(ranges)
