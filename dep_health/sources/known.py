"""Offline table of well-known vulnerable package versions.

Used as a fallback when the online sources report nothing for a package,
e.g. because both are unreachable.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..core.ecosystems import Ecosystem, Severity
from ..core.models import AdvisoryFinding, AdvisorySourceKind, ExplicitVersions
from ..core.versions import NormalizedVersion
from .base import AdvisorySource


@dataclass(frozen=True)
class KnownPattern:
    id: str
    package: str
    versions: Tuple[str, ...]
    severity: Severity
    summary: str
    references: Tuple[str, ...] = ()
    ecosystem: Ecosystem = Ecosystem.NPM


KNOWN_PATTERNS: Tuple[KnownPattern, ...] = (
    KnownPattern(
        id="LODASH-PROTOTYPE-POLLUTION",
        package="lodash",
        versions=("<4.17.12",),
        severity=Severity.HIGH,
        summary="Prototype pollution vulnerability in lodash",
        references=("https://github.com/advisories/GHSA-jf85-cpcp-j695",),
    ),
    KnownPattern(
        id="JQUERY-XSS",
        package="jquery",
        versions=("<3.5.0",),
        severity=Severity.MEDIUM,
        summary="Cross-site scripting vulnerability in jQuery",
        references=("https://github.com/advisories/GHSA-gxr4-xjj5-5px2",),
    ),
    KnownPattern(
        id="EXPRESS-DOS",
        package="express",
        versions=("<4.17.1",),
        severity=Severity.MEDIUM,
        summary="Denial of service vulnerability in Express",
        references=("https://github.com/advisories/GHSA-rv95-896h-c2vc",),
    ),
    KnownPattern(
        id="MOMENT-REDOS",
        package="moment",
        versions=("<2.29.2",),
        severity=Severity.HIGH,
        summary="Regular expression denial of service in moment",
        references=("https://github.com/advisories/GHSA-8hfj-j24r-96c4",),
    ),
    KnownPattern(
        id="AXIOS-SSRF",
        package="axios",
        versions=("<0.21.1",),
        severity=Severity.MEDIUM,
        summary="Server-side request forgery in axios",
        references=("https://github.com/advisories/GHSA-cph5-m8f7-6c5x",),
    ),
)


class KnownPatternsSource(AdvisorySource):
    """Serves findings from a fixed in-process table; never touches the network."""

    name = "Known Patterns"

    def __init__(self, patterns: Optional[Sequence[KnownPattern]] = None) -> None:
        super().__init__()
        self.patterns = tuple(patterns) if patterns is not None else KNOWN_PATTERNS

    async def _query(
        self,
        package_name: str,
        ecosystem: Ecosystem,
        version: NormalizedVersion
    ) -> List[AdvisoryFinding]:
        return [
            AdvisoryFinding(
                id=f"INTERNAL-{pattern.id}",
                source=AdvisorySourceKind.KNOWN_PATTERNS,
                package_name=package_name,
                summary=pattern.summary,
                severity=pattern.severity,
                ranges=(ExplicitVersions(pattern.versions),),
                references=list(pattern.references),
            )
            for pattern in self.patterns
            if pattern.package == package_name.lower() and pattern.ecosystem == ecosystem
        ]
