"""Data models shared by the advisory sources, evaluator and engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .ecosystems import Ecosystem, Severity, classify
from .versions import NormalizedVersion, normalize


@dataclass(frozen=True)
class DeclaredDependency:
    """A manifest entry: package name plus its raw version specifier."""

    name: str
    version_specifier: str = ""
    declared_ecosystem: Optional[Ecosystem] = None

    def __post_init__(self) -> None:
        """Validate the dependency."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Dependency name cannot be empty")

    @property
    def ecosystem(self) -> Ecosystem:
        """Explicit ecosystem if given, otherwise classified from the name."""
        if self.declared_ecosystem is not None:
            return self.declared_ecosystem
        # cached outside the dataclass fields so eq and hash never see it
        classified = self.__dict__.get("_classified")
        if classified is None:
            classified = classify(self.name)
            object.__setattr__(self, "_classified", classified)
        return classified

    @property
    def version(self) -> NormalizedVersion:
        return normalize(self.version_specifier)


class AdvisorySourceKind(str, Enum):
    """Where an advisory finding came from."""

    OSV = "OSV"
    GITHUB_ADVISORY = "GitHub Advisory"
    KNOWN_PATTERNS = "Known Patterns"


@dataclass(frozen=True)
class ExplicitVersions:
    """Affected range given as a list of versions or range expressions."""

    entries: Tuple[str, ...]


@dataclass(frozen=True)
class RangeEvent:
    """One ``introduced``/``fixed``/``last_affected`` event of an interval."""

    kind: str
    version: str

    INTRODUCED = "introduced"
    FIXED = "fixed"
    LAST_AFFECTED = "last_affected"


@dataclass(frozen=True)
class EventRange:
    """Affected range given as ordered introduced/fixed events."""

    events: Tuple[RangeEvent, ...]


AffectedRange = Union[ExplicitVersions, EventRange]


@dataclass
class AdvisoryFinding:
    """A single advisory in the common shape every source produces."""

    id: str
    source: AdvisorySourceKind
    package_name: str
    summary: str = "Security vulnerability detected"
    severity: Severity = Severity.MEDIUM
    severity_score: Optional[float] = None
    ranges: Tuple[AffectedRange, ...] = ()
    references: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    published_at: Optional[str] = None
    modified_at: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate finding data."""
        if not self.id:
            raise ValueError("Advisory ID cannot be empty")
        if not self.summary:
            self.summary = "Security vulnerability detected"

    @property
    def has_range_data(self) -> bool:
        return any(
            (isinstance(r, ExplicitVersions) and r.entries)
            or (isinstance(r, EventRange) and r.events)
            for r in self.ranges
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "package": self.package_name,
            "summary": self.summary,
            "severity": self.severity.value,
            "severity_score": self.severity_score,
            "references": list(self.references),
            "aliases": list(self.aliases),
            "published": self.published_at,
            "modified": self.modified_at,
        }


@dataclass(frozen=True)
class VulnerabilityRecord:
    """A finding confirmed against a concrete dependency version."""

    package_name: str
    version: NormalizedVersion
    finding: AdvisoryFinding
    confirmed_affected: bool = False

    @property
    def severity(self) -> Severity:
        return self.finding.severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package_name,
            "version": str(self.version),
            "confirmed_affected": self.confirmed_affected,
            "advisory": self.finding.to_dict(),
        }


@dataclass(frozen=True)
class StalenessRecord:
    """Current vs. latest published version of a dependency."""

    package_name: str
    current_version: NormalizedVersion
    latest_version: NormalizedVersion
    is_outdated: bool = False
    is_major_bump: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package_name,
            "current": str(self.current_version),
            "latest": str(self.latest_version),
            "outdated": self.is_outdated,
            "major_update": self.is_major_bump,
        }


@dataclass
class DependencyReport:
    """Aggregated result of one analysis run."""

    total_dependencies: int
    vulnerabilities: List[VulnerabilityRecord] = field(default_factory=list)
    outdated: List[StalenessRecord] = field(default_factory=list)
    health_score: int = 100
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_dependencies": self.total_dependencies,
            "health_score": self.health_score,
            "risk_distribution": dict(self.risk_distribution),
            "vulnerabilities": [record.to_dict() for record in self.vulnerabilities],
            "outdated_packages": [record.to_dict() for record in self.outdated],
            "recommendations": list(self.recommendations),
        }
