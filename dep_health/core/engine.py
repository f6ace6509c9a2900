"""Dependency vulnerability and staleness analysis."""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from ..config import EngineConfig
from ..http.client import FetchClient
from ..registries.latest import LatestVersionResolver, assess_staleness
from ..sources import AdvisorySource, GitHubAdvisorySource, KnownPatternsSource, OSVSource
from ..utils.logging import get_logger
from ..utils.performance import PerformanceMonitor, benchmark
from .cache import FalsePositiveMemo, ResultCache
from .ecosystems import Ecosystem, Severity
from .evaluator import is_affected
from .filters import FalsePositiveFilter, deduplicate
from .models import (
    AdvisoryFinding,
    DeclaredDependency,
    DependencyReport,
    StalenessRecord,
    VulnerabilityRecord,
)

LARGE_PROJECT_THRESHOLD = 50
VULNERABILITY_PENALTY = 5
OUTDATED_PENALTY = 2
LARGE_PROJECT_PENALTY = 10


@dataclass
class DependencyAnalysis:
    """Outcome for a single dependency."""

    dependency: DeclaredDependency
    vulnerabilities: List[VulnerabilityRecord] = field(default_factory=list)
    staleness: Optional[StalenessRecord] = None


def calculate_health_score(
    vulnerabilities: Sequence[VulnerabilityRecord],
    outdated: Sequence[StalenessRecord],
    total_dependencies: int
) -> int:
    """Score dependency health in [0, 100]; 100 means nothing was flagged."""
    penalty = (
        len(vulnerabilities) * VULNERABILITY_PENALTY
        + len(outdated) * OUTDATED_PENALTY
        + (LARGE_PROJECT_PENALTY if total_dependencies > LARGE_PROJECT_THRESHOLD else 0)
    )
    return max(0, 100 - penalty)


def risk_distribution(vulnerabilities: Sequence[VulnerabilityRecord]) -> Dict[str, int]:
    distribution = {severity.value: 0 for severity in Severity}
    for record in vulnerabilities:
        distribution[record.severity.value] += 1
    return distribution


def build_recommendations(
    vulnerabilities: Sequence[VulnerabilityRecord],
    outdated: Sequence[StalenessRecord]
) -> List[str]:
    recommendations = []

    critical = {r.package_name for r in vulnerabilities if r.severity == Severity.CRITICAL}
    if critical:
        recommendations.append(
            f"Update {len(critical)} dependencies with critical vulnerabilities immediately"
        )

    major_updates = [r for r in outdated if r.is_major_bump]
    if major_updates:
        recommendations.append(
            f"Review {len(major_updates)} dependencies with major version updates"
        )

    return recommendations


class DependencyHealthEngine:
    """Finds vulnerable and outdated dependencies.

    Each dependency is analyzed as an independent task: its advisory sources
    are queried concurrently, raw findings are confirmed against the declared
    version, cleaned of false positives and deduplicated, then cached per
    (package, version). The latest published version is looked up alongside.
    """

    def __init__(
        self,
        sources: Sequence[AdvisorySource],
        resolver: LatestVersionResolver,
        fallback_sources: Sequence[AdvisorySource] = (),
        config: Optional[EngineConfig] = None,
        cache: Optional[ResultCache] = None,
        memo: Optional[FalsePositiveMemo] = None,
        enable_performance_monitoring: bool = True
    ) -> None:
        """Initialize the engine.

        Args:
            sources: Advisory sources queried for every dependency
            resolver: Latest-version resolver
            fallback_sources: Sources consulted only when ``sources`` find nothing
            config: Engine configuration
            cache: Result cache shared across runs
            memo: False-positive memo shared across runs
            enable_performance_monitoring: Record timings of each run
        """
        self.config = config or EngineConfig()
        self.sources = list(sources)
        self.fallback_sources = list(fallback_sources)
        self.resolver = resolver
        self.cache = cache if cache is not None else ResultCache(self.config.cache_max_entries, self.config.cache_ttl_seconds)
        self.memo = memo if memo is not None else FalsePositiveMemo(self.config.memo_max_entries, self.config.cache_ttl_seconds)
        self.filter = FalsePositiveFilter(self.memo)
        self.logger = get_logger("Engine")
        self.performance_monitor = PerformanceMonitor() if enable_performance_monitoring else None

    @classmethod
    def create(cls, client: FetchClient, config: Optional[EngineConfig] = None) -> "DependencyHealthEngine":
        """Wire the engine to the default OSV, GitHub and registry endpoints.

        Args:
            client: Shared FetchClient
            config: Engine configuration, defaults to the client's

        Returns:
            A ready-to-use engine
        """
        config = config or client.config
        return cls(
            sources=[OSVSource(client, config), GitHubAdvisorySource(client, config)],
            resolver=LatestVersionResolver(client, config),
            fallback_sources=[KnownPatternsSource()] if config.use_known_patterns else [],
            config=config,
        )

    @benchmark
    async def analyze(
        self,
        dependencies: Mapping[str, str],
        ecosystem: Optional[Ecosystem] = None
    ) -> DependencyReport:
        """Analyze a manifest's dependencies.

        Args:
            dependencies: Ordered mapping of package name to version specifier
            ecosystem: Registry for every dependency; classified per name if omitted

        Returns:
            Report whose lists follow the input order
        """
        declared = self._declare(dependencies, ecosystem)

        if self.performance_monitor is None:
            analyses = await self._analyze_all(declared)
        else:
            with self.performance_monitor.measure("analyze"):
                analyses = await self._analyze_all(declared)

        vulnerabilities = [record for a in analyses for record in a.vulnerabilities]
        outdated = [a.staleness for a in analyses if a.staleness and a.staleness.is_outdated]

        return DependencyReport(
            total_dependencies=len(declared),
            vulnerabilities=vulnerabilities,
            outdated=outdated,
            health_score=calculate_health_score(vulnerabilities, outdated, len(declared)),
            risk_distribution=risk_distribution(vulnerabilities),
            recommendations=build_recommendations(vulnerabilities, outdated),
        )

    def _declare(
        self,
        dependencies: Mapping[str, str],
        ecosystem: Optional[Ecosystem]
    ) -> List[DeclaredDependency]:
        declared = []
        for name, version in dependencies.items():
            try:
                declared.append(DeclaredDependency(name, version or "", ecosystem))
            except ValueError as e:
                self.logger.warning(f"Skipping invalid dependency {name!r}: {e}")
        return declared

    async def _analyze_all(self, declared: List[DeclaredDependency]) -> List[DependencyAnalysis]:
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def analyze_with_semaphore(dependency: DeclaredDependency) -> DependencyAnalysis:
            async with semaphore:
                return await self.analyze_dependency(dependency)

        results = await asyncio.gather(
            *(analyze_with_semaphore(dependency) for dependency in declared),
            return_exceptions=True
        )

        analyses = []
        for dependency, result in zip(declared, results):
            if isinstance(result, BaseException):
                self.logger.error(f"Failed to analyze dependency {dependency.name}: {result!r}")
                analyses.append(DependencyAnalysis(dependency))
            else:
                analyses.append(result)
        return analyses

    async def analyze_dependency(self, dependency: DeclaredDependency) -> DependencyAnalysis:
        """Check one dependency for vulnerabilities and staleness concurrently."""
        vulnerabilities, latest = await asyncio.gather(
            self.check_vulnerabilities(dependency),
            self.resolver.resolve(dependency.name, dependency.ecosystem),
            return_exceptions=True
        )

        if isinstance(vulnerabilities, BaseException):
            self.logger.error(f"Vulnerability check failed for {dependency.name}: {vulnerabilities!r}")
            vulnerabilities = []
        if isinstance(latest, BaseException):
            self.logger.error(f"Latest version lookup failed for {dependency.name}: {latest!r}")
            latest = None

        staleness = None
        if latest is not None:
            staleness = assess_staleness(dependency.name, dependency.version_specifier, latest)

        return DependencyAnalysis(dependency, vulnerabilities, staleness)

    async def check_vulnerabilities(self, dependency: DeclaredDependency) -> List[VulnerabilityRecord]:
        """Confirmed vulnerability records for one dependency, cached per version."""
        version = dependency.version
        if not version.valid:
            self.logger.debug(f"Unparsable version {dependency.version_specifier!r} for {dependency.name}, skipping advisories")
            return []

        cached = self.cache.get(dependency.name, version)
        if cached is not None:
            self.logger.debug(f"Cache hit for {dependency.name}@{version}")
            return cached

        findings = await self._query_sources(self.sources, dependency)
        if not findings and self.fallback_sources:
            findings = await self._query_sources(self.fallback_sources, dependency)

        confirmed = [finding for finding in findings if is_affected(finding, version)]
        self.logger.debug(
            f"{dependency.name}@{version}: {len(findings)} advisories, {len(confirmed)} affect this version"
        )

        cleaned = deduplicate(self.filter.filter(confirmed, dependency.name, version))
        records = [
            VulnerabilityRecord(
                package_name=dependency.name,
                version=version,
                finding=finding,
                confirmed_affected=True,
            )
            for finding in cleaned
        ]

        self.cache.store(dependency.name, version, records)
        return records

    async def _query_sources(self, sources: Sequence[AdvisorySource], dependency: DeclaredDependency) -> List[AdvisoryFinding]:
        results = await asyncio.gather(
            *(source.query(dependency.name, dependency.ecosystem, dependency.version) for source in sources),
            return_exceptions=True
        )

        findings: List[AdvisoryFinding] = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                self.logger.warning(f"{source.name} failed for {dependency.name}: {result!r}")
                continue
            findings.extend(result)
        return findings


