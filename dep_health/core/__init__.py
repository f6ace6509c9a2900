"""Version handling, advisory evaluation and the analysis engine."""

from .cache import FalsePositiveMemo, ResultCache
from .ecosystems import Ecosystem, Severity, classify
from .engine import DependencyHealthEngine
from .evaluator import is_affected
from .filters import FalsePositiveFilter, deduplicate
from .models import (
    AdvisoryFinding,
    DeclaredDependency,
    DependencyReport,
    StalenessRecord,
    VulnerabilityRecord,
)
from .versions import NormalizedVersion, compare, normalize, satisfies_range

__all__ = [
    "AdvisoryFinding",
    "DeclaredDependency",
    "DependencyHealthEngine",
    "DependencyReport",
    "Ecosystem",
    "FalsePositiveFilter",
    "FalsePositiveMemo",
    "NormalizedVersion",
    "ResultCache",
    "Severity",
    "StalenessRecord",
    "VulnerabilityRecord",
    "classify",
    "compare",
    "deduplicate",
    "is_affected",
    "normalize",
    "satisfies_range",
]
