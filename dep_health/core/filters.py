"""False-positive suppression and deduplication of advisory findings."""

import re
from typing import Any, List, Optional, Set, Tuple

from ..utils.logging import get_logger
from .cache import FalsePositiveMemo
from .ecosystems import Severity
from .models import AdvisoryFinding
from .versions import normalize

# Packages that only run at build/test time and never ship to production
DEV_ONLY_PACKAGES = frozenset({
    "jest", "mocha", "chai", "jasmine", "karma", "ava", "vitest", "sinon",
    "nyc", "istanbul", "supertest", "cypress", "playwright", "puppeteer",
    "eslint", "prettier", "tslint", "stylelint", "husky", "lint-staged",
    "nodemon", "ts-node", "typescript", "webpack", "webpack-cli",
    "webpack-dev-server", "rollup", "vite", "parcel", "esbuild", "gulp",
    "grunt", "babel-jest", "@babel/core", "@babel/cli", "@babel/preset-env",
    "@types/node", "@types/jest", "concurrently", "rimraf",
})

# Summary wording that marks a non-production or sample advisory
PLACEHOLDER_TERMS = (
    "placeholder", "test", "tests", "testing", "demo", "example", "sample",
    "dummy", "documentation", "docs",
)

_PLACEHOLDER_PATTERN = re.compile(
    r'\b(' + '|'.join(PLACEHOLDER_TERMS) + r')\b', re.IGNORECASE
)


class FalsePositiveFilter:
    """Drops noisy findings and remembers which ones were dropped."""

    def __init__(self, memo: Optional[FalsePositiveMemo] = None) -> None:
        self.memo = memo if memo is not None else FalsePositiveMemo()
        self.logger = get_logger("FalsePositiveFilter")

    def filter(
        self,
        findings: List[AdvisoryFinding],
        package_name: str,
        version: Any
    ) -> List[AdvisoryFinding]:
        """Remove findings that are known or likely false positives.

        Args:
            findings: Findings for one dependency
            package_name: Dependency name
            version: Dependency version (raw or normalized)

        Returns:
            The findings that survived, in input order
        """
        current = normalize(version)
        kept = []

        for finding in findings:
            if self.memo.contains(finding.id, package_name, current):
                continue

            reason = self._drop_reason(finding, package_name)
            if reason:
                self.logger.debug(f"Dropping {finding.id} for {package_name}@{current}: {reason}")
                self.memo.record(finding.id, package_name, current)
                continue

            kept.append(finding)

        return kept

    def _drop_reason(self, finding: AdvisoryFinding, package_name: str) -> Optional[str]:
        if package_name.lower() in DEV_ONLY_PACKAGES or package_name.startswith("@types/"):
            return "development-only package"

        if finding.severity == Severity.LOW and finding.severity_score is None:
            return "low severity without a score"

        if _PLACEHOLDER_PATTERN.search(finding.summary or ""):
            return "placeholder summary"

        return None


def deduplicate(findings: List[AdvisoryFinding]) -> List[AdvisoryFinding]:
    """Merge findings sharing (advisory id, package name); first one wins.

    Args:
        findings: Findings possibly reported by several sources

    Returns:
        Unique findings in first-seen order
    """
    seen: Set[Tuple[str, str]] = set()
    unique = []

    for finding in findings:
        key = (finding.id, finding.package_name.lower())
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)

    return unique
