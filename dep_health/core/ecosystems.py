"""Registry ecosystems and the severity vocabulary."""

import re
from enum import Enum
from typing import Any, Optional


class Ecosystem(str, Enum):
    """Package registry namespaces the engine knows how to query."""

    NPM = "npm"
    PYPI = "PyPI"
    MAVEN = "Maven"
    NUGET = "NuGet"
    GO = "Go"
    RUBYGEMS = "RubyGems"

    @property
    def osv_name(self) -> str:
        """Ecosystem name as spelled by the OSV API."""
        return self.value

    @property
    def github_name(self) -> str:
        """Ecosystem parameter as spelled by the GitHub advisory API."""
        return _GITHUB_ECOSYSTEMS[self]

    @classmethod
    def parse(cls, value: str) -> "Ecosystem":
        """Case-insensitive lookup by value, e.g. ``pypi`` or ``Go``.

        Raises:
            ValueError: If the name is not a known ecosystem
        """
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown ecosystem: {value}")


_GITHUB_ECOSYSTEMS = {
    Ecosystem.NPM: "npm",
    Ecosystem.PYPI: "pip",
    Ecosystem.MAVEN: "maven",
    Ecosystem.NUGET: "nuget",
    Ecosystem.GO: "go",
    Ecosystem.RUBYGEMS: "rubygems",
}

# Bare gem names that would otherwise fall through to npm
KNOWN_GEMS = frozenset({
    "rails", "rack", "rack-protection", "nokogiri", "devise", "puma",
    "sinatra", "rspec", "rake", "bundler", "sidekiq", "activesupport",
    "activerecord", "actionpack", "actionview", "rubocop", "capybara",
    "faraday", "pry", "thor", "unicorn", "jbuilder", "sprockets",
})

_NUGET_SHAPE = re.compile(r'^[A-Z][a-zA-Z0-9]*(\.[A-Z][a-zA-Z0-9]*)*$')


def classify(name: str) -> Ecosystem:
    """Guess the registry ecosystem of a package from the shape of its name.

    PyPI names cannot be told apart from npm names this way; callers that
    know the manifest type should pass the ecosystem explicitly instead.

    Args:
        name: Package name as declared in the manifest

    Returns:
        The guessed ecosystem, npm when nothing else fits
    """
    if ':' in name:
        return Ecosystem.MAVEN

    if '/' in name and not name.startswith('@'):
        return Ecosystem.GO

    if _NUGET_SHAPE.match(name):
        return Ecosystem.NUGET

    if name.lower() in KNOWN_GEMS:
        return Ecosystem.RUBYGEMS

    return Ecosystem.NPM


class Severity(str, Enum):
    """Fixed lower-case severity vocabulary shared by every source."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_text(cls, text: Any) -> "Severity":
        """Map a source's severity wording onto the vocabulary.

        Checked in priority order: critical, high, moderate/medium, low/minor.
        Anything unrecognized (including missing values) is medium.
        """
        if not isinstance(text, str) or not text.strip():
            return cls.MEDIUM

        lowered = text.lower()
        if "critical" in lowered:
            return cls.CRITICAL
        if "high" in lowered:
            return cls.HIGH
        if "moderate" in lowered or "medium" in lowered:
            return cls.MEDIUM
        if "low" in lowered or "minor" in lowered:
            return cls.LOW
        return cls.MEDIUM

    @classmethod
    def from_score(cls, score: Optional[float]) -> "Severity":
        """Map a CVSS v3 base score onto the vocabulary."""
        if score is None:
            return cls.MEDIUM
        if score >= 9.0:
            return cls.CRITICAL
        if score >= 7.0:
            return cls.HIGH
        if score >= 4.0:
            return cls.MEDIUM
        return cls.LOW
