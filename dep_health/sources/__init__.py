"""Advisory sources for DepHealth."""

from .base import AdvisorySource
from .github import GitHubAdvisorySource
from .known import KnownPatternsSource
from .osv import OSVSource

__all__ = [
    "AdvisorySource",
    "GitHubAdvisorySource",
    "KnownPatternsSource",
    "OSVSource",
]
