"""Package registry lookups for DepHealth."""

from .latest import LatestVersionResolver, assess_staleness

__all__ = [
    "LatestVersionResolver",
    "assess_staleness",
]
