"""Affected-version evaluation for advisory findings."""

from typing import Any

from ..utils.logging import get_logger
from .models import AdvisoryFinding, EventRange, ExplicitVersions, RangeEvent
from .versions import NormalizedVersion, compare, normalize, satisfies_range

logger = get_logger("Evaluator")


def _matches_explicit(affected: ExplicitVersions, version: NormalizedVersion) -> bool:
    return any(satisfies_range(version, entry) for entry in affected.entries)


def _matches_events(affected: EventRange, version: NormalizedVersion) -> bool:
    """Replay introduced/fixed events in order and return the final state."""
    is_affected = False

    for event in affected.events:
        bound = normalize(event.version)
        if not bound.valid:
            logger.debug(f"Unparsable {event.kind} version {event.version!r}, range ignored")
            return False

        position = compare(bound, version)
        if event.kind == RangeEvent.INTRODUCED and position <= 0:
            is_affected = True
        elif event.kind == RangeEvent.FIXED and position <= 0:
            is_affected = False
        elif event.kind == RangeEvent.LAST_AFFECTED and position < 0:
            is_affected = False

    return is_affected


def is_affected(finding: AdvisoryFinding, version: Any) -> bool:
    """Decide whether a concrete version falls inside a finding's ranges.

    A finding without any range data never matches, and neither does a
    version that could not be normalized.

    Args:
        finding: Advisory finding to evaluate
        version: Version string or NormalizedVersion

    Returns:
        True only on a concrete version match
    """
    current = normalize(version)
    if not current.valid or not finding.has_range_data:
        return False

    for affected in finding.ranges:
        try:
            if isinstance(affected, ExplicitVersions) and _matches_explicit(affected, current):
                return True
            if isinstance(affected, EventRange) and _matches_events(affected, current):
                return True
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Could not evaluate range of {finding.id}: {e}")
            continue

    return False
