"""Version normalization and range predicates.

Every version string the engine sees (declared specifiers, advisory ranges,
registry answers) is reduced to a ``(major, minor, patch)`` triple here.
Nothing in this module raises on bad input: strings that cannot be read
become the sentinel ``0.0.0`` with ``valid=False``.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
from packaging.version import Version

SENTINEL = (0, 0, 0)

_DIGIT_RUN = re.compile(r'(\d+)(?:\.(\d+))?(?:\.(\d+))?')
_LEADING_OPERATORS = re.compile(r'^[\^~>=<]+')
_COMPARISON = re.compile(r'^\s*(==|!=|>=|<=|=|>|<)?\s*(\S+)\s*$')


@dataclass(frozen=True, order=True)
class NormalizedVersion:
    """A canonical three-component version.

    Ordering, equality and hashing only look at the numeric triple, so the
    original string and the parse flag ride along without affecting keys.
    """

    major: int
    minor: int
    patch: int
    raw: str = field(default="", compare=False)
    valid: bool = field(default=True, compare=False)

    @property
    def triple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _pad(parts: List[int]) -> Tuple[int, int, int]:
    parts = (parts + [0, 0, 0])[:3]
    return parts[0], parts[1], parts[2]


def _coerce(text: str) -> Optional[Tuple[int, int, int]]:
    """Lenient coercion: PEP 440 first, then the first digit-and-dot run."""
    # InvalidVersion is a ValueError, and so is int()'s digit-count limit
    try:
        release = list(Version(text).release)
        return _pad(release)
    except ValueError:
        pass

    match = _DIGIT_RUN.search(text)
    if not match:
        return None
    try:
        return _pad([int(group) for group in match.groups() if group is not None])
    except ValueError:
        return None


def _strip_and_pad(text: str) -> Optional[Tuple[int, int, int]]:
    """Fallback: drop range operators and noise, then pad to three parts."""
    cleaned = _LEADING_OPERATORS.sub('', text.strip())
    cleaned = cleaned.split(' ', 1)[0]
    cleaned = re.sub(r'[^0-9.-]', '', cleaned)
    if not cleaned:
        return None

    parts = []
    for piece in cleaned.split('.')[:3]:
        # "1-2" style leftovers keep only their leading number
        number = piece.split('-', 1)[0]
        if not number.isdigit():
            return None
        try:
            parts.append(int(number))
        except ValueError:
            return None
    return _pad(parts)


def normalize(raw: Any) -> NormalizedVersion:
    """Convert any version-ish value into a NormalizedVersion.

    Args:
        raw: Version string, specifier, None or anything else

    Returns:
        The normalized version; the sentinel ``0.0.0`` (``valid=False``)
        when nothing could be parsed
    """
    if isinstance(raw, NormalizedVersion):
        return raw

    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return NormalizedVersion(*SENTINEL, raw=text, valid=False)

    triple = _coerce(text) or _strip_and_pad(text)
    if triple is None:
        return NormalizedVersion(*SENTINEL, raw=text, valid=False)
    return NormalizedVersion(*triple, raw=text)


def compare(a: Any, b: Any) -> int:
    """Three-way comparison of two versions (raw strings are normalized).

    Returns:
        -1, 0 or 1
    """
    a, b = normalize(a), normalize(b)
    if a.triple < b.triple:
        return -1
    if a.triple > b.triple:
        return 1
    return 0


_OPERATORS = {
    None: lambda c: c == 0,
    "=": lambda c: c == 0,
    "==": lambda c: c == 0,
    "!=": lambda c: c != 0,
    ">": lambda c: c > 0,
    ">=": lambda c: c >= 0,
    "<": lambda c: c < 0,
    "<=": lambda c: c <= 0,
}


def _satisfies_clause(version: NormalizedVersion, clause: str) -> bool:
    match = _COMPARISON.match(clause)
    if not match:
        return False

    operator, bound_text = match.groups()
    bound = normalize(bound_text)
    if not bound.valid:
        return False

    return _OPERATORS[operator](compare(version, bound))


def satisfies_range(version: Any, range_expr: Any) -> bool:
    """Check a version against a range expression.

    Supports an exact version (``4.17.0``), one operator-prefixed comparison
    (``<4.17.21``) or a comma-separated conjunction of comparisons
    (``>= 4.0.0, < 4.17.21``). Malformed expressions never match.

    Args:
        version: Version string or NormalizedVersion
        range_expr: Range expression

    Returns:
        True if the version lies inside the range
    """
    if not isinstance(range_expr, str) or not range_expr.strip():
        return False

    current = normalize(version)
    if not current.valid:
        return False

    clauses = range_expr.split(',')
    if any(not clause.strip() for clause in clauses):
        return False

    return all(_satisfies_clause(current, clause) for clause in clauses)
