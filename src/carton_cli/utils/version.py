"""Version comparison with minimum-requirement semantics.

Perl distributions publish both dotted (``1.2.3``, ``v1.2.3``) and decimal
(``1.0030``) versions. Both are compared here as sequences of integer
components; anything that does not parse falls back to a plain string
comparison so that a malformed version never raises.

Decimal versions are not numified the way Perl does it: the fraction is
read as one integer component, so ``"1.0030"`` compares as ``(1, 30)`` and
counts as newer than ``"1.2"`` (``(1, 2)``), where Perl would rank
1.0030 below 1.2.
"""

import re
from typing import Optional, Tuple

_COMPONENT_RE = re.compile(r"^\d+$")


def normalize_version(version: Optional[str]) -> str:
    """Strip whitespace and a leading ``v`` from a version string."""
    if version is None:
        return ""
    text = str(version).strip()
    if len(text) > 1 and text[0] in "vV" and text[1].isdigit():
        text = text[1:]
    return text


def parse_version(version: Optional[str]) -> Optional[Tuple[int, ...]]:
    """Parse a dotted/decimal version into a tuple of integers.

    Args:
        version: Version string such as ``"1.2"``, ``"v5.36.0"`` or ``"0.9901"``

    Returns:
        Tuple of integer components, or None if any component is not numeric.
    """
    text = normalize_version(version)
    if not text:
        return None
    parts = text.split(".")
    if not all(_COMPONENT_RE.match(part) for part in parts):
        return None
    return tuple(int(part) for part in parts)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings.

    Returns:
        int: -1 if left < right, 0 if equal, 1 if left > right.
    """
    left_parts = parse_version(left)
    right_parts = parse_version(right)

    if left_parts is None or right_parts is None:
        a, b = normalize_version(left), normalize_version(right)
    else:
        width = max(len(left_parts), len(right_parts))
        a = left_parts + (0,) * (width - len(left_parts))
        b = right_parts + (0,) * (width - len(right_parts))

    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def satisfies(candidate: Optional[str], minimum: Optional[str]) -> bool:
    """Return True if ``candidate`` meets the ``minimum`` version requirement.

    An empty minimum means "any version" and is satisfied even by a module
    whose version is unknown. A missing candidate cannot satisfy anything
    stricter than that.
    """
    if not normalize_version(minimum):
        return True
    if not normalize_version(candidate):
        return False
    return compare_versions(candidate, minimum) >= 0
