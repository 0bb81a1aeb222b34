"""Inclusive integer range checks shared by bracket and threshold rules.

A range is ``[minimum, maximum]`` with both ends inclusive. A ``None``
maximum means the range is unbounded above.
"""

from __future__ import annotations

from typing import Iterable, Protocol, TypeVar
from uuid import UUID


class RangeRule(Protocol):
    """Anything configured as an inclusive range with an active flag."""

    name: str
    is_active: bool

    @property
    def rule_id(self) -> UUID: ...

    @property
    def range_min(self) -> int: ...

    @property
    def range_max(self) -> int | None: ...


R = TypeVar("R", bound=RangeRule)


def ranges_overlap(
    min1: int,
    max1: int | None,
    min2: int,
    max2: int | None,
) -> bool:
    """Return True when two inclusive ranges share at least one value.

    Two ranges that are both unbounded above always overlap. When only one
    side is unbounded, it overlaps iff its minimum does not exceed the other
    range's maximum. Bounded ranges overlap iff each starts no later than the
    other ends, so a shared boundary value counts as overlap.
    """
    if max1 is None and max2 is None:
        return True
    if max1 is None:
        return min1 <= max2  # type: ignore[operator]
    if max2 is None:
        return min2 <= max1
    return min1 <= max2 and min2 <= max1


def range_contains(minimum: int, maximum: int | None, value: int) -> bool:
    """Return True when value falls within the inclusive range."""
    return minimum <= value and (maximum is None or value <= maximum)


def find_overlap(
    new_min: int,
    new_max: int | None,
    existing: Iterable[R],
    exclude_id: UUID | None = None,
) -> R | None:
    """Return the first active rule whose range overlaps the candidate.

    Inactive rules and the rule identified by ``exclude_id`` (the row being
    updated) are ignored.
    """
    for rule in existing:
        if not rule.is_active:
            continue
        if exclude_id is not None and rule.rule_id == exclude_id:
            continue
        if ranges_overlap(new_min, new_max, rule.range_min, rule.range_max):
            return rule
    return None


def describe_range(minimum: int, maximum: int | None) -> str:
    """Human-readable form used in validation messages."""
    if maximum is None:
        return f"{minimum}+"
    return f"{minimum}-{maximum}"
