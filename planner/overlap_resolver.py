"""Timetable overlap resolver for a single term.

Given the courses sitting in a term's slots and, for each, the sections it
offers in that term type, pick one section per course so that no two picked
sections meet at the same time.

Search
------
The choices form a Cartesian product (one axis per slot). Each combination is
addressed by an integer in [0, product) decoded as a mixed-radix number whose
digit i selects the section for slot i. Empty slots have radix 1 (a single
"nothing" choice). The first conflict-free combination wins.

This is exponential in the number of slots, but slots per term and sections
per course are both small in practice. An explicit product ceiling makes
adversarial inputs fail fast instead of running unbounded.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .courses import Course, TimetableOffering
from .errors import SearchLimitExceeded


DEFAULT_MAX_COMBINATIONS = 250_000

# (course, candidate sections for the term type); None = empty slot
SlotChoice = Optional[Tuple[Course, Sequence[TimetableOffering]]]
# (course, chosen section); None = empty slot
ResolvedSlot = Optional[Tuple[Course, TimetableOffering]]


def combination_count(slot_choices: Sequence[SlotChoice]) -> int:
    total = 1
    for slot in slot_choices:
        if slot is not None:
            total *= len(slot[1])
    return total


def find_conflicts(assignments: Sequence[ResolvedSlot]) -> List[Tuple[str, str]]:
    """Return (course, course) name pairs whose chosen sections overlap."""

    chosen = [a for a in assignments if a is not None]
    conflicts: List[Tuple[str, str]] = []
    for i in range(len(chosen)):
        for j in range(i + 1, len(chosen)):
            if chosen[i][1].overlaps(chosen[j][1]):
                conflicts.append((chosen[i][0].name, chosen[j][0].name))
    return conflicts


def _is_conflict_free(candidate: Sequence[ResolvedSlot]) -> bool:
    chosen = [a for a in candidate if a is not None]
    for i in range(len(chosen)):
        for j in range(i + 1, len(chosen)):
            if chosen[i][1].overlaps(chosen[j][1]):
                return False
    return True


def resolve_timetable(
    slot_choices: Sequence[SlotChoice],
    *,
    max_combinations: Optional[int] = DEFAULT_MAX_COMBINATIONS,
) -> Optional[List[ResolvedSlot]]:
    """Pick one section per occupied slot with no pairwise time overlap.

    Returns:
        One entry per slot (None for empty slots), or None when every
        combination conflicts (or an occupied slot has no sections at all).

    Raises:
        SearchLimitExceeded: the product of choices is above `max_combinations`.
    """

    total = combination_count(slot_choices)
    if total == 0:
        return None
    if max_combinations is not None and total > max_combinations:
        raise SearchLimitExceeded(total, max_combinations)

    radices = [1 if slot is None else len(slot[1]) for slot in slot_choices]

    for combo in range(total):
        n = combo
        candidate: List[ResolvedSlot] = []
        for slot, base in zip(slot_choices, radices):
            digit = n % base
            n //= base
            if slot is None:
                candidate.append(None)
            else:
                course, sections = slot
                candidate.append((course, sections[digit]))

        if _is_conflict_free(candidate):
            return candidate

    return None
