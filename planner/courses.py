"""Course entities and timetable offerings.

A course is either a schedulable unit of study or a phantom "degree" node that
only aggregates the courses a field of study requires.

Data model
----------
- `TimeSlot`: one weekly meeting (weekday + start/end time)
- `TimetableOffering`: one section of a course for a term type (Fall/Winter),
  made of one or more time slots
- `Course`: name, degree flag, requirement name lists and offerings

Validation happens at construction. A malformed entity never exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import List, Tuple

from .errors import CourseValidationError


# ----------------------------
# Calendar constants
# ----------------------------


# Term types cycle in this order; term index 0 is the configured starting term.
TERM_TYPES: Tuple[str, ...] = ("Fall", "Winter")

WEEKDAYS: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri")

EARLIEST_TIME = time(8, 0)
LATEST_TIME = time(22, 0)


def term_type_for_index(starting_term: str, index: int) -> str:
    """Return the term type of term `index` when term 0 is `starting_term`."""

    if starting_term not in TERM_TYPES:
        raise CourseValidationError(f"Unknown term type {starting_term!r}; expected one of {TERM_TYPES}")
    offset = TERM_TYPES.index(starting_term)
    return TERM_TYPES[(offset + int(index)) % len(TERM_TYPES)]


# ----------------------------
# Timetable data
# ----------------------------


@dataclass(frozen=True)
class TimeSlot:
    day: str
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.day not in WEEKDAYS:
            raise CourseValidationError(f"Time slot day must be a weekday {WEEKDAYS}, got {self.day!r}")
        if self.start >= self.end:
            raise CourseValidationError(f"Time slot start {self.start} must be before end {self.end}")
        if self.start < EARLIEST_TIME or self.end > LATEST_TIME:
            raise CourseValidationError(
                f"Time slot {self.start}-{self.end} falls outside {EARLIEST_TIME}-{LATEST_TIME}"
            )

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.day == other.day and self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.day} {self.start:%H:%M}-{self.end:%H:%M}"


@dataclass(frozen=True)
class TimetableOffering:
    """One section of a course: the weekly meetings it holds in a term type."""

    term: str
    time_slots: Tuple[TimeSlot, ...]

    def __post_init__(self) -> None:
        if self.term not in TERM_TYPES:
            raise CourseValidationError(f"Offering term must be one of {TERM_TYPES}, got {self.term!r}")
        if not self.time_slots:
            raise CourseValidationError("An offering needs at least one time slot")
        # Accept lists from callers but keep the stored value hashable.
        object.__setattr__(self, "time_slots", tuple(self.time_slots))

    def overlaps(self, other: "TimetableOffering") -> bool:
        return any(a.overlaps(b) for a in self.time_slots for b in other.time_slots)

    def __str__(self) -> str:
        return f"{self.term}: " + ", ".join(str(s) for s in self.time_slots)


# ----------------------------
# Course
# ----------------------------


@dataclass(eq=False)
class Course:
    """A course or a degree aggregator.

    Attributes:
        name: Unique course name (vertices are deduplicated by it).
        is_degree: True for the phantom degree node.
        prerequisites: Names that must be completed in an earlier term.
        corequisites: Names that must be completed in the same term or earlier.
        offerings: Sections offered per term type. Empty for degrees.

    Only `CourseGraph.update_vertex` and `CourseGraph.remove_vertex` (for
    degrees) mutate the requirement lists after construction.
    """

    name: str
    is_degree: bool = False
    prerequisites: List[str] = field(default_factory=list)
    corequisites: List[str] = field(default_factory=list)
    offerings: Tuple[TimetableOffering, ...] = ()

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise CourseValidationError("Course name cannot be empty")
        self.prerequisites = list(self.prerequisites or [])
        self.corequisites = list(self.corequisites or [])
        self.offerings = tuple(self.offerings or ())

        if self.is_degree:
            if self.corequisites:
                raise CourseValidationError(f"Degree {self.name!r} cannot have co-requisites")
            if self.offerings:
                raise CourseValidationError(f"Degree {self.name!r} cannot have timetable offerings")
        elif not self.offerings:
            raise CourseValidationError(f"Course {self.name!r} needs at least one timetable offering")

    def offerings_for(self, term: str) -> Tuple[TimetableOffering, ...]:
        return tuple(o for o in self.offerings if o.term == term)

    def is_offered_in(self, term: str) -> bool:
        return any(o.term == term for o in self.offerings)

    def __repr__(self) -> str:
        kind = "Degree" if self.is_degree else "Course"
        return f"{kind}(name={self.name!r}, prereqs={self.prerequisites}, coreqs={self.corequisites})"
