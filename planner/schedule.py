"""Schedule: courses placed into (term, slot) cells.

Each term is a fixed-size row of slots. A cell holds the course placed there
together with the sections it offers in that term's type; after every
placement the whole term is re-resolved so that each cell also carries the one
section actually chosen (no two chosen sections in a term overlap).

Terms alternate between the term types in `TERM_TYPES`, starting from the
configured starting term.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .courses import Course, TERM_TYPES, TimetableOffering, term_type_for_index
from .errors import ScheduleError
from .overlap_resolver import DEFAULT_MAX_COMBINATIONS, ResolvedSlot, SlotChoice, resolve_timetable


@dataclass(frozen=True)
class ScheduledCourse:
    term: int
    slot: int
    term_type: str
    course: Course
    offering: TimetableOffering


class Schedule:
    def __init__(
        self,
        slots_per_term: int,
        starting_term: str = TERM_TYPES[0],
        *,
        max_combinations: Optional[int] = DEFAULT_MAX_COMBINATIONS,
    ) -> None:
        if int(slots_per_term) < 1:
            raise ScheduleError("slots_per_term must be >= 1")
        if starting_term not in TERM_TYPES:
            raise ScheduleError(f"starting_term must be one of {TERM_TYPES}, got {starting_term!r}")

        self._slots_per_term = int(slots_per_term)
        self._starting_term = starting_term
        self._max_combinations = max_combinations

        self._candidates: List[List[SlotChoice]] = []
        self._resolved: List[List[ResolvedSlot]] = []
        self._course_terms: Dict[str, int] = {}
        self._missed: List[str] = []

    # ---------- info ----------

    @property
    def slots_per_term(self) -> int:
        return self._slots_per_term

    @property
    def starting_term(self) -> str:
        return self._starting_term

    @property
    def placed_count(self) -> int:
        return len(self._course_terms)

    @property
    def term_count(self) -> int:
        return len(self._resolved)

    @property
    def missed_opportunities(self) -> Tuple[str, ...]:
        return tuple(self._missed)

    def __contains__(self, course: object) -> bool:
        name = course.name if isinstance(course, Course) else course
        return name in self._course_terms

    def term_type(self, index: int) -> str:
        return term_type_for_index(self._starting_term, index)

    def is_term_full(self, term: int) -> bool:
        if term >= len(self._candidates):
            return False
        return all(slot is not None for slot in self._candidates[term])

    def course_term(self, course: object) -> Optional[int]:
        """Term a course is scheduled in, or None."""

        name = course.name if isinstance(course, Course) else course
        return self._course_terms.get(name)

    def course_terms(self) -> Dict[str, int]:
        return dict(self._course_terms)

    def term_slots(self, term: int) -> List[ResolvedSlot]:
        """The resolved row for a term; empty slots are None."""

        if term < 0 or term >= len(self._resolved):
            return [None] * self._slots_per_term
        return list(self._resolved[term])

    def terms(self) -> List[List[Tuple[Course, TimetableOffering]]]:
        """Per term, the (course, chosen section) assignments in slot order."""

        return [[cell for cell in row if cell is not None] for row in self._resolved]

    def entries(self) -> List[ScheduledCourse]:
        out: List[ScheduledCourse] = []
        for term, row in enumerate(self._resolved):
            for slot, cell in enumerate(row):
                if cell is None:
                    continue
                course, offering = cell
                out.append(
                    ScheduledCourse(
                        term=term,
                        slot=slot,
                        term_type=self.term_type(term),
                        course=course,
                        offering=offering,
                    )
                )
        return out

    # ---------- placement ----------

    def _check_placeable(self, course: Course, term: int) -> None:
        if course.is_degree:
            raise ScheduleError(f"Cannot add degree course {course.name!r} to a schedule")
        if term < 0:
            raise ScheduleError(f"Cannot add {course.name!r} outside of the schedule (term {term})")

    def _resolve_with(self, course: Course, term: int) -> Optional[Tuple[List[SlotChoice], List[ResolvedSlot]]]:
        """Trial-place `course` in the first empty slot of `term` and resolve the term."""

        if self.is_term_full(term):
            return None
        sections = course.offerings_for(self.term_type(term))
        if not sections:
            return None

        if term < len(self._candidates):
            row = list(self._candidates[term])
        else:
            row = [None] * self._slots_per_term
        row[row.index(None)] = (course, sections)

        resolved = resolve_timetable(row, max_combinations=self._max_combinations)
        if resolved is None:
            return None
        return row, resolved

    def can_place(self, course: Course, term: int) -> bool:
        """True if the term has room, offers the course, and stays overlap-free."""

        self._check_placeable(course, term)
        return self._resolve_with(course, term) is not None

    def try_add_course(self, course: Course, term: int) -> bool:
        """Place the course if `can_place` holds; return whether it was placed."""

        self._check_placeable(course, term)
        if course.name in self._course_terms:
            raise ScheduleError(f"{course.name!r} is already scheduled in term {self._course_terms[course.name]}")

        outcome = self._resolve_with(course, term)
        if outcome is None:
            return False

        row, resolved = outcome
        while len(self._candidates) <= term:
            self._candidates.append([None] * self._slots_per_term)
            self._resolved.append([None] * self._slots_per_term)
        self._candidates[term] = row
        self._resolved[term] = resolved
        self._course_terms[course.name] = term
        return True

    def add_course(self, course: Course, term: int) -> None:
        """Place the course or raise `ScheduleError`."""

        if not self.try_add_course(course, term):
            raise ScheduleError(f"Invalid placement of {course.name!r} in term {term}")

    def record_missed_opportunity(self, message: str) -> None:
        self._missed.append(message)
