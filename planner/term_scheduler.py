"""Greedy term scheduler.

Builds a multi-term plan for one degree:

1. Required phase: the degree's direct requirements, highest cost first, each
   placed together with its whole requirement chain (requirements before the
   courses that need them). Any failure here is fatal.
2. Filler phase: every other course, cheapest first, until the target course
   count is reached. A course that cannot be placed is skipped and noted as a
   missed opportunity.

Placement rule
--------------
A course may go no earlier than one term after its latest prerequisite and no
earlier than its latest co-requisite. From there terms are scanned forward up
to a safety ceiling; the first term that has a free slot, offers the course in
its term type, and still admits a clash-free choice of sections wins.

This is a heuristic: it always respects the hard constraints but makes no
claim of producing the shortest plan.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from .cost_heuristic import compute_costs
from .course_graph import PREREQ, CourseGraph, CourseRef
from .courses import TERM_TYPES, Course
from .errors import GraphStructureError, PlacementError, ScheduleInfeasibleError
from .overlap_resolver import DEFAULT_MAX_COMBINATIONS, find_conflicts
from .schedule import Schedule
from .sequencing import topological_order


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannerSettings:
    """User-tunable planning settings.

    Attributes:
        slots_per_term: Maximum number of courses per term.
        required_count: Number of courses the plan must contain.
        starting_term: Term type of term 0.
        max_combinations: Ceiling on the per-term section search (None disables).
    """

    slots_per_term: int = 5
    required_count: int = 40
    starting_term: str = TERM_TYPES[0]
    max_combinations: Optional[int] = DEFAULT_MAX_COMBINATIONS


def term_ceiling(settings: PlannerSettings) -> int:
    """Exclusive upper bound on the term index any course may be placed in."""

    return len(TERM_TYPES) * max(1, int(settings.required_count))


# ----------------------------
# Placement
# ----------------------------


def _earliest_term(graph: CourseGraph, schedule: Schedule, course: Course) -> int:
    earliest = 0
    for edge in graph.edges_from(course.name):
        dependency = graph.get_course(edge.target)
        if dependency is None or dependency.is_degree:
            continue
        dep_term = schedule.course_term(edge.target)
        if dep_term is None:
            raise PlacementError(course.name, f"{course.name}: requirement {edge.target} is not scheduled")
        if edge.relation == PREREQ:
            earliest = max(earliest, dep_term + 1)
        else:
            earliest = max(earliest, dep_term)
    return earliest


def _place_course(graph: CourseGraph, schedule: Schedule, course: Course, ceiling: int) -> int:
    earliest = _earliest_term(graph, schedule, course)
    if earliest >= ceiling:
        raise PlacementError(
            course.name,
            f"{course.name}: requirements push it to term {earliest}, past the last allowed term {ceiling - 1}",
        )

    for term in range(earliest, ceiling):
        if schedule.is_term_full(term):
            continue
        if schedule.try_add_course(course, term):
            logger.debug("Placed %s in term %d (%s)", course.name, term, schedule.term_type(term))
            return term

    raise PlacementError(
        course.name,
        f"{course.name}: no term from {earliest} to {ceiling - 1} has a free slot, "
        f"an offering and a clash-free timetable",
    )


def _place_with_requirements(graph: CourseGraph, schedule: Schedule, name: str, ceiling: int) -> None:
    """Place `name` and everything it depends on, requirements first."""

    for dep_name in topological_order(graph, name):
        if dep_name in schedule:
            continue
        course = graph.get_course(dep_name)
        if course is None or course.is_degree:
            continue
        _place_course(graph, schedule, course, ceiling)


# ----------------------------
# Plan
# ----------------------------


def plan_schedule(
    graph: CourseGraph,
    degree_course: CourseRef,
    settings: PlannerSettings = PlannerSettings(),
) -> Schedule:
    """Build a schedule for `degree_course`.

    Raises:
        ScheduleInfeasibleError: `required_count` exceeds the number of
            courses, a required course cannot be placed, or the plan ends
            short of `required_count`.
        GraphStructureError: the degree is missing or is not a root.
        SearchLimitExceeded: a term's section search exceeds the ceiling.
    """

    degree_name = degree_course if isinstance(degree_course, str) else degree_course.name

    if settings.required_count > len(graph):
        raise ScheduleInfeasibleError(
            f"Cannot schedule {settings.required_count} courses from a graph of {len(graph)}"
        )
    if degree_name not in graph:
        raise GraphStructureError(f"Degree {degree_name!r} must be in the graph")
    if degree_name not in graph.roots():
        raise GraphStructureError(f"Degree {degree_name!r} must be a root (no course may require it)")

    costs = compute_costs(graph, degree_name)
    schedule = Schedule(
        settings.slots_per_term,
        settings.starting_term,
        max_combinations=settings.max_combinations,
    )
    ceiling = term_ceiling(settings)

    # Required phase: highest cost popped first.
    stack: List[str] = sorted((e.target for e in graph.edges_from(degree_name)), key=lambda n: costs[n])
    while stack:
        name = stack.pop()
        try:
            _place_with_requirements(graph, schedule, name, ceiling)
        except PlacementError as exc:
            raise ScheduleInfeasibleError(f"Required course could not be placed: {exc}") from exc

    logger.info(
        "Required phase for %s placed %d course(s) over %d term(s)",
        degree_name,
        schedule.placed_count,
        schedule.term_count,
    )

    # Filler phase: cheapest first, ties in graph order.
    candidates = sorted(
        (c.name for c in graph.courses() if not c.is_degree and c.name not in schedule),
        key=lambda n: costs[n],
    )
    for name in candidates:
        if schedule.placed_count >= settings.required_count:
            break
        if name in schedule:
            continue
        try:
            _place_with_requirements(graph, schedule, name, ceiling)
        except PlacementError as exc:
            schedule.record_missed_opportunity(str(exc))
            logger.warning("Missed opportunity: %s", exc)

    if schedule.placed_count < settings.required_count:
        raise ScheduleInfeasibleError(
            f"Only {schedule.placed_count} of {settings.required_count} courses could be scheduled"
        )

    logger.info(
        "Planned %d course(s) over %d term(s); %d missed opportunit(ies)",
        schedule.placed_count,
        schedule.term_count,
        len(schedule.missed_opportunities),
    )
    return schedule


# -------------------------------------------------
# Metrics
# -------------------------------------------------


def compute_plan_metrics(graph: CourseGraph, schedule: Schedule) -> Dict[str, float]:
    """Return constraint checks and counts for a finished schedule.

    Every violation counter is 0.0 for a schedule produced by `plan_schedule`.
    """

    entries = schedule.entries()
    cell_counts = Counter(e.course.name for e in entries)
    duplicate_cells = sum(c - 1 for c in cell_counts.values() if c > 1)

    prereq_violations = 0
    coreq_violations = 0
    for entry in entries:
        if entry.course.name not in graph:
            continue
        for edge in graph.edges_from(entry.course.name):
            dependency = graph.get_course(edge.target)
            if dependency is None or dependency.is_degree:
                continue
            dep_term = schedule.course_term(edge.target)
            if edge.relation == PREREQ:
                if dep_term is None or dep_term >= entry.term:
                    prereq_violations += 1
            elif dep_term is None or dep_term > entry.term:
                coreq_violations += 1

    rows = schedule.terms()
    overfull_terms = sum(1 for row in rows if len(row) > schedule.slots_per_term)
    time_conflicts = sum(len(find_conflicts(row)) for row in rows)

    return {
        "placed_courses": float(schedule.placed_count),
        "term_count": float(schedule.term_count),
        "duplicate_cells": float(duplicate_cells),
        "prereq_violations": float(prereq_violations),
        "coreq_violations": float(coreq_violations),
        "overfull_terms": float(overfull_terms),
        "time_conflicts": float(time_conflicts),
        "missed_opportunities": float(len(schedule.missed_opportunities)),
    }
