"""Error types raised by the course planner.

Everything derives from `PlannerError` so callers can catch the whole family.
Validation and structural errors also derive from `ValueError`, feasibility
and consistency errors from `RuntimeError`.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for course planner errors."""


class CourseValidationError(PlannerError, ValueError):
    """A course, offering or time slot was malformed at construction."""


class GraphStructureError(PlannerError, ValueError):
    """A graph operation violated a structural rule (missing vertex, non-degree, ...)."""


class GraphCycleError(GraphStructureError):
    """Adding an edge would make the requirement graph cyclic."""


class GraphConsistencyError(PlannerError, RuntimeError):
    """A traversal found the graph in a state that should be impossible."""


class ScheduleError(PlannerError, ValueError):
    """Invalid direct use of a Schedule (degree course, negative term, double placement)."""


class ScheduleInfeasibleError(PlannerError, RuntimeError):
    """The requested plan cannot be produced."""


class PlacementError(ScheduleInfeasibleError):
    """A single course could not be placed in any permissible term."""

    def __init__(self, course_name: str, message: str):
        super().__init__(message)
        self.course_name = course_name


class SearchLimitExceeded(PlannerError, RuntimeError):
    """The timetable combination product is larger than the configured ceiling."""

    def __init__(self, combinations: int, limit: int):
        super().__init__(f"Timetable search needs {combinations} combinations (limit {limit})")
        self.combinations = combinations
        self.limit = limit
