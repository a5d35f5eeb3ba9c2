"""Course planning core (requirement graph, ordering, term scheduling)."""

from .course_data import (
	CourseData,
	default_course_data_path,
	load_course_data_from_json,
	save_course_data_to_json,
)
from .course_graph import COREQ, PREREQ, CourseEdge, CourseGraph
from .courses import TERM_TYPES, WEEKDAYS, Course, TimeSlot, TimetableOffering
from .errors import (
	CourseValidationError,
	GraphConsistencyError,
	GraphCycleError,
	GraphStructureError,
	PlacementError,
	PlannerError,
	ScheduleError,
	ScheduleInfeasibleError,
	SearchLimitExceeded,
)
from .schedule import Schedule, ScheduledCourse
from .term_scheduler import PlannerSettings, compute_plan_metrics, plan_schedule

__all__ = [
	"CourseData",
	"default_course_data_path",
	"load_course_data_from_json",
	"save_course_data_to_json",
	"COREQ",
	"PREREQ",
	"CourseEdge",
	"CourseGraph",
	"TERM_TYPES",
	"WEEKDAYS",
	"Course",
	"TimeSlot",
	"TimetableOffering",
	"CourseValidationError",
	"GraphConsistencyError",
	"GraphCycleError",
	"GraphStructureError",
	"PlacementError",
	"PlannerError",
	"ScheduleError",
	"ScheduleInfeasibleError",
	"SearchLimitExceeded",
	"Schedule",
	"ScheduledCourse",
	"PlannerSettings",
	"compute_plan_metrics",
	"plan_schedule",
]
