"""Flat course bundle and its JSON representation.

The bundle is what the ingestion layer hands to the graph (Load) and what the
graph hands back for persistence (Save):

    {
      "degrees": [{"name": "Computer Science", "is_degree": true,
                   "prerequisites": ["COIS-1020H", ...]}],
      "courses": [{"name": "COIS-1020H",
                   "prerequisites": ["COIS-1010H"],
                   "corequisites": [],
                   "offerings": [{"term": "Fall",
                                  "time_slots": [{"day": "Mon", "start": "09:00", "end": "10:00"}]}]}]
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, time
from pathlib import Path
from typing import Any, Dict, List

from .courses import WEEKDAYS, Course, TimeSlot, TimetableOffering
from .errors import CourseValidationError


DEFAULT_DATA_FILENAME = "sample_course_data.json"

_TIME_FORMAT = "%H:%M"

_DAY_ALIASES: Dict[str, str] = {
    "mon": "Mon", "monday": "Mon",
    "tue": "Tue", "tues": "Tue", "tuesday": "Tue",
    "wed": "Wed", "wednesday": "Wed",
    "thu": "Thu", "thur": "Thu", "thurs": "Thu", "thursday": "Thu",
    "fri": "Fri", "friday": "Fri",
}


@dataclass
class CourseData:
    degrees: List[Course] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)

    def all_courses(self) -> List[Course]:
        return list(self.degrees) + list(self.courses)


def default_course_data_path() -> Path:
    """Resolve the course bundle path.

    Uses `COURSE_PLANNER_DATA` env var if set, else the sample under `data/`.
    """

    override = os.getenv("COURSE_PLANNER_DATA")
    if override:
        return Path(override).expanduser().resolve()

    return (Path(__file__).resolve().parents[1] / "data" / DEFAULT_DATA_FILENAME).resolve()


# ----------------------------
# dict <-> entity
# ----------------------------


def _parse_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value).strip(), _TIME_FORMAT).time()
    except ValueError as exc:
        raise CourseValidationError(f"Bad time {value!r}; expected HH:MM") from exc


def _parse_day(value: Any) -> str:
    day = _DAY_ALIASES.get(str(value).strip().lower())
    if day is None:
        raise CourseValidationError(f"Bad day {value!r}; expected one of {WEEKDAYS} or the full weekday name")
    return day


def _time_slot_from_dict(raw: Dict[str, Any]) -> TimeSlot:
    try:
        day = _parse_day(raw["day"])
        return TimeSlot(day=day, start=_parse_time(raw["start"]), end=_parse_time(raw["end"]))
    except KeyError as exc:
        raise CourseValidationError(f"Time slot is missing {exc.args[0]!r}") from exc


def _offering_from_dict(raw: Dict[str, Any]) -> TimetableOffering:
    try:
        term = str(raw["term"]).strip().title()
        slots = tuple(_time_slot_from_dict(s) for s in raw["time_slots"])
    except KeyError as exc:
        raise CourseValidationError(f"Offering is missing {exc.args[0]!r}") from exc
    return TimetableOffering(term=term, time_slots=slots)


def course_from_dict(raw: Dict[str, Any], *, is_degree: bool = False) -> Course:
    if "name" not in raw:
        raise CourseValidationError("Course entry is missing 'name'")
    return Course(
        name=str(raw["name"]),
        is_degree=bool(raw.get("is_degree", is_degree)),
        prerequisites=[str(n) for n in raw.get("prerequisites", [])],
        corequisites=[str(n) for n in raw.get("corequisites", [])],
        offerings=tuple(_offering_from_dict(o) for o in raw.get("offerings", [])),
    )


def course_to_dict(course: Course) -> Dict[str, Any]:
    return {
        "name": course.name,
        "is_degree": course.is_degree,
        "prerequisites": list(course.prerequisites),
        "corequisites": list(course.corequisites),
        "offerings": [
            {
                "term": o.term,
                "time_slots": [
                    {"day": s.day, "start": s.start.strftime(_TIME_FORMAT), "end": s.end.strftime(_TIME_FORMAT)}
                    for s in o.time_slots
                ],
            }
            for o in course.offerings
        ],
    }


def course_data_from_dict(raw: Dict[str, Any]) -> CourseData:
    return CourseData(
        degrees=[course_from_dict(d, is_degree=True) for d in raw.get("degrees", [])],
        courses=[course_from_dict(c) for c in raw.get("courses", [])],
    )


def course_data_to_dict(data: CourseData) -> Dict[str, Any]:
    return {
        "degrees": [course_to_dict(d) for d in data.degrees],
        "courses": [course_to_dict(c) for c in data.courses],
    }


# -------------------------------------------------
# Loading / saving
# -------------------------------------------------


def load_course_data_from_json(path: str | Path) -> CourseData:
    """Load a `CourseData` bundle from a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return course_data_from_dict(raw)


def save_course_data_to_json(data: CourseData, path: str | Path) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(course_data_to_dict(data), f, indent=2, ensure_ascii=False)
