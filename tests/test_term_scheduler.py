from __future__ import annotations

import logging
import sys
from datetime import time
from pathlib import Path
from typing import Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from planner.course_graph import COREQ, PREREQ, CourseGraph
from planner.courses import Course, TimeSlot, TimetableOffering
from planner.errors import (
    GraphStructureError,
    PlacementError,
    ScheduleInfeasibleError,
    SearchLimitExceeded,
)
from planner.term_scheduler import PlannerSettings, compute_plan_metrics, plan_schedule, term_ceiling


def _course(
    name: str,
    terms: Sequence[str] = ("Fall", "Winter"),
    day: str = "Mon",
    start: int = 9,
    end: int = 10,
) -> Course:
    slot = TimeSlot(day, time(start, 0), time(end, 0))
    return Course(name=name, offerings=tuple(TimetableOffering(term=t, time_slots=(slot,)) for t in terms))


def _degree_graph(courses: Sequence[Course], required: Sequence[str]) -> CourseGraph:
    g = CourseGraph()
    g.add_vertex(Course(name="Degree", is_degree=True))
    for c in courses:
        g.add_vertex(c)
    for name in required:
        g.add_edge("Degree", name, PREREQ)
    return g


def _assert_clean(graph: CourseGraph, schedule) -> None:
    metrics = compute_plan_metrics(graph, schedule)
    for key in ["duplicate_cells", "prereq_violations", "coreq_violations", "overfull_terms", "time_conflicts"]:
        assert metrics[key] == 0.0, key


def test_term_ceiling() -> None:
    assert term_ceiling(PlannerSettings(required_count=3)) == 6
    assert term_ceiling(PlannerSettings(required_count=0)) == 2


def test_linear_chain_takes_consecutive_terms() -> None:
    # C3 needs C2 needs C1, offered in both term types
    g = _degree_graph([_course("C1"), _course("C2"), _course("C3")], required=["C3"])
    g.add_edge("C3", "C2", PREREQ)
    g.add_edge("C2", "C1", PREREQ)

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))

    assert schedule.course_terms() == {"C1": 0, "C2": 1, "C3": 2}
    assert schedule.missed_opportunities == ()
    _assert_clean(g, schedule)


def test_linear_chain_of_fall_only_courses_waits_for_fall() -> None:
    g = _degree_graph(
        [_course("C1", terms=("Fall",)), _course("C2", terms=("Fall",)), _course("C3", terms=("Fall",))],
        required=["C3"],
    )
    g.add_edge("C3", "C2", PREREQ)
    g.add_edge("C2", "C1", PREREQ)

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))

    assert schedule.course_terms() == {"C1": 0, "C2": 2, "C3": 4}
    assert [schedule.term_type(t) for t in (0, 2, 4)] == ["Fall", "Fall", "Fall"]


def test_capacity_separates_independent_courses() -> None:
    g = _degree_graph([_course("A", terms=("Fall",)), _course("B", terms=("Fall",))], required=["A", "B"])

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=2))

    terms = schedule.course_terms()
    assert terms["A"] != terms["B"]
    assert sorted(terms.values()) == [0, 2]
    _assert_clean(g, schedule)


def test_overlapping_courses_are_not_co_placed() -> None:
    g = _degree_graph([_course("A", terms=("Fall",)), _course("B", terms=("Fall",))], required=["A", "B"])

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=2, required_count=2))

    terms = schedule.course_terms()
    assert terms["A"] != terms["B"]
    assert sorted(terms.values()) == [0, 2]
    assert schedule.term_slots(0)[1] is None
    _assert_clean(g, schedule)


def test_required_count_above_vertex_count_fails_before_placement() -> None:
    g = _degree_graph([_course("A")], required=["A"])
    with pytest.raises(ScheduleInfeasibleError):
        plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))


def test_degree_must_exist_and_be_a_root() -> None:
    g = _degree_graph([_course("A")], required=["A"])
    with pytest.raises(GraphStructureError):
        plan_schedule(g, "Other", PlannerSettings(slots_per_term=1, required_count=1))

    g.add_vertex(_course("Wrapper"))
    g.add_edge("Wrapper", "Degree", PREREQ)
    with pytest.raises(GraphStructureError):
        plan_schedule(g, g.get_course("Degree"), PlannerSettings(slots_per_term=1, required_count=1))


def test_deepest_requirement_is_placed_first() -> None:
    g = _degree_graph([_course("Base"), _course("Deep"), _course("Shallow")], required=["Shallow", "Deep"])
    g.add_edge("Deep", "Base", PREREQ)

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))

    assert schedule.course_terms() == {"Base": 0, "Deep": 1, "Shallow": 2}


def test_corequisite_shares_the_term_when_times_allow() -> None:
    g = _degree_graph([_course("Lab", day="Tue"), _course("Lecture")], required=["Lecture"])
    g.add_edge("Lecture", "Lab", COREQ)

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=2, required_count=2))

    assert schedule.course_terms() == {"Lab": 0, "Lecture": 0}
    _assert_clean(g, schedule)


def test_corequisite_moves_lecture_later_when_times_clash() -> None:
    g = _degree_graph([_course("Lab"), _course("Lecture")], required=["Lecture"])
    g.add_edge("Lecture", "Lab", COREQ)

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=2, required_count=2))

    assert schedule.course_terms() == {"Lab": 0, "Lecture": 1}
    _assert_clean(g, schedule)


def test_filler_tops_up_to_required_count() -> None:
    g = _degree_graph([_course("A"), _course("X"), _course("Y"), _course("Z")], required=["A"])

    schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))

    assert schedule.course_terms() == {"A": 0, "X": 1, "Y": 2}
    assert "Z" not in schedule
    _assert_clean(g, schedule)


def test_unplaceable_filler_is_a_missed_opportunity(caplog) -> None:
    winter = ("Winter",)
    g = _degree_graph(
        [_course("A"), _course("P", terms=winter), _course("Q2", terms=winter), _course("Q1", terms=winter)],
        required=["A"],
    )
    g.add_edge("P", "Q2", PREREQ)
    g.add_edge("Q2", "Q1", PREREQ)

    with caplog.at_level(logging.WARNING, logger="planner.term_scheduler"):
        schedule = plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=2))

    # Ceiling is 4 terms: Q1 lands in term 1, Q2 in term 3, P has nowhere left
    assert schedule.course_terms() == {"A": 0, "Q1": 1, "Q2": 3}
    assert "P" not in schedule
    assert len(schedule.missed_opportunities) == 1
    assert schedule.missed_opportunities[0].startswith("P:")
    assert "Missed opportunity" in caplog.text

    metrics = compute_plan_metrics(g, schedule)
    assert metrics["missed_opportunities"] == 1.0
    assert metrics["placed_courses"] == 3.0
    _assert_clean(g, schedule)


def test_unplaceable_required_course_is_fatal() -> None:
    winter = ("Winter",)
    g = _degree_graph(
        [_course("P", terms=winter), _course("Q2", terms=winter), _course("Q1", terms=winter)],
        required=["P"],
    )
    g.add_edge("P", "Q2", PREREQ)
    g.add_edge("Q2", "Q1", PREREQ)

    with pytest.raises(ScheduleInfeasibleError) as excinfo:
        plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=2))
    assert isinstance(excinfo.value.__cause__, PlacementError)
    assert excinfo.value.__cause__.course_name == "P"


def test_shortfall_after_filler_is_fatal() -> None:
    g = _degree_graph([_course("A"), _course("B")], required=["A"])
    with pytest.raises(ScheduleInfeasibleError):
        plan_schedule(g, "Degree", PlannerSettings(slots_per_term=1, required_count=3))


def test_search_limit_always_propagates() -> None:
    def many_sections(name: str) -> Course:
        sections = tuple(
            TimetableOffering(term="Fall", time_slots=(TimeSlot("Mon", time(h, 0), time(h + 1, 0)),))
            for h in range(8, 18)
        )
        return Course(name=name, offerings=sections)

    g = _degree_graph([many_sections("A"), many_sections("B")], required=["A", "B"])

    with pytest.raises(SearchLimitExceeded):
        plan_schedule(g, "Degree", PlannerSettings(slots_per_term=2, required_count=2, max_combinations=50))


def test_graph_can_be_planned_repeatedly() -> None:
    g = _degree_graph([_course("A"), _course("B", day="Tue")], required=["A", "B"])
    settings = PlannerSettings(slots_per_term=2, required_count=2, starting_term="Winter")

    first = plan_schedule(g, "Degree", settings)
    second = plan_schedule(g, "Degree", settings)

    assert first is not second
    assert first.course_terms() == second.course_terms() == {"A": 0, "B": 0}
    assert first.term_type(0) == "Winter"
