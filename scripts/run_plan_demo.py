"""Demo runner: plan a degree from the sample course bundle.

Usage:
    python scripts/run_plan_demo.py

Set COURSE_PLANNER_DATA to plan from another bundle. The first degree in the
bundle is planned.
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from planner import (
    CourseGraph,
    PlannerSettings,
    compute_plan_metrics,
    default_course_data_path,
    load_course_data_from_json,
    plan_schedule,
)
from utils.plan_export import plan_summary_df, term_week_df


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    data_path = default_course_data_path()
    data = load_course_data_from_json(data_path)
    if not data.degrees:
        raise SystemExit(f"No degree in {data_path}")

    graph = CourseGraph.from_course_data(data)
    degree_name = data.degrees[0].name

    # Four courses a term, sixteen in total (two years of Fall/Winter)
    settings = PlannerSettings(slots_per_term=4, required_count=16, starting_term="Fall")
    schedule = plan_schedule(graph, degree_name, settings)

    print(f"\n=== Plan for {degree_name} ===")
    print(plan_summary_df(schedule).to_string(index=False))

    print(f"\n=== Term 0 ({schedule.term_type(0)}) ===")
    print(term_week_df(schedule, 0).to_string(index=False))

    if schedule.missed_opportunities:
        print("\n=== Missed opportunities ===")
        for msg in schedule.missed_opportunities:
            print(msg)

    print("\n=== Metrics ===")
    for k, v in compute_plan_metrics(graph, schedule).items():
        print(f"{k}: {v}")


if __name__ == "__main__":
    main()
