from __future__ import annotations

import io
from datetime import date, datetime, time, timedelta
from typing import Dict, List

import pandas as pd

from planner.courses import EARLIEST_TIME, LATEST_TIME, WEEKDAYS
from planner.schedule import Schedule


def schedule_rows(schedule: Schedule) -> List[Dict[str, str]]:
    """Return a list of rows suitable for tables/CSV, one per placed course."""

    rows: List[Dict[str, str]] = []
    for e in schedule.entries():
        rows.append(
            {
                "term": str(e.term),
                "term_type": e.term_type,
                "slot": str(e.slot + 1),
                "course": e.course.name,
                "section": "; ".join(str(s) for s in e.offering.time_slots),
            }
        )
    return rows


def plan_summary_df(schedule: Schedule) -> pd.DataFrame:
    """Whole plan as a flat table (term, term type, slot, course, section)."""

    return pd.DataFrame(schedule_rows(schedule), columns=["term", "term_type", "slot", "course", "section"])


def _time_rows(increment_minutes: int) -> List[time]:
    if int(increment_minutes) <= 0:
        raise ValueError("increment_minutes must be > 0")
    step = timedelta(minutes=int(increment_minutes))
    current = datetime.combine(date.min, EARLIEST_TIME)
    last = datetime.combine(date.min, LATEST_TIME)
    out: List[time] = []
    while current <= last:
        out.append(current.time())
        current += step
    return out


def term_week_grid(schedule: Schedule, term: int, *, increment_minutes: int = 60) -> List[List[str]]:
    """Return a table (rows=time increments, cols=weekdays) with the course name or ''.

    A meeting covers a row when it starts at or before the row time and ends
    after it, so partial hours show on the row they start in.
    """

    times = _time_rows(increment_minutes)
    table = [["" for _ in WEEKDAYS] for _ in times]

    for cell in schedule.term_slots(term):
        if cell is None:
            continue
        course, offering = cell
        for slot in offering.time_slots:
            col = WEEKDAYS.index(slot.day)
            for r, t in enumerate(times):
                if slot.start <= t < slot.end:
                    table[r][col] = course.name

    return table


def term_week_df(schedule: Schedule, term: int, *, increment_minutes: int = 60) -> pd.DataFrame:
    """Weekly timetable DataFrame for one term, suitable for Excel export."""

    times = _time_rows(increment_minutes)
    table = term_week_grid(schedule, term, increment_minutes=increment_minutes)
    df = pd.DataFrame(table, columns=list(WEEKDAYS))
    df.insert(0, "TIME", [t.strftime("%H:%M") for t in times])
    return df


_SHEET_NAME_LIMIT = 31
_SHEET_NAME_FORBIDDEN = ":\\/?*[]"


def _sheet_title(label: str) -> str:
    """Turn a term label into a sheet title openpyxl will accept."""

    title = "".join("-" if ch in _SHEET_NAME_FORBIDDEN else ch for ch in str(label or "")).strip()
    return (title or "Term")[:_SHEET_NAME_LIMIT]


def plan_workbook_bytes(schedule: Schedule, *, increment_minutes: int = 60) -> bytes:
    """Build an Excel workbook: plan summary, one sheet per term, missed opportunities."""

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        plan_summary_df(schedule).to_excel(writer, sheet_name="Plan", index=False)

        for term in range(schedule.term_count):
            sheet = _sheet_title(f"Term {term} - {schedule.term_type(term)}")
            term_week_df(schedule, term, increment_minutes=increment_minutes).to_excel(
                writer, sheet_name=sheet, index=False
            )

        if schedule.missed_opportunities:
            pd.DataFrame({"missed_opportunity": list(schedule.missed_opportunities)}).to_excel(
                writer, sheet_name="Missed", index=False
            )

    return out.getvalue()


def _markdown_row(values) -> str:
    cells = (str(v).replace("\n", " ").replace("|", "\\|") for v in values)
    return "| " + " | ".join(cells) + " |"


def df_to_markdown(df: pd.DataFrame) -> str:
    """Render a plan table (summary or weekly grid) as Markdown for reports."""

    # Built by hand: DataFrame.to_markdown would pull in tabulate.
    lines = [_markdown_row(df.columns), _markdown_row(["---"] * len(df.columns))]
    lines.extend(_markdown_row(row) for row in df.astype(str).values.tolist())
    return "\n".join(lines) + "\n"
