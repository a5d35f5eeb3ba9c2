"""Placement priority: longest weighted requirement path below each course.

A course's cost approximates how deep its requirement chain runs, so the
deepest (most constrained) courses can be attempted first. Co-requisite edges
weigh much less than prerequisites; they only break ties in favour of courses
that carry co-requisites.

Costs are relative to the chosen root. Vertices it cannot reach keep 0.0.
"""

from __future__ import annotations

from typing import Dict

from .course_graph import COREQ, PREREQ, CourseGraph, CourseRef
from .sequencing import topological_order


RELATION_WEIGHTS: Dict[str, float] = {
    PREREQ: 1.0,
    COREQ: 0.05,
}


def compute_costs(graph: CourseGraph, root: CourseRef) -> Dict[str, float]:
    """Return name -> cost for every vertex in the graph."""

    costs: Dict[str, float] = {name: 0.0 for name in graph.names()}

    for name in topological_order(graph, root):
        best = 0.0
        for edge in graph.edges_from(name):
            best = max(best, costs[edge.target] + RELATION_WEIGHTS[edge.relation])
        costs[name] = best

    return costs
