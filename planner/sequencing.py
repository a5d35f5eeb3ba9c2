"""Dependency ordering over the prerequisite graph."""

from __future__ import annotations

from typing import List, Set, Tuple

from .course_graph import CourseGraph, CourseRef
from .errors import GraphConsistencyError, GraphStructureError


def topological_order(graph: CourseGraph, root: CourseRef) -> List[str]:
    """Return every vertex reachable from `root`, dependencies first.

    Post-order depth-first traversal over Prereq and Coreq edges. Each vertex
    is emitted once, after all of its requirements; `root` comes last.
    Independent siblings keep the graph's edge order.

    The graph is acyclic by construction, so meeting a vertex that is still
    being visited means the graph was corrupted; that raises instead of
    being skipped.
    """

    start = root if isinstance(root, str) else root.name
    if start not in graph:
        raise GraphStructureError(f"Course {start!r} is not in the graph")

    order: List[str] = []
    done: Set[str] = set()
    in_progress: Set[str] = set()

    # Stack stores: (vertex name, returning from its requirements)
    stack: List[Tuple[str, bool]] = [(start, False)]
    while stack:
        name, returning = stack.pop()

        if returning:
            in_progress.discard(name)
            done.add(name)
            order.append(name)
            continue

        if name in done:
            continue
        if name in in_progress:
            raise GraphConsistencyError(f"Cycle through {name!r} found during traversal")

        in_progress.add(name)
        stack.append((name, True))

        # Reversed so the first edge is visited first.
        for edge in reversed(graph.edges_from(name)):
            if edge.target in done:
                continue
            if edge.target in in_progress:
                raise GraphConsistencyError(f"Cycle {name!r} -> {edge.target!r} found during traversal")
            stack.append((edge.target, False))

    return order
