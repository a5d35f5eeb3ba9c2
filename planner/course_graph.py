"""Prerequisite graph.

Directed graph of courses with two edge kinds:

- `Prereq`: the target must be completed in a strictly earlier term
- `Coreq`: the target must be completed in the same term or earlier

Edge direction: an edge A -> B means B is a prerequisite/co-requisite of A
(A depends on B). Degree nodes are roots whose edges point at the courses the
degree requires.

The union of both edge kinds is kept acyclic: every insertion first checks
whether the target can already reach the source and refuses the edge if so.
That is a full reachability search per insertion, O(V + E) each; fine for
catalog-sized graphs but worth replacing with incremental topological order
maintenance if graphs grow large.

Vertices are stored in an insertion-ordered dict keyed by course name, so
lookups are O(1) and iteration order is deterministic. No traversal state is
stored on vertices; algorithms keep their own visited sets and cost maps.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .course_data import CourseData
from .courses import Course
from .errors import GraphCycleError, GraphStructureError


logger = logging.getLogger(__name__)


PREREQ = "Prereq"
COREQ = "Coreq"
RELATIONS: Tuple[str, ...] = (PREREQ, COREQ)


CourseRef = Union[Course, str]


def _key(course: CourseRef) -> str:
    return course if isinstance(course, str) else course.name


# ----------------------------
# Vertices / edges
# ----------------------------


@dataclass(frozen=True)
class CourseEdge:
    target: str
    relation: str


@dataclass
class CourseVertex:
    course: Course
    edges: List[CourseEdge] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.course.name

    def find_edge_index(self, target: str) -> Optional[int]:
        for i, edge in enumerate(self.edges):
            if edge.target == target:
                return i
        return None


# ----------------------------
# Graph
# ----------------------------


class CourseGraph:
    def __init__(self) -> None:
        self._vertices: Dict[str, CourseVertex] = {}

    # ---------- queries ----------

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, course: CourseRef) -> bool:
        return _key(course) in self._vertices

    def names(self) -> List[str]:
        return list(self._vertices.keys())

    def courses(self) -> List[Course]:
        return [v.course for v in self._vertices.values()]

    def get_course(self, name: str) -> Optional[Course]:
        vertex = self._vertices.get(name)
        return vertex.course if vertex is not None else None

    def _vertex(self, course: CourseRef) -> CourseVertex:
        vertex = self._vertices.get(_key(course))
        if vertex is None:
            raise GraphStructureError(f"Course {_key(course)!r} is not in the graph")
        return vertex

    def edges_from(self, course: CourseRef) -> Tuple[CourseEdge, ...]:
        """Outgoing edges of a vertex, i.e. its direct requirements."""

        return tuple(self._vertex(course).edges)

    def find_edge(self, source: CourseRef, target: CourseRef) -> Optional[CourseEdge]:
        vertex = self._vertices.get(_key(source))
        if vertex is None:
            return None
        idx = vertex.find_edge_index(_key(target))
        return vertex.edges[idx] if idx is not None else None

    def edge_count(self) -> int:
        return sum(len(v.edges) for v in self._vertices.values())

    def incoming(self, course: CourseRef) -> List[str]:
        """Names of vertices holding an edge into `course`."""

        name = _key(course)
        return [v.name for v in self._vertices.values() if v.find_edge_index(name) is not None]

    def roots(self) -> List[str]:
        """Vertices without incoming edges, in insertion order."""

        targets: Set[str] = {e.target for v in self._vertices.values() for e in v.edges}
        return [name for name in self._vertices if name not in targets]

    def can_reach(self, source: CourseRef, target: CourseRef) -> bool:
        """True when a directed path source -> ... -> target exists (a vertex reaches itself)."""

        start, goal = _key(source), _key(target)
        if start not in self._vertices:
            return False

        stack = [start]
        visited: Set[str] = set()
        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current in visited:
                continue
            visited.add(current)
            vertex = self._vertices.get(current)
            if vertex is None:
                continue
            for edge in vertex.edges:
                if edge.target not in visited:
                    stack.append(edge.target)
        return False

    # ---------- mutation ----------

    def add_vertex(self, course: Course) -> None:
        """Insert `course`; a course with the same name already present wins.

        Requirements are not expanded here, callers add edges explicitly.
        """

        if course.name in self._vertices:
            return
        self._vertices[course.name] = CourseVertex(course=course)

    def remove_vertex(self, course: CourseRef) -> None:
        """Remove a vertex, handing its requirements to every vertex that needed it.

        If A required B and B required C and D, then after removing B, A
        requires C and D directly (with B's relation kinds). Degrees only hold
        Prereq edges, so a degree adopts every requirement as Prereq and its
        `prerequisites` list follows the rewiring.

        Every adopted edge is worked out before anything is touched. Since
        the graph is acyclic, an adopted edge P -> C cannot close a cycle
        (C reaching P would mean C -> ... -> P -> B -> C already existed).
        """

        name = _key(course)
        removed = self._vertices.get(name)
        if removed is None:
            return

        parents = [v for v in self._vertices.values() if v.name != name and v.find_edge_index(name) is not None]

        adopted: List[Tuple[CourseVertex, List[CourseEdge]]] = []
        for parent in parents:
            new_edges: List[CourseEdge] = []
            for edge in removed.edges:
                if parent.find_edge_index(edge.target) is not None:
                    continue
                if any(e.target == edge.target for e in new_edges):
                    continue
                relation = PREREQ if parent.course.is_degree else edge.relation
                new_edges.append(CourseEdge(target=edge.target, relation=relation))
            adopted.append((parent, new_edges))

        del self._vertices[name]
        for parent, new_edges in adopted:
            del parent.edges[parent.find_edge_index(name)]
            parent.edges.extend(new_edges)

            if parent.course.is_degree:
                requirements = parent.course
                requirements.prerequisites[:] = [n for n in requirements.prerequisites if n != name]
                for edge in new_edges:
                    if edge.target not in requirements.prerequisites:
                        requirements.prerequisites.append(edge.target)

        logger.debug("Removed %s; rewired %d dependent course(s)", name, len(parents))

    def add_edge(self, source: CourseRef, target: CourseRef, relation: str) -> None:
        """Add source -> target (target becomes a requirement of source).

        No-op if either vertex is missing or the pair is already linked under
        any relation (the first relation added wins).

        Raises:
            GraphCycleError: target can already reach source.
            GraphStructureError: unknown relation, or a Coreq edge from a degree.
        """

        if relation not in RELATIONS:
            raise GraphStructureError(f"Unknown relation {relation!r}; expected one of {RELATIONS}")

        src = self._vertices.get(_key(source))
        dst = self._vertices.get(_key(target))
        if src is None or dst is None:
            return
        if src.find_edge_index(dst.name) is not None:
            return

        if src.course.is_degree and relation == COREQ:
            raise GraphStructureError(f"Degree {src.name!r} cannot hold co-requisites")
        if self.can_reach(dst.name, src.name):
            raise GraphCycleError(f"Edge {src.name!r} -> {dst.name!r} would create a cycle")

        src.edges.append(CourseEdge(target=dst.name, relation=relation))

    def remove_edge(self, source: CourseRef, target: CourseRef) -> None:
        vertex = self._vertices.get(_key(source))
        if vertex is None:
            return
        idx = vertex.find_edge_index(_key(target))
        if idx is None:
            return
        del vertex.edges[idx]

    def update_vertex(self, course: CourseRef, degree: Course) -> bool:
        """Toggle whether `degree` requires `course`.

        Returns True if the course is required after the call.

        Raises:
            GraphStructureError: `degree` is not a degree course, or either
                course is missing from the graph.
        """

        if not degree.is_degree:
            raise GraphStructureError(f"{degree.name!r} is not a degree course")

        degree_vertex = self._vertex(degree)
        course_name = self._vertex(course).name
        requirements = degree_vertex.course

        idx = degree_vertex.find_edge_index(course_name)
        if idx is not None:
            del degree_vertex.edges[idx]
            requirements.prerequisites[:] = [n for n in requirements.prerequisites if n != course_name]
            requirements.corequisites[:] = [n for n in requirements.corequisites if n != course_name]
            return False

        self.add_edge(degree_vertex.name, course_name, PREREQ)
        if course_name not in requirements.prerequisites:
            requirements.prerequisites.append(course_name)
        return True

    # ---------- bundle conversion ----------

    def get_course_data(self) -> CourseData:
        """Export the graph as a flat bundle.

        Exported courses are copies whose requirement lists mirror the current
        edges, so removals and rewiring are reflected.
        """

        data = CourseData()
        for vertex in self._vertices.values():
            exported = dataclasses.replace(
                vertex.course,
                prerequisites=[e.target for e in vertex.edges if e.relation == PREREQ],
                corequisites=[e.target for e in vertex.edges if e.relation == COREQ],
            )
            if exported.is_degree:
                data.degrees.append(exported)
            else:
                data.courses.append(exported)
        return data

    @classmethod
    def from_course_data(cls, data: CourseData) -> "CourseGraph":
        """Build a graph from a bundle.

        Raises:
            GraphStructureError: a requirement names a course not in the bundle.
            GraphCycleError: the requirements are cyclic.
        """

        graph = cls()
        everything = data.all_courses()
        for course in everything:
            graph.add_vertex(course)

        for course in everything:
            if graph.get_course(course.name) is not course:
                logger.warning("Duplicate course %r in bundle; keeping the first entry", course.name)
                continue
            graph._link_requirements(course, course.corequisites, COREQ)
            graph._link_requirements(course, course.prerequisites, PREREQ)

        logger.info("Built course graph: %d vertices, %d edges", len(graph), graph.edge_count())
        return graph

    def _link_requirements(self, course: Course, names: Iterable[str], relation: str) -> None:
        for name in names:
            if name not in self._vertices:
                raise GraphStructureError(f"{course.name!r} requires unknown course {name!r}")
            self.add_edge(course.name, name, relation)
