"""PrerequisiteGraph - the "course requires course" DAG."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from coursegate.exceptions import CourseNotFoundError, ValidationError
from coursegate.prerequisites.exceptions import CycleDetectedError
from coursegate.prerequisites.models import CourseRef
from coursegate.store.models import Course, Enrollment, EnrollmentStatus, PrerequisiteEdge

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy.orm import Session

    from coursegate.store.database import Database

logger = logging.getLogger(__name__)


def find_cycle(edges: Mapping[str, Iterable[str]], start: str) -> list[str] | None:
    """Find a path that leads from ``start`` back to itself.

    Depth-first search over ``edges`` (course -> required courses). Only
    cycles through ``start`` are looked for: when an acyclic graph gets a new
    edge set for ``start``, any cycle it creates must pass through ``start``.

    Args:
        edges: Adjacency mapping, course id -> ids it requires.
        start: Course whose edges are being replaced.

    Returns:
        The cycle as ``[start, ..., start]``, or None if there is none.
    """
    path = [start]
    visited = {start}
    stack = [iter(sorted(edges.get(start, ())))]
    while stack:
        for nxt in stack[-1]:
            if nxt == start:
                return [*path, start]
            if nxt not in visited:
                visited.add(nxt)
                path.append(nxt)
                stack.append(iter(sorted(edges.get(nxt, ()))))
                break
        else:
            stack.pop()
            path.pop()
    return None


def missing_prerequisites(session: Session, student_id: str, course_id: str) -> list[CourseRef]:
    """Direct prerequisites of a course the student has not completed.

    A prerequisite counts as met once the student holds at least one
    completed enrollment for it. Prerequisites of prerequisites are not
    checked.
    """
    completed = select(Enrollment.course_id).where(
        Enrollment.student_id == student_id,
        Enrollment.status == EnrollmentStatus.COMPLETED.value,
    )
    stmt = (
        select(Course.id, Course.title)
        .join(PrerequisiteEdge, PrerequisiteEdge.required_course_id == Course.id)
        .where(PrerequisiteEdge.course_id == course_id)
        .where(Course.id.not_in(completed))
        .order_by(Course.title, Course.id)
    )
    return [CourseRef(id=row.id, title=row.title) for row in session.execute(stmt)]


def _load_edges(session: Session) -> dict[str, set[str]]:
    edges: dict[str, set[str]] = defaultdict(set)
    for edge in session.execute(select(PrerequisiteEdge)).scalars():
        edges[edge.course_id].add(edge.required_course_id)
    return edges


class PrerequisiteGraph:
    """Maintains prerequisite edges between courses.

    Edge edits happen during course authoring, never on the enrollment path.
    Every edit is checked for cycles against the whole graph before it is
    committed, and edits are serialized so two concurrent edits cannot each
    pass validation and together form a cycle.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the graph.

        Args:
            database: Database holding courses and prerequisite edges.
        """
        self._db = database
        self._authoring_lock = threading.Lock()

    def get_prerequisites(self, course_id: str) -> set[str]:
        """Get the IDs of the courses directly required by a course.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(course_id)
            stmt = select(PrerequisiteEdge.required_course_id).where(
                PrerequisiteEdge.course_id == course_id
            )
            return set(session.execute(stmt).scalars().all())

    def set_prerequisites(self, course_id: str, required_ids: Iterable[str]) -> set[str]:
        """Replace the prerequisite set of a course.

        Args:
            course_id: The course being edited
            required_ids: Courses that must be completed first

        Returns:
            The committed set of required course IDs

        Raises:
            ValidationError: If an ID is not a non-empty string
            CourseNotFoundError: If the course or any required course doesn't exist
            CycleDetectedError: If the new edges would make the course require
                itself; the stored edges are left unchanged
        """
        if isinstance(required_ids, str):
            raise ValidationError("required_ids must be a collection of course ids")
        required = set(required_ids)
        for required_id in required:
            if not isinstance(required_id, str) or not required_id:
                raise ValidationError(f"Invalid prerequisite course id: {required_id!r}")

        with self._authoring_lock, self._db.transaction() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(course_id)

            if required:
                found = set(
                    session.execute(select(Course.id).where(Course.id.in_(required)))
                    .scalars()
                    .all()
                )
                unknown = sorted(required - found)
                if unknown:
                    raise CourseNotFoundError(
                        unknown[0], f"Prerequisite courses not found: {', '.join(unknown)}"
                    )

            edges = _load_edges(session)
            edges[course_id] = required
            cycle = find_cycle(edges, course_id)
            if cycle is not None:
                logger.info("Rejected prerequisites for %s: cycle %s", course_id, cycle)
                raise CycleDetectedError(course_id, cycle)

            session.execute(delete(PrerequisiteEdge).where(PrerequisiteEdge.course_id == course_id))
            session.add_all(
                PrerequisiteEdge(course_id=course_id, required_course_id=required_id)
                for required_id in sorted(required)
            )

        logger.info("Set prerequisites for %s: %s", course_id, sorted(required))
        return required

    def unmet_prerequisites(self, student_id: str, course_id: str) -> list[CourseRef]:
        """Direct prerequisites of ``course_id`` the student has not completed.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(course_id)
            return missing_prerequisites(session, student_id, course_id)
