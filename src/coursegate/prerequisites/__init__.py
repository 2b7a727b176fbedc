"""Prerequisites - Course prerequisite DAG and satisfaction checks."""

from coursegate.prerequisites.exceptions import CycleDetectedError
from coursegate.prerequisites.graph import (
    PrerequisiteGraph,
    find_cycle,
    missing_prerequisites,
)
from coursegate.prerequisites.models import CourseRef

__all__ = [
    "CourseRef",
    "CycleDetectedError",
    "PrerequisiteGraph",
    "find_cycle",
    "missing_prerequisites",
]
