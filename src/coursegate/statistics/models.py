"""Data models for the statistics module."""

from dataclasses import dataclass


@dataclass
class StudentStatistics:
    """Per-student enrollment counts.

    Attributes:
        student_id: The student's external ID.
        active_courses: Enrollment records with status=active.
        completed_courses: Enrollment records with status=completed.
        dropped_courses: Enrollment records with status=dropped.
        total_enrollments: All enrollment records of the student.
        total_credits: Credits of the distinct courses completed.
        average_completion: Mean completion percentage over all records, rounded.
    """

    student_id: str
    active_courses: int
    completed_courses: int
    dropped_courses: int
    total_enrollments: int
    total_credits: float
    average_completion: int
