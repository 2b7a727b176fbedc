"""CLI entry point for coursegate.

Administers a course database directly and serves the REST API:
- serve: run the API with uvicorn
- init-db / course-add / prereqs: set up the catalog
- enroll / drop / complete / check / stats: operate on enrollments
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
import uvicorn

from coursegate.api.app import create_app
from coursegate.config import ConfigError, Settings, load_settings
from coursegate.engine import EnrollmentEngine
from coursegate.exceptions import CoursegateError
from coursegate.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable


def _load(config_path: Path | None, db_path: str | None) -> Settings:
    settings = load_settings(config_path)
    if db_path is not None:
        settings.db_path = db_path
    return settings


def _fail(prefix: str, error: Exception) -> None:
    click.echo(f"{prefix}: {error}", err=True)
    sys.exit(1)


class _Context:
    """Settings shared by every subcommand."""

    def __init__(self, config_path: Path | None, db_path: str | None, verbose: bool) -> None:
        self.config_path = config_path
        self.db_path = db_path
        self.verbose = verbose

    def engine(self) -> EnrollmentEngine:
        settings = _load(self.config_path, self.db_path)
        level = "DEBUG" if self.verbose else settings.log_level
        setup_logging(log_dir=settings.log_dir, level=level, console=self.verbose)
        return EnrollmentEngine.from_settings(settings)


pass_context = click.make_pass_decorator(_Context)


def _run(ctx: _Context, action: Callable[[EnrollmentEngine], None]) -> None:
    """Build an engine, run ``action`` against it and report failures."""
    try:
        engine = ctx.engine()
    except ConfigError as e:
        _fail("Configuration error", e)
        return
    try:
        action(engine)
    except CoursegateError as e:
        _fail(f"Error [{e.code}]", e)
    finally:
        engine.close()


@click.group()
@click.version_option(package_name="coursegate")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a YAML settings file",
)
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides settings)")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, db_path: str | None, verbose: bool) -> None:
    """coursegate - capacity-safe course enrollment."""
    ctx.obj = _Context(config_path, db_path, verbose)


@main.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to bind")
@pass_context
def serve(ctx: _Context, host: str, port: int) -> None:
    """Serve the REST API."""
    try:
        settings = _load(ctx.config_path, ctx.db_path)
    except ConfigError as e:
        _fail("Configuration error", e)
        return
    setup_logging(log_dir=settings.log_dir, level=settings.log_level, console=True)
    uvicorn.run(create_app(settings), host=host, port=port)


@main.command("init-db")
@pass_context
def init_db(ctx: _Context) -> None:
    """Create the database tables."""

    def action(engine: EnrollmentEngine) -> None:
        click.echo(f"Database ready: {engine.database.db_path}")

    _run(ctx, action)


@main.command("course-add")
@click.argument("title")
@click.option("--capacity", required=True, type=int, help="Number of seats")
@click.option("--owner", "owner_id", required=True, help="Owning instructor ID")
@click.option("--id", "course_id", default=None, help="Course ID (generated if omitted)")
@click.option("--closed", is_flag=True, help="Create the course closed for enrollment")
@pass_context
def course_add(
    ctx: _Context,
    title: str,
    capacity: int,
    owner_id: str,
    course_id: str | None,
    closed: bool,
) -> None:
    """Add a course to the catalog."""

    def action(engine: EnrollmentEngine) -> None:
        course = engine.catalog.create_course(
            title=title,
            capacity=capacity,
            owner_id=owner_id,
            is_open_for_enrollment=not closed,
            course_id=course_id,
        )
        click.echo(f"Created course {course.id}: {course.title} ({course.capacity} seats)")

    _run(ctx, action)


@main.command("course-delete")
@click.argument("course_id")
@pass_context
def course_delete(ctx: _Context, course_id: str) -> None:
    """Delete COURSE_ID. Fails while students hold seats in it."""

    def action(engine: EnrollmentEngine) -> None:
        engine.catalog.delete_course(course_id)
        click.echo(f"Deleted course {course_id}")

    _run(ctx, action)


@main.command()
@click.argument("course_id")
@click.argument("required_ids", nargs=-1)
@pass_context
def prereqs(ctx: _Context, course_id: str, required_ids: tuple[str, ...]) -> None:
    """Replace the prerequisites of COURSE_ID."""

    def action(engine: EnrollmentEngine) -> None:
        committed = engine.prerequisites.set_prerequisites(course_id, list(required_ids))
        listed = ", ".join(sorted(committed)) or "none"
        click.echo(f"Prerequisites of {course_id}: {listed}")

    _run(ctx, action)


@main.command()
@click.argument("student_id")
@click.argument("course_id")
@pass_context
def enroll(ctx: _Context, student_id: str, course_id: str) -> None:
    """Enroll STUDENT_ID in COURSE_ID."""

    def action(engine: EnrollmentEngine) -> None:
        enrollment = engine.ledger.enroll(student_id, course_id)
        click.echo(f"Enrolled {student_id} in {course_id} (enrollment {enrollment.id})")

    _run(ctx, action)


@main.command()
@click.argument("student_id")
@click.argument("course_id")
@pass_context
def drop(ctx: _Context, student_id: str, course_id: str) -> None:
    """Drop STUDENT_ID from COURSE_ID."""

    def action(engine: EnrollmentEngine) -> None:
        engine.ledger.drop(student_id, course_id)
        click.echo(f"Dropped {student_id} from {course_id}")

    _run(ctx, action)


@main.command()
@click.argument("course_id")
@click.option("--student", "student_id", default=None, help="Complete only this student")
@pass_context
def complete(ctx: _Context, course_id: str, student_id: str | None) -> None:
    """Complete enrollments in COURSE_ID, all active ones unless --student is given."""

    def action(engine: EnrollmentEngine) -> None:
        if student_id is not None:
            engine.ledger.complete(student_id, course_id)
            click.echo(f"Completed {student_id} in {course_id}")
        else:
            completed = engine.ledger.transition_to_completed(course_id)
            click.echo(f"Completed {len(completed)} enrollments in {course_id}")

    _run(ctx, action)


@main.command()
@click.argument("student_id")
@click.argument("course_id")
@pass_context
def check(ctx: _Context, student_id: str, course_id: str) -> None:
    """Check whether STUDENT_ID may enroll in COURSE_ID."""

    def action(engine: EnrollmentEngine) -> None:
        decision = engine.evaluator.check_eligibility(student_id, course_id)
        if decision.can_enroll:
            click.echo("Eligible")
            return
        click.echo("Not eligible:")
        for reason in decision.reasons:
            click.echo(f"  - {reason.value}")
        for ref in decision.missing_prerequisites:
            click.echo(f"    missing: {ref.id} ({ref.title})")

    _run(ctx, action)


@main.command()
@click.argument("student_id")
@pass_context
def stats(ctx: _Context, student_id: str) -> None:
    """Show enrollment statistics for STUDENT_ID."""

    def action(engine: EnrollmentEngine) -> None:
        s = engine.statistics.get_statistics(student_id)
        click.echo(f"Student: {s.student_id}")
        click.echo(f"  Active:     {s.active_courses}")
        click.echo(f"  Completed:  {s.completed_courses}")
        click.echo(f"  Dropped:    {s.dropped_courses}")
        click.echo(f"  Credits:    {s.total_credits:g}")
        click.echo(f"  Avg. completion: {s.average_completion}%")

    _run(ctx, action)


if __name__ == "__main__":
    main()
