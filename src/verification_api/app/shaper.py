from __future__ import annotations

from collections.abc import Mapping

from .models import ExternalTask, StatusDisplayable, TaskDisplayable, TaskLog


def project_status(task: ExternalTask, output: str | None = None) -> TaskDisplayable:
    """Copy the public fields of a job record; `output` only for single-task lookups."""
    return TaskDisplayable(
        id=task.id,
        command=task.command,
        status=task.status,
        created_at=task.created_at,
        start=task.start,
        end=task.end,
        output=output,
    )


def project_log(entry: TaskLog) -> TaskDisplayable:
    return project_status(entry.task, output=entry.output)


def build_listing(tasks: Mapping[str, ExternalTask]) -> StatusDisplayable:
    """Project every job record and order them by numeric id.

    Mapping keys are ignored; the order of the source mapping is discarded.
    """
    projected = [project_status(task) for task in tasks.values()]
    projected.sort(key=lambda item: item.id)
    return StatusDisplayable(tasks=projected)
