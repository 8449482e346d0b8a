"""Pydantic models for the queue's JSON output and this service's responses.

Beginner terms used in this file:
- Job record: one unit of work as reported by the external queue daemon.
- Tagged variant: a status written either as a bare string ("Running") or as
  a single-key object carrying a payload ({"Done": {"Failed": 1}}).
- Displayable: the slimmed-down shape this service returns to clients.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# The daemon writes timestamps as RFC 3339 text with nanosecond precision.
# They are passed through unchanged, so they are kept as text.
Timestamp = str


class FailedResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Exit code of the finished process.
    Failed: int


class FailedToSpawnResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    FailedToSpawn: str


TaskResult = Union[
    Literal["Success", "Killed", "Errored", "DependencyFailed"],
    FailedResult,
    FailedToSpawnResult,
]


class StashedPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    # When set, the daemon re-queues the task at this time.
    enqueue_at: Timestamp | None = None


class StashedStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    Stashed: StashedPayload


class DoneStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    Done: TaskResult


TaskStatus = Union[
    Literal["Queued", "Running", "Paused", "Locked"],
    StashedStatus,
    DoneStatus,
]


class ExternalTask(BaseModel):
    """Job record fields this service reads; everything else is ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int
    command: str
    status: TaskStatus
    created_at: Timestamp
    start: Timestamp | None = None
    end: Timestamp | None = None


class QueueGroup(BaseModel):
    model_config = ConfigDict(extra="allow")

    parallel_tasks: int
    status: str


class QueueStatus(BaseModel):
    """Output of `status --json`."""

    model_config = ConfigDict(extra="ignore")

    groups: dict[str, QueueGroup] = Field(default_factory=dict)
    # Keyed by the stringified task id.
    tasks: dict[str, ExternalTask] = Field(default_factory=dict)


class TaskLog(BaseModel):
    """One entry of `log <id> --json`."""

    model_config = ConfigDict(extra="ignore")

    output: str
    task: ExternalTask


class TaskDisplayable(BaseModel):
    """Public shape of one task. `output` is only filled for single-task lookups."""

    id: int
    command: str
    status: TaskStatus
    created_at: Timestamp
    start: Timestamp | None = None
    end: Timestamp | None = None
    output: str | None = None


class StatusDisplayable(BaseModel):
    """Public shape of the queue listing, ordered by ascending id."""

    tasks: list[TaskDisplayable] = Field(default_factory=list)


class EnqueueRequest(BaseModel):
    """Validated fields of POST /enqueue."""

    repo: str
    commit: str = "HEAD"
    optimizer: str | None = None
    code_id: int | None = None
    chain_id: str | None = None
    lcd: str | None = None
