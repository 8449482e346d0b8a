"""Client for the external task-queue daemon, reached through its CLI.

Beginner terms used in this file:
- Argument vector: the list of program arguments passed to the OS directly,
  without a shell, so user input is never interpreted as shell syntax.
- Protocol: a structural interface; any object with matching methods fits,
  which lets tests swap in a fake client.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ExternalInvocationError, TaskNotFoundError
from .models import EnqueueRequest, QueueStatus, TaskLog
from .validators import validate_enqueue

logger = logging.getLogger(__name__)

_task_logs_adapter = TypeAdapter(dict[str, TaskLog])


class QueueClient(Protocol):
    """Interface for the three queue operations the API exposes."""

    def enqueue(self, job: EnqueueRequest) -> str: ...

    def list_status(self) -> QueueStatus: ...

    def get_log(self, task_id: int) -> TaskLog: ...


class PueueCliClient:
    """Runs the queue program once per call and parses what it prints.

    Each call blocks until the program exits. There is no retry; with
    `timeout_s=None` (the default) a hung program blocks the caller indefinitely.
    """

    def __init__(
        self,
        *,
        program: str = "pueue",
        job_name: str = "secret-contract-verifier",
        timeout_s: float | None = None,
    ) -> None:
        self.program = program
        self.job_name = job_name
        self.timeout_s = timeout_s

    def enqueue(self, job: EnqueueRequest) -> str:
        """Add a verification job and return the program's stdout unchanged."""
        return self._run(build_enqueue_args(self.job_name, job), command="add")

    def list_status(self) -> QueueStatus:
        stdout = self._run(["status", "--json"], command="status")
        try:
            return QueueStatus.model_validate_json(stdout)
        except PydanticValidationError as exc:
            logger.error("queue_invocation event=parse_failed command=status reason=%s", exc)
            raise ExternalInvocationError("Unexpected status output from task queue") from exc

    def get_log(self, task_id: int) -> TaskLog:
        stdout = self._run(["log", str(task_id), "--json"], command="log")
        try:
            logs = _task_logs_adapter.validate_json(stdout)
        except PydanticValidationError as exc:
            logger.error(
                "queue_invocation event=parse_failed command=log task_id=%s reason=%s",
                task_id,
                exc,
            )
            raise ExternalInvocationError("Unexpected log output from task queue") from exc
        entry = logs.get(str(task_id))
        if entry is None:
            raise TaskNotFoundError(task_id)
        return entry

    def _run(self, args: list[str], *, command: str) -> str:
        cmd = [self.program, *args]
        try:
            completed = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                check=False,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error(
                "queue_invocation event=timeout command=%s timeout_s=%s", command, self.timeout_s
            )
            raise ExternalInvocationError(f"Task queue '{command}' timed out") from exc
        except OSError as exc:
            logger.error(
                "queue_invocation event=spawn_failed command=%s program=%s reason=%s",
                command,
                self.program,
                exc,
            )
            raise ExternalInvocationError(f"Could not run task queue '{command}'") from exc

        stderr = completed.stderr.decode("utf-8", errors="replace")
        if stderr.strip():
            logger.warning("queue_invocation event=stderr command=%s stderr=%s", command, stderr)
        if completed.returncode != 0:
            logger.error(
                "queue_invocation event=failed command=%s returncode=%s stderr=%s",
                command,
                completed.returncode,
                stderr,
            )
            raise ExternalInvocationError(
                f"Task queue '{command}' exited with status {completed.returncode}",
                stderr=stderr,
            )
        try:
            stdout = completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error("queue_invocation event=decode_failed command=%s", command)
            raise ExternalInvocationError(
                f"Task queue '{command}' printed non UTF-8 output", stderr=stderr
            ) from exc
        logger.info(
            "queue_invocation event=completed command=%s returncode=%s",
            command,
            completed.returncode,
        )
        return stdout


def build_enqueue_args(job_name: str, job: EnqueueRequest) -> list[str]:
    """Build the `add` argument vector; raises ValidationError before anything runs."""
    validate_enqueue(job)
    args = [
        "add",
        "--print-task-id",
        "--",
        job_name,
        "--repo",
        job.repo,
        "--commit",
        job.commit,
    ]
    if job.optimizer is not None:
        args.extend(["--optimizer", job.optimizer])
    if job.code_id is not None:
        args.extend(["--code-id", str(job.code_id)])
    if job.chain_id is not None:
        args.extend(["--chain-id", job.chain_id])
    if job.lcd is not None:
        args.extend(["--lcd", job.lcd])
    return args
