"""Exceptions raised by validators, the queue client, and the response shaper.

The HTTP layer maps each class to a status code:
- ValidationError: 400, message returned to the caller as-is.
- TaskNotFoundError: 404.
- ExternalInvocationError: 502, details (including stderr) only go to the log.
"""


class GatewayError(Exception):
    """Base exception for all verification gateway errors."""

    pass


class ValidationError(GatewayError):
    """Raised when a client-supplied field breaks one of the input rules."""

    pass


class TaskNotFoundError(GatewayError):
    """Raised when the queue has no log entry for the requested task id."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class ExternalInvocationError(GatewayError):
    """Raised when the queue program cannot be run or its output cannot be read."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
