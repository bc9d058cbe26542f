"""Task store error hierarchy.

Every error carries a `user_message`: one sentence safe to show at the
presentation boundary. The exception text itself may hold backend detail
and is only meant for logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


class TaskStoreError(Exception):
    """Base class for store failures"""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(TaskStoreError):
    user_message = "That task no longer exists."

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class ValidationFailed(TaskStoreError):
    user_message = "Task title is required."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        if user_message:
            self.user_message = user_message


class StorageUnavailable(TaskStoreError):
    user_message = "Tasks could not be loaded or saved right now. Please try again."


@dataclass
class RecordFailure:
    """One failed record of a batch write"""

    message: str = ""
    field_errors: List[str] = field(default_factory=list)


class PartialBatchFailure(TaskStoreError):
    """Some (or all) records of a batch write were rejected by the backend.

    Args:
        operation: "create", "update" or "delete"
        failures: per-record detail as reported by the service
    """

    user_message = "The task could not be saved."

    def __init__(self, operation: str, failures: List[RecordFailure]) -> None:
        super().__init__(f"Failed to {operation} {len(failures)} record(s)")
        self.operation = operation
        self.failures = failures
