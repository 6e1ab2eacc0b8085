from .task import Task, document_key, normalize_timestamp, now_iso, wire_updates
from .task_id import LOCAL_PREFIX, LocalId, RemoteId, TaskId, new_local_id, parse_task_id
from .stats import TaskStats
from .validation import TaskValidationError, validate_title

__all__ = [
    "Task",
    "TaskId",
    "LocalId",
    "RemoteId",
    "LOCAL_PREFIX",
    "parse_task_id",
    "new_local_id",
    "document_key",
    "normalize_timestamp",
    "now_iso",
    "wire_updates",
    "TaskStats",
    "TaskValidationError",
    "validate_title",
]
