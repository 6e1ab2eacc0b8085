from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable

from .task import Task


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_rate: int = 0
    unsynced: int = 0

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "TaskStats":
        items = list(tasks)
        total = len(items)
        completed = sum(1 for t in items if t.completed)
        rate = int(completed * 100 / total + 0.5) if total else 0
        return cls(
            total=total,
            completed=completed,
            pending=total - completed,
            completion_rate=rate,
            unsynced=sum(1 for t in items if t.pending_sync),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
