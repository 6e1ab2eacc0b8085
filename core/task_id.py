import time
from dataclasses import dataclass
from typing import Iterable, Union

LOCAL_PREFIX = "local_"


@dataclass(frozen=True)
class LocalId:
    """Client-issued placeholder, never confirmed by the remote store."""

    temp_id: str

    def __str__(self) -> str:
        return f"{LOCAL_PREFIX}{self.temp_id}"


@dataclass(frozen=True)
class RemoteId:
    value: str

    def __str__(self) -> str:
        return self.value


TaskId = Union[LocalId, RemoteId]


def parse_task_id(raw: Union[str, LocalId, RemoteId]) -> TaskId:
    if isinstance(raw, (LocalId, RemoteId)):
        return raw
    value = (raw or "").strip()
    if not value:
        raise ValueError("Task id must not be empty")
    if value.startswith(LOCAL_PREFIX):
        temp = value[len(LOCAL_PREFIX):]
        if not temp:
            raise ValueError(f"Invalid local task id: {raw!r}")
        return LocalId(temp)
    return RemoteId(value)


def new_local_id(existing: Iterable[TaskId] = ()) -> LocalId:
    taken = {str(tid) for tid in existing}
    stamp = int(time.time() * 1000)
    while f"{LOCAL_PREFIX}{stamp}" in taken:
        stamp += 1
    return LocalId(str(stamp))


__all__ = ["LOCAL_PREFIX", "LocalId", "RemoteId", "TaskId", "parse_task_id", "new_local_id"]
