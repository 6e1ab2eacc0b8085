import json
from pathlib import Path
from typing import Any, Dict, Optional

from core.task import now_iso
from core.task_id import LocalId, RemoteId


def _to_jsonable(value: Any) -> Any:
    # Task, TaskStats and SyncReport all expose to_dict()
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (LocalId, RemoteId, Path)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def structured_response(
    command: str,
    *,
    status: str = "OK",
    message: str = "",
    payload: Optional[Dict[str, Any]] = None,
    exit_code: int = 0,
) -> int:
    """Print one JSON document per command; domain objects are serialized via ``to_dict``."""
    body: Dict[str, Any] = {
        "command": command,
        "status": status,
        "message": message,
        "timestamp": now_iso(),
        "payload": payload or {},
    }
    print(json.dumps(body, ensure_ascii=False, indent=2, default=_to_jsonable))
    return exit_code


def structured_error(command: str, message: str, *, payload: Optional[Dict[str, Any]] = None, status: str = "ERROR") -> int:
    return structured_response(command, status=status, message=message, payload=payload, exit_code=1)


__all__ = ["structured_response", "structured_error"]
