from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .task_id import TaskId, parse_task_id

# attribute name -> cache/wire key
_WIRE_KEYS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "created_at": "createdAt",
    "user_id": "userId",
    "document_url": "documentUrl",
    "document_id": "documentId",
    "pending_sync": "pendingSync",
    "pending_document_uri": "pendingDocumentUri",
}
_ATTR_BY_WIRE: Dict[str, str] = {wire: attr for attr, wire in _WIRE_KEYS.items()}

IMMUTABLE_FIELDS = frozenset({"id", "created_at", "user_id"})
LOCAL_ONLY_FIELDS = frozenset({"pending_sync", "pending_document_uri"})
DOCUMENT_KEY_PREFIX = "todo_docs"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_timestamp(value: Any) -> str:
    """Coerce remote timestamps (ISO string, epoch s/ms, {seconds: ..}) to ISO-8601 UTC."""
    if value is None or value == "":
        return now_iso()
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat()
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            raise ValueError(f"Unsupported timestamp: {value!r}")
        return normalize_timestamp(float(seconds))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000.0 if value > 1e11 else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    return normalize_timestamp(dt)


@dataclass
class Task:
    id: TaskId
    title: str
    user_id: str
    description: str = ""
    completed: bool = False
    created_at: str = ""
    document_url: Optional[str] = None
    document_id: Optional[str] = None
    pending_sync: bool = False
    pending_document_uri: Optional[str] = None

    def __post_init__(self) -> None:
        self.id = parse_task_id(self.id)
        if not self.created_at:
            self.created_at = now_iso()

    @property
    def has_document(self) -> bool:
        return bool(self.document_url or self.document_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": str(self.id)}
        for attr, wire in _WIRE_KEYS.items():
            data[wire] = getattr(self, attr)
        return data

    def remote_fields(self) -> Dict[str, Any]:
        """Fields the remote store persists: everything except the id and local bookkeeping."""
        return {
            wire: getattr(self, attr)
            for attr, wire in _WIRE_KEYS.items()
            if attr not in LOCAL_ONLY_FIELDS
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, task_id: Optional[str] = None) -> "Task":
        raw_id = task_id if task_id is not None else data.get("id")
        if raw_id is None:
            raise ValueError("Task record without id")
        return cls(
            id=parse_task_id(str(raw_id)),
            title=str(data.get("title") or ""),
            user_id=str(data.get("userId") or ""),
            description=str(data.get("description") or ""),
            completed=bool(data.get("completed", False)),
            created_at=normalize_timestamp(data.get("createdAt")),
            document_url=data.get("documentUrl") or None,
            document_id=data.get("documentId") or None,
            pending_sync=bool(data.get("pendingSync", False)),
            pending_document_uri=data.get("pendingDocumentUri") or None,
        )

    def apply_updates(self, updates: Mapping[str, Any]) -> "Task":
        """Return a copy with ``updates`` applied (snake_case or wire keys).

        Immutable fields are ignored; unknown keys raise ``ValueError``.
        """
        changes: Dict[str, Any] = {}
        for key, value in updates.items():
            attr = _ATTR_BY_WIRE.get(key, key)
            if attr in IMMUTABLE_FIELDS:
                continue
            if attr not in _WIRE_KEYS:
                raise ValueError(f"Unknown task field: {key!r}")
            changes[attr] = value
        return replace(self, **changes)


def wire_updates(updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate a partial update to wire keys, dropping immutable and local-only fields."""
    result: Dict[str, Any] = {}
    for key, value in updates.items():
        attr = _ATTR_BY_WIRE.get(key, key)
        if attr in IMMUTABLE_FIELDS or attr in LOCAL_ONLY_FIELDS:
            continue
        if attr not in _WIRE_KEYS:
            raise ValueError(f"Unknown task field: {key!r}")
        result[_WIRE_KEYS[attr]] = value
    return result


def document_key(user_id: str, task_id: TaskId) -> str:
    """Owner-scoped blob key for a task attachment."""
    return f"{DOCUMENT_KEY_PREFIX}/{user_id}/{task_id}"


__all__ = [
    "Task",
    "now_iso",
    "normalize_timestamp",
    "wire_updates",
    "document_key",
    "DOCUMENT_KEY_PREFIX",
    "IMMUTABLE_FIELDS",
    "LOCAL_ONLY_FIELDS",
]
