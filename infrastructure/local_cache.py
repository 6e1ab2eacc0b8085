import json
import logging
from typing import List, Optional

from application.ports import KeyValueStorage, TaskCache
from core.task import Task, now_iso

TASKS_KEY = "@todos"
LAST_SYNC_KEY = "@lastSync"

logger = logging.getLogger("todo_sync.cache")


def tasks_key(user_id: str) -> str:
    return f"{TASKS_KEY}:{user_id}"


def last_sync_key(user_id: str) -> str:
    return f"{LAST_SYNC_KEY}:{user_id}"


class LocalTaskCache(TaskCache):
    """Per-user task list persisted as JSON in a key/value store.

    Storage errors never reach the caller: reads degrade to an empty list and
    writes become no-ops, both logged.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def load(self, user_id: Optional[str]) -> List[Task]:
        if not user_id:
            return []
        try:
            raw = self.storage.get(tasks_key(user_id))
        except Exception as exc:
            logger.warning("Reading cached tasks for %s failed: %s", user_id, exc)
            return []
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Cached tasks for %s are corrupt, ignoring: %s", user_id, exc)
            return []
        if not isinstance(items, list):
            logger.warning("Cached tasks for %s have unexpected shape %s", user_id, type(items).__name__)
            return []
        tasks: List[Task] = []
        for item in items:
            try:
                tasks.append(Task.from_dict(item))
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping unreadable cached task for %s: %s", user_id, exc)
        return tasks

    def save(self, user_id: Optional[str], tasks: List[Task]) -> None:
        if not user_id:
            return
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        try:
            self.storage.set(tasks_key(user_id), payload)
            self.storage.set(last_sync_key(user_id), now_iso())
        except Exception as exc:
            logger.warning("Saving cached tasks for %s failed: %s", user_id, exc)

    def last_sync(self, user_id: Optional[str]) -> Optional[str]:
        if not user_id:
            return None
        try:
            return self.storage.get(last_sync_key(user_id))
        except Exception as exc:
            logger.warning("Reading last sync time for %s failed: %s", user_id, exc)
            return None

    def mark_synced(self, user_id: Optional[str]) -> None:
        if not user_id:
            return
        try:
            self.storage.set(last_sync_key(user_id), now_iso())
        except Exception as exc:
            logger.warning("Recording sync time for %s failed: %s", user_id, exc)

    def clear(self, user_id: Optional[str]) -> None:
        if not user_id:
            return
        try:
            self.storage.remove(tasks_key(user_id))
        except Exception as exc:
            logger.warning("Clearing cached tasks for %s failed: %s", user_id, exc)
