"""Offline-first task service.

The engine is the only entry point for task CRUD. It asks the connectivity
oracle before every operation, runs against the remote store when reachable,
and always rewrites the per-user cache. Writes that the remote store did not
confirm are kept in the cache with ``pending_sync`` set and replayed by
``sync_pending_changes``.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from core.stats import TaskStats
from core.task import Task, document_key, now_iso, wire_updates
from core.task_id import LocalId, RemoteId, TaskId, new_local_id, parse_task_id
from application.ports import AuthProvider, ConnectivityOracle, DocumentStore, RemoteTaskStore, TaskCache

logger = logging.getLogger("todo_sync.engine")


class SyncError(RuntimeError):
    pass


class OfflineError(SyncError):
    """Raised by explicit sync actions when the backend is unreachable."""


class SyncFailedError(SyncError):
    def __init__(self, report: "SyncReport") -> None:
        self.report = report
        failed = ", ".join(sorted(report.failed)) or "?"
        super().__init__(f"Sync failed for {len(report.failed)} task(s): {failed}")


@dataclass
class SyncReport:
    synced: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    remapped: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synced": list(self.synced),
            "failed": dict(self.failed),
            "remapped": dict(self.remapped),
        }


def _index_of(tasks: List[Task], task_id: TaskId) -> Optional[int]:
    for idx, task in enumerate(tasks):
        if task.id == task_id:
            return idx
    return None


def _merge_pending(remote_tasks: List[Task], cached: List[Task]) -> List[Task]:
    """Overlay unreplayed local work on a fresh remote listing."""
    pending = {t.id: t for t in cached if t.pending_sync}
    if not pending:
        return list(remote_tasks)
    placeholders = [t for t in cached if t.pending_sync and isinstance(t.id, LocalId)]
    merged = placeholders + [pending.get(t.id, t) for t in remote_tasks]
    return sorted(merged, key=lambda t: t.created_at, reverse=True)


class SyncEngine:
    def __init__(
        self,
        cache: TaskCache,
        remote: RemoteTaskStore,
        documents: DocumentStore,
        connectivity: ConnectivityOracle,
        auth: AuthProvider,
    ) -> None:
        self.cache = cache
        self.remote = remote
        self.documents = documents
        self.connectivity = connectivity
        self.auth = auth

    # ------------------------------------------------------------------
    # Connectivity / identity
    # ------------------------------------------------------------------

    def is_online(self) -> bool:
        try:
            return bool(self.connectivity.is_online())
        except Exception as exc:
            logger.debug("Connectivity check failed, assuming offline: %s", exc)
            return False

    def _current_user(self) -> Optional[str]:
        try:
            return self.auth.current_user_id()
        except Exception as exc:
            logger.warning("Auth provider unavailable: %s", exc)
            return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_tasks(self, user_id: Optional[str]) -> List[Task]:
        """Remote listing when online (cached for later), cached listing otherwise."""
        if not user_id or not self.is_online():
            return self.cache.load(user_id)
        try:
            remote_tasks = self.remote.query_by_owner(user_id)
        except Exception as exc:
            logger.warning("Remote task query failed, serving cached tasks: %s", exc)
            return self.cache.load(user_id)
        tasks = _merge_pending(remote_tasks, self.cache.load(user_id))
        self.cache.save(user_id, tasks)
        return tasks

    def get_task_by_id(self, task_id: Any) -> Optional[Task]:
        tid = parse_task_id(task_id)
        for task in self.cache.load(self._current_user()):
            if task.id == tid:
                return task
        return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_task(
        self,
        user_id: str,
        title: str,
        document_uri: Optional[str] = None,
        description: str = "",
    ) -> Task:
        if not user_id:
            raise ValueError("Cannot add a task without an authenticated user")
        cached = self.cache.load(user_id)
        task = Task(
            id=new_local_id(t.id for t in cached),
            title=title,
            user_id=user_id,
            description=description,
            completed=False,
            created_at=now_iso(),
            pending_sync=True,
            pending_document_uri=document_uri or None,
        )
        if self.is_online():
            try:
                task = self._push(task)
            except Exception as exc:
                logger.warning("Remote create failed, keeping %s as local placeholder: %s", task.id, exc)
        cached.insert(0, task)
        self.cache.save(user_id, cached)
        return task

    def update_task(
        self,
        task_id: Any,
        updates: Mapping[str, Any],
        document_uri: Optional[str] = None,
    ) -> List[Task]:
        tid = parse_task_id(task_id)
        user_id = self._current_user()
        cached = self.cache.load(user_id)
        idx = _index_of(cached, tid)
        if idx is None:
            logger.warning("Update skipped, task %s is not cached", tid)
            return cached
        previous = cached[idx]
        task = previous.apply_updates(updates)
        doc_uri = document_uri or previous.pending_document_uri
        confirmed = False
        if isinstance(tid, RemoteId) and self.is_online():
            # a record that was already pending has unpushed fields beyond this update
            fields = task.remote_fields() if previous.pending_sync else wire_updates(updates)
            if doc_uri:
                uploaded = self._upload(task, doc_uri)
                if uploaded is not None:
                    task = replace(task, document_url=uploaded.url, document_id=uploaded.id)
                    fields.update(documentUrl=uploaded.url, documentId=uploaded.id)
                doc_uri = None
            try:
                if fields:
                    self.remote.update(str(tid), fields)
                confirmed = True
            except Exception as exc:
                logger.warning("Remote update failed for %s, marking pending: %s", tid, exc)
        cached[idx] = replace(
            task,
            pending_sync=not confirmed,
            pending_document_uri=None if confirmed else (doc_uri or None),
        )
        self.cache.save(user_id, cached)
        return cached

    def delete_task(self, task_id: Any) -> List[Task]:
        tid = parse_task_id(task_id)
        user_id = self._current_user()
        cached = self.cache.load(user_id)
        idx = _index_of(cached, tid)
        target = cached[idx] if idx is not None else None
        if isinstance(tid, RemoteId) and self.is_online():
            try:
                self.remote.delete(str(tid))
            except Exception as exc:
                logger.warning("Remote delete failed for %s: %s", tid, exc)
            else:
                if target is not None and target.document_id:
                    try:
                        self.documents.delete(target.document_id)
                    except Exception as exc:
                        logger.warning("Document delete failed for %s: %s", target.document_id, exc)
        remaining = [t for t in cached if t.id != tid]
        self.cache.save(user_id, remaining)
        return remaining

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    def sync_pending_changes(self, user_id: Optional[str]) -> SyncReport:
        """Replay every pending record; failures are logged per record and left pending."""
        report = SyncReport()
        if not user_id or not self.is_online():
            return report
        tasks = self.cache.load(user_id)
        for original in [t for t in tasks if t.pending_sync]:
            key = str(original.id)
            try:
                synced = self._push(original)
            except Exception as exc:
                logger.warning("Sync failed for %s: %s", key, exc)
                report.failed[key] = str(exc)
                continue
            idx = _index_of(tasks, original.id)
            if idx is None:
                continue
            tasks[idx] = synced
            self.cache.save(user_id, tasks)
            if synced.id != original.id:
                report.remapped[key] = str(synced.id)
            if synced.pending_sync:
                report.failed[str(synced.id)] = "document link not confirmed"
            else:
                report.synced.append(str(synced.id))
        if report.synced or report.failed:
            logger.info(
                "Sync finished: %d synced, %d failed, %d remapped",
                len(report.synced),
                len(report.failed),
                len(report.remapped),
            )
        return report

    def sync_now(self, user_id: Optional[str]) -> SyncReport:
        """Explicit user-triggered sync; unlike background sync it surfaces failures."""
        if not self.is_online():
            raise OfflineError("You are offline; connect to the internet to sync")
        report = self.sync_pending_changes(user_id)
        if not report.ok:
            raise SyncFailedError(report)
        self.cache.mark_synced(user_id)
        return report

    def _push(self, task: Task) -> Task:
        """Write one record remotely; returns the confirmed copy or raises."""
        doc_uri = task.pending_document_uri
        if isinstance(task.id, LocalId):
            remote_id = self.remote.create(task.remote_fields())
            synced = replace(task, id=RemoteId(str(remote_id)))
        else:
            self.remote.update(str(task.id), task.remote_fields())
            synced = task
        synced = replace(synced, pending_sync=False, pending_document_uri=None)
        if doc_uri:
            synced = self._attach(synced, doc_uri)
        return synced

    def _attach(self, task: Task, doc_uri: str) -> Task:
        uploaded = self._upload(task, doc_uri)
        if uploaded is None:
            return task
        task = replace(task, document_url=uploaded.url, document_id=uploaded.id)
        try:
            self.remote.update(str(task.id), {"documentUrl": uploaded.url, "documentId": uploaded.id})
        except Exception as exc:
            logger.warning("Linking document to %s failed, marking pending: %s", task.id, exc)
            return replace(task, pending_sync=True)
        return task

    def _upload(self, task: Task, doc_uri: str):
        key = document_key(task.user_id, task.id)
        try:
            return self.documents.upload(doc_uri, key)
        except Exception as exc:
            logger.warning("Document upload failed for %s (%s): %s", task.id, doc_uri, exc)
            return None

    # ------------------------------------------------------------------
    # Settings / status helpers
    # ------------------------------------------------------------------

    def pending_count(self, user_id: Optional[str]) -> int:
        return sum(1 for t in self.cache.load(user_id) if t.pending_sync)

    def stats(self, user_id: Optional[str]) -> TaskStats:
        return TaskStats.from_tasks(self.list_tasks(user_id))

    def last_sync(self, user_id: Optional[str]) -> Optional[str]:
        return self.cache.last_sync(user_id)

    def clear_local_data(self, user_id: Optional[str]) -> None:
        self.cache.clear(user_id)


__all__ = ["SyncEngine", "SyncReport", "SyncError", "OfflineError", "SyncFailedError"]
