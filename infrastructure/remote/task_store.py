from typing import Any, Dict, List

from application.ports import RemoteTaskStore
from core.task import Task

from .http_client import HttpClient, RemoteStoreError


class RestTaskStore(RemoteTaskStore):
    """Task collection behind a JSON REST API (``/tasks``)."""

    def __init__(self, client: HttpClient, collection: str = "tasks") -> None:
        self.client = client
        self.collection = collection.strip("/")

    def query_by_owner(self, user_id: str) -> List[Task]:
        response = self.client.request(
            "GET",
            self.collection,
            params={"userId": user_id, "orderBy": "createdAt", "direction": "desc"},
        )
        body = self.client.json_body(response)
        items = body.get("items", body.get("tasks")) if isinstance(body, dict) else body
        if not isinstance(items, list):
            raise RemoteStoreError(f"Unexpected task listing payload: {type(body).__name__}")
        tasks = [self._to_task(item) for item in items]
        # the backend orders already; ISO-8601 UTC strings sort chronologically
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        return tasks

    def create(self, fields: Dict[str, Any]) -> str:
        response = self.client.request("POST", self.collection, json=fields)
        body = self.client.json_body(response)
        remote_id = (body.get("id") or body.get("name")) if isinstance(body, dict) else None
        if not remote_id:
            raise RemoteStoreError("Backend did not return an id for the created task")
        return str(remote_id)

    def update(self, task_id: str, fields: Dict[str, Any]) -> None:
        self.client.request("PATCH", f"{self.collection}/{task_id}", json=fields)

    def delete(self, task_id: str) -> None:
        # already gone counts as deleted
        self.client.request("DELETE", f"{self.collection}/{task_id}", accept_statuses=(404,))

    @staticmethod
    def _to_task(item: Dict[str, Any]) -> Task:
        task = Task.from_dict(item)
        # remote records never carry local bookkeeping
        task.pending_sync = False
        task.pending_document_uri = None
        return task
