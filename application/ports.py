from typing import Callable, List, Optional, Protocol

from core.task import Task


class KeyValueStorage(Protocol):
    """Durable string key/value storage on the device."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class TaskCache(Protocol):
    def load(self, user_id: Optional[str]) -> List[Task]:
        ...

    def save(self, user_id: Optional[str], tasks: List[Task]) -> None:
        ...

    def last_sync(self, user_id: Optional[str]) -> Optional[str]:
        ...

    def mark_synced(self, user_id: Optional[str]) -> None:
        ...

    def clear(self, user_id: Optional[str]) -> None:
        ...


class RemoteTaskStore(Protocol):
    def query_by_owner(self, user_id: str) -> List[Task]:
        ...

    def create(self, fields: dict) -> str:
        ...

    def update(self, task_id: str, fields: dict) -> None:
        ...

    def delete(self, task_id: str) -> None:
        ...


class UploadedDocumentLike(Protocol):
    url: str
    id: str


class DocumentStore(Protocol):
    def upload(self, file_uri: str, key: str) -> UploadedDocumentLike:
        ...

    def delete(self, document_id: str) -> None:
        ...


class ConnectivityOracle(Protocol):
    def is_online(self) -> bool:
        ...


class NetworkStatusProvider(Protocol):
    def is_online(self) -> bool:
        ...

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        ...


class AuthProvider(Protocol):
    def current_user_id(self) -> Optional[str]:
        ...
