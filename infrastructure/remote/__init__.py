from .http_client import HttpClient, RemoteRejectedError, RemoteStoreError, RemoteUnavailableError
from .rate_limiter import RateLimiter
from .task_store import RestTaskStore
from .document_store import DocumentStoreError, HttpDocumentStore, UploadedDocument

__all__ = [
    "HttpClient",
    "RemoteStoreError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
    "RateLimiter",
    "RestTaskStore",
    "DocumentStoreError",
    "HttpDocumentStore",
    "UploadedDocument",
]
