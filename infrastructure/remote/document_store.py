import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from application.ports import DocumentStore

from .http_client import HttpClient, RemoteStoreError


class DocumentStoreError(RuntimeError):
    pass


@dataclass(frozen=True)
class UploadedDocument:
    url: str
    id: str


def resolve_local_path(file_uri: str) -> Path:
    """Accept plain paths and ``file://`` URIs."""
    if file_uri.startswith("file://"):
        return Path(unquote(urlparse(file_uri).path))
    return Path(file_uri).expanduser()


class HttpDocumentStore(DocumentStore):
    """Unsigned-preset blob upload endpoint (multipart ``file`` + ``public_id``)."""

    def __init__(
        self,
        client: HttpClient,
        upload_url: str,
        upload_preset: str = "",
        destroy_url: Optional[str] = None,
    ) -> None:
        self.client = client
        self.upload_url = upload_url
        self.upload_preset = upload_preset
        self.destroy_url = destroy_url

    def upload(self, file_uri: str, key: str) -> UploadedDocument:
        if not self.upload_url:
            raise DocumentStoreError("Document upload URL is not configured")
        path = resolve_local_path(file_uri)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise DocumentStoreError(f"Cannot read document {file_uri}: {exc}") from exc
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        form = {"public_id": key}
        if self.upload_preset:
            form["upload_preset"] = self.upload_preset
        try:
            response = self.client.request(
                "POST",
                self.upload_url,
                data=form,
                files={"file": (path.name, content, content_type)},
            )
            body = self.client.json_body(response)
        except RemoteStoreError as exc:
            raise DocumentStoreError(f"Upload failed: {exc}") from exc
        url = (body.get("secure_url") or body.get("url")) if isinstance(body, dict) else None
        public_id = (body.get("public_id") or body.get("id")) if isinstance(body, dict) else None
        if not url or not public_id:
            raise DocumentStoreError("Upload response lacks url/public_id")
        return UploadedDocument(url=str(url), id=str(public_id))

    def delete(self, document_id: str) -> None:
        if not self.destroy_url:
            raise DocumentStoreError("Document delete URL is not configured")
        try:
            self.client.request("POST", self.destroy_url, data={"public_id": document_id}, accept_statuses=(404,))
        except RemoteStoreError as exc:
            raise DocumentStoreError(f"Delete failed for {document_id}: {exc}") from exc
