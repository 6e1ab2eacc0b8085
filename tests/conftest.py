from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from application.sync_engine import SyncEngine
from core.task import Task
from infrastructure.local_cache import LocalTaskCache
from infrastructure.remote import RemoteRejectedError, RemoteUnavailableError, UploadedDocument


class MemoryStorage:
    def __init__(self):
        self.data = {}
        self.fail = False

    def get(self, key):
        if self.fail:
            raise OSError("disk unavailable")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail:
            raise OSError("disk unavailable")
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)


class FakeRemote:
    def __init__(self):
        self.records = {}
        self.calls = []
        self.fail_titles = set()
        self.fail_ops = set()
        self._counter = 0

    def _check(self, op):
        if op in self.fail_ops:
            raise RemoteUnavailableError(f"{op} unavailable")

    def query_by_owner(self, user_id):
        self.calls.append(("query", user_id))
        self._check("query")
        owned = [
            Task.from_dict(fields, task_id=rid)
            for rid, fields in self.records.items()
            if fields.get("userId") == user_id
        ]
        return sorted(owned, key=lambda t: t.created_at, reverse=True)

    def create(self, fields):
        self.calls.append(("create", dict(fields)))
        self._check("create")
        if fields.get("title") in self.fail_titles:
            raise RemoteRejectedError("rejected", status_code=400)
        self._counter += 1
        rid = f"r{self._counter}"
        self.records[rid] = dict(fields)
        return rid

    def update(self, task_id, fields):
        self.calls.append(("update", task_id, dict(fields)))
        self._check("update")
        if task_id not in self.records:
            raise RemoteRejectedError("missing", status_code=404)
        if fields.get("title") in self.fail_titles:
            raise RemoteRejectedError("rejected", status_code=400)
        self.records[task_id].update(fields)

    def delete(self, task_id):
        self.calls.append(("delete", task_id))
        self._check("delete")
        self.records.pop(task_id, None)


class FakeDocuments:
    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, file_uri, key):
        if self.fail_upload:
            raise RuntimeError("upload failed")
        self.uploads.append((file_uri, key))
        return UploadedDocument(url=f"https://cdn.example/{key}", id=key)

    def delete(self, document_id):
        if self.fail_delete:
            raise RuntimeError("delete failed")
        self.deleted.append(document_id)


class FakeConnectivity:
    def __init__(self, online=True):
        self.online = online

    def is_online(self):
        return self.online


class FakeAuth:
    def __init__(self, user_id="u1"):
        self.user_id = user_id

    def current_user_id(self):
        return self.user_id


class EngineEnv:
    def __init__(self):
        self.storage = MemoryStorage()
        self.cache = LocalTaskCache(self.storage)
        self.remote = FakeRemote()
        self.documents = FakeDocuments()
        self.connectivity = FakeConnectivity(online=True)
        self.auth = FakeAuth("u1")
        self.engine = SyncEngine(self.cache, self.remote, self.documents, self.connectivity, self.auth)

    def go_offline(self):
        self.connectivity.online = False

    def go_online(self):
        self.connectivity.online = True


@pytest.fixture
def env():
    return EngineEnv()
