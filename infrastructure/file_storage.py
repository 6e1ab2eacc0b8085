import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from application.ports import KeyValueStorage


class FileKeyValueStorage(KeyValueStorage):
    """One file per key under ``root``; writes are atomic via ``os.replace``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not key:
            raise ValueError("Storage key must not be empty")
        # SEC: percent-encode so keys like "@todos:<uid>" never escape root
        return self.root / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
