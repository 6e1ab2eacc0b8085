from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

USER_CONFIG_PATH = Path(os.environ.get("TODO_SYNC_CONFIG") or Path.home() / ".todo_sync_config.yaml")
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "todo_sync"
DEFAULT_PROBE_URL = "https://clients3.google.com/generate_204"
DEFAULT_TIMEOUT = 30.0


def _load_config() -> Dict[str, Any]:
    if not USER_CONFIG_PATH.exists():
        return {}
    try:
        data = yaml.safe_load(USER_CONFIG_PATH.read_text(encoding="utf-8")) or {}
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _save_config(data: Dict[str, Any]) -> None:
    if not data:
        if USER_CONFIG_PATH.exists():
            USER_CONFIG_PATH.unlink()
        return
    USER_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    USER_CONFIG_PATH.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")


def _set_value(key: str, value: Optional[str]) -> None:
    data = _load_config()
    value = (value or "").strip()
    if value:
        data[key] = value
    else:
        data.pop(key, None)
    _save_config(data)


def get_user_token() -> str:
    return str(_load_config().get("token", "") or "")


def set_user_token(value: str) -> None:
    _set_value("token", value)


def get_user_id() -> str:
    return str(_load_config().get("user_id", "") or "").strip()


def set_user_id(value: str) -> None:
    _set_value("user_id", value)


def get_auto_sync() -> bool:
    value = _load_config().get("auto_sync", True)
    if isinstance(value, str):
        return value.strip().lower() not in {"0", "false", "no", "off", ""}
    return bool(value)


def set_auto_sync(enabled: bool) -> None:
    data = _load_config()
    data["auto_sync"] = bool(enabled)
    _save_config(data)


@dataclass
class Settings:
    api_url: str = ""
    upload_url: str = ""
    destroy_url: str = ""
    upload_preset: str = ""
    probe_url: str = DEFAULT_PROBE_URL
    cache_dir: Path = DEFAULT_CACHE_DIR
    timeout: float = DEFAULT_TIMEOUT
    watch_interval: float = 30.0


def load_settings() -> Settings:
    """User config with environment overrides (``TODO_SYNC_*``)."""
    data = _load_config()

    def pick(key: str, env: str, default: str = "") -> str:
        return (os.getenv(env) or str(data.get(key) or "") or default).strip()

    try:
        timeout = float(os.getenv("TODO_SYNC_TIMEOUT") or data.get("timeout") or DEFAULT_TIMEOUT)
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT
    try:
        watch_interval = float(data.get("watch_interval") or 30.0)
    except (TypeError, ValueError):
        watch_interval = 30.0
    return Settings(
        api_url=pick("api_url", "TODO_SYNC_API_URL"),
        upload_url=pick("upload_url", "TODO_SYNC_UPLOAD_URL"),
        destroy_url=pick("destroy_url", "TODO_SYNC_DESTROY_URL"),
        upload_preset=pick("upload_preset", "TODO_SYNC_UPLOAD_PRESET"),
        probe_url=pick("probe_url", "TODO_SYNC_PROBE_URL", DEFAULT_PROBE_URL),
        cache_dir=Path(pick("cache_dir", "TODO_SYNC_CACHE_DIR", str(DEFAULT_CACHE_DIR))).expanduser(),
        timeout=timeout,
        watch_interval=watch_interval,
    )


def resolve_token() -> str:
    return (os.getenv("TODO_SYNC_TOKEN") or get_user_token()).strip()
