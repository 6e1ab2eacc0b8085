"""Composition root: builds the sync engine and its adapters from user settings.

Nothing here is cached at module level; callers own the instances they build.
"""

from typing import Optional, Tuple

import requests

import config
from application.auto_sync import AutoSync
from application.sync_engine import SyncEngine
from infrastructure.auth import ConfigAuthProvider
from infrastructure.connectivity import ConnectivityWatcher, HttpConnectivityOracle
from infrastructure.file_storage import FileKeyValueStorage
from infrastructure.local_cache import LocalTaskCache
from infrastructure.remote import HttpClient, HttpDocumentStore, RateLimiter, RestTaskStore


def build_engine(
    settings: Optional[config.Settings] = None,
    session: Optional[requests.Session] = None,
) -> SyncEngine:
    settings = settings or config.load_settings()
    session = session or requests.Session()
    limiter = RateLimiter()
    api = HttpClient(
        settings.api_url,
        session=session,
        token_provider=config.resolve_token,
        rate_limiter=limiter,
        timeout=settings.timeout,
    )
    # the blob endpoint is a different host; it authenticates via upload preset, not our token
    uploads = HttpClient(
        settings.upload_url,
        session=session,
        rate_limiter=limiter,
        timeout=settings.timeout,
    )
    return SyncEngine(
        cache=LocalTaskCache(FileKeyValueStorage(settings.cache_dir)),
        remote=RestTaskStore(api),
        documents=HttpDocumentStore(
            uploads,
            upload_url=settings.upload_url,
            upload_preset=settings.upload_preset,
            destroy_url=settings.destroy_url or None,
        ),
        connectivity=HttpConnectivityOracle(settings.probe_url, session=session, timeout=min(settings.timeout, 5.0)),
        auth=ConfigAuthProvider(),
    )


def build_auto_sync(
    engine: SyncEngine,
    settings: Optional[config.Settings] = None,
) -> Tuple[AutoSync, ConnectivityWatcher]:
    """Wire a connectivity watcher to auto-sync; caller starts/stops the watcher."""
    settings = settings or config.load_settings()
    watcher = ConnectivityWatcher(engine.connectivity, interval=settings.watch_interval)
    auto = AutoSync(engine, watcher, engine.auth, enabled=config.get_auto_sync)
    auto.attach()
    return auto, watcher


__all__ = ["build_engine", "build_auto_sync"]
