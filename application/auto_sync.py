import logging
from typing import Callable, Optional

from application.ports import AuthProvider, NetworkStatusProvider
from application.sync_engine import SyncEngine

logger = logging.getLogger("todo_sync.autosync")


class AutoSync:
    """Replays pending changes whenever the network comes back.

    Background sync is silent: failures are logged and never raised.
    """

    def __init__(
        self,
        engine: SyncEngine,
        network: NetworkStatusProvider,
        auth: AuthProvider,
        enabled: Callable[[], bool] = lambda: True,
    ) -> None:
        self.engine = engine
        self.network = network
        self.auth = auth
        self.enabled = enabled
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.network.subscribe(self.on_connectivity_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_connectivity_change(self, online: bool) -> None:
        if not online:
            return
        try:
            if not self.enabled():
                return
            user_id = self.auth.current_user_id()
            if not user_id:
                return
            report = self.engine.sync_pending_changes(user_id)
        except Exception as exc:
            logger.warning("Auto-sync failed: %s", exc)
            return
        if report.failed:
            logger.warning("Auto-sync left %d task(s) pending", len(report.failed))
