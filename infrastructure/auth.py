from typing import Callable, Optional

import config
from application.ports import AuthProvider


class ConfigAuthProvider(AuthProvider):
    """Current user as recorded by the login flow in the user config."""

    def __init__(self, user_id_getter: Optional[Callable[[], str]] = None) -> None:
        self._getter = user_id_getter or config.get_user_id

    def current_user_id(self) -> Optional[str]:
        return self._getter() or None
