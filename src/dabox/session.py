"""Session state: who is logged in.

The identity token is passed explicitly to every client built from the
session. Nothing reads it from module state, so a login or logout only
affects clients created afterwards.
"""

from typing import Callable, List, Optional

from httpx import AsyncClient
from loguru import logger

from dabox.clients.directory import DirectoryClient
from dabox.config import DEFAULT_IDENTITY_HEADER

SessionListener = Callable[[Optional[int]], None]


class Session:
    """Holds the current identity token and notifies listeners on change."""

    def __init__(
        self,
        user_id: Optional[int] = None,
        identity_header: str = DEFAULT_IDENTITY_HEADER,
    ):
        self._user_id = user_id
        self.identity_header = identity_header
        self._listeners: List[SessionListener] = []

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def logged_in(self) -> bool:
        return self._user_id is not None

    def on_change(self, listener: SessionListener) -> None:
        """Register a callback invoked with the new token after every change."""
        self._listeners.append(listener)

    def login(self, user_id: int) -> None:
        self._set(user_id)

    def logout(self) -> None:
        self._set(None)

    def client(self, http_client: AsyncClient) -> Optional[DirectoryClient]:
        """Build a directory client for the current token, None when logged out."""
        if self._user_id is None:
            return None
        return DirectoryClient(http_client, self._user_id, identity_header=self.identity_header)

    def _set(self, user_id: Optional[int]) -> None:
        if user_id == self._user_id:
            return
        self._user_id = user_id
        logger.info("Logged out" if user_id is None else f"Logged in as {user_id}")
        for listener in self._listeners:
            listener(user_id)
