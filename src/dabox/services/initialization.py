"""Root directory acquisition run after login.

Every user namespace has one root directory. The first time a user logs in
the store has none, so it is created on demand.
"""

from enum import Enum
from typing import Optional

from loguru import logger

from dabox.clients.directory import DirectoryClient
from dabox.schemas.directory import ROOT_LOOKUP_SID, DirectoryNode
from dabox.schemas.result import ApiError, ApiErrorKind
from dabox.services.directory_service import DirectoryTree

DEFAULT_ROOT_NAME = "Root"


class RootState(str, Enum):
    """States of the root acquisition flow."""

    IDLE = "idle"
    FETCHING = "fetching"
    CREATING_ROOT = "creating_root"
    READY = "ready"
    FAILED = "failed"


STABLE_STATES = {RootState.READY, RootState.FAILED}


class RootAcquisition:
    """Fetch the caller's root directory, creating it if the store has none.

    IDLE -> FETCHING -> READY | CREATING_ROOT | FAILED
    CREATING_ROOT -> READY | FAILED

    READY and FAILED stay put until ``reset()``, which the session calls when
    the identity token changes.
    """

    def __init__(self, client: DirectoryClient, root_name: str = DEFAULT_ROOT_NAME):
        self.client = client
        self.root_name = root_name
        self.state = RootState.IDLE
        self.root: Optional[DirectoryNode] = None
        self.error: Optional[ApiError] = None

    def reset(self) -> None:
        self.state = RootState.IDLE
        self.root = None
        self.error = None

    async def run(self) -> RootState:
        """Drive the flow to a stable state and return it."""
        if self.state in STABLE_STATES:
            return self.state

        self.state = RootState.FETCHING
        logger.info("Loading root directory")
        result = await self.client.fetch(ROOT_LOOKUP_SID)

        if not isinstance(result, ApiError):
            return self._ready(result.value)

        if result.kind != ApiErrorKind.NOT_FOUND:
            return self._failed(result.with_context("unhandled error"))

        self.state = RootState.CREATING_ROOT
        logger.info("No root directory, creating")
        created = await self.client.create(self.root_name)
        if isinstance(created, ApiError):
            return self._failed(created.with_context("failed to create root directory"))
        return self._ready(created.value)

    def tree(self) -> DirectoryTree:
        """Build the directory tree for a READY flow."""
        if self.state != RootState.READY or self.root is None:
            raise RuntimeError(f"Root directory is not ready (state: {self.state.value})")
        return DirectoryTree(self.client, self.root)

    def _ready(self, root: DirectoryNode) -> RootState:
        self.root = root
        self.error = None
        self.state = RootState.READY
        logger.info(f"Root directory ready: {root.sid} '{root.name}'")
        return self.state

    def _failed(self, error: ApiError) -> RootState:
        self.root = None
        self.error = error
        self.state = RootState.FAILED
        logger.error(f"Root directory acquisition failed: {error}")
        return self.state
