"""Directory service keeping a cached directory tree in step with the store."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional

from loguru import logger

from dabox.clients.directory import DirectoryClient
from dabox.schemas.directory import DirectoryNode
from dabox.schemas.result import ApiError, ApiResult, Ok


class EditKind(str, Enum):
    """What a pending edit will do once committed."""

    RENAME = "rename"
    NEW_CHILD = "new_child"


@dataclass
class PendingEdit:
    """Text being typed against one node, not yet sent to the store."""

    sid: int
    kind: EditKind
    text: str = ""


class DirectoryTree:
    """Cached view of one user's directory tree.

    The store owns the data. This class holds the last fetched subtree and
    applies create/rename/delete only after the store confirms them, so the
    cache never shows a node the store did not assign an id to.

    Operations on different nodes may be in flight at the same time. Two
    operations on the same node are not serialized: whichever response
    arrives last is what the tree shows. A response for a node that was
    removed while the request was in flight is dropped.
    """

    def __init__(self, client: DirectoryClient, root: DirectoryNode):
        """Initialize the directory tree.

        Args:
            client: Typed store client for the current user
            root: Root node as fetched from (or created in) the store
        """
        self.client = client
        self.root = root
        self._edits: Dict[int, PendingEdit] = {}

    # --- Read helpers ---

    def find(self, sid: int) -> Optional[DirectoryNode]:
        return self.root.find(sid)

    def walk(self) -> Iterator[DirectoryNode]:
        return self.root.walk()

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def _require(self, sid: int) -> DirectoryNode:
        node = self.find(sid)
        if node is None:
            raise KeyError(f"Directory {sid} is not in the tree")
        return node

    # --- Pending edits ---

    def begin_rename(self, sid: int) -> PendingEdit:
        """Open a rename edit on a node, seeded with its current name."""
        node = self._require(sid)
        edit = PendingEdit(sid=sid, kind=EditKind.RENAME, text=node.name)
        self._edits[sid] = edit
        return edit

    def begin_create(self, sid: int) -> PendingEdit:
        """Open a new-child edit on a node, seeded with an empty name."""
        self._require(sid)
        edit = PendingEdit(sid=sid, kind=EditKind.NEW_CHILD)
        self._edits[sid] = edit
        return edit

    def pending_edit(self, sid: int) -> Optional[PendingEdit]:
        return self._edits.get(sid)

    def update_edit(self, sid: int, text: str) -> PendingEdit:
        edit = self._edits.get(sid)
        if edit is None:
            raise KeyError(f"No pending edit on directory {sid}")
        edit.text = text
        return edit

    def cancel_edit(self, sid: int) -> None:
        self._edits.pop(sid, None)

    async def commit_edit(self, sid: int) -> Optional[ApiResult[DirectoryNode]]:
        """Close the pending edit on a node and send it to the store.

        Returns:
            The result of the rename or create, or None when there was no
            pending edit or the create was skipped for a blank name
        """
        edit = self._edits.pop(sid, None)
        if edit is None:
            return None
        if edit.kind == EditKind.RENAME:
            return await self.rename(sid, edit.text)
        return await self.create_child(sid, edit.text)

    # --- Store-confirmed mutations ---

    async def create_child(self, parent_sid: int, name: str) -> Optional[ApiResult[DirectoryNode]]:
        """Create a directory under ``parent_sid`` and append it once confirmed.

        Returns:
            None if ``name`` is blank (no request is sent), otherwise the
            store result. On error the parent's children are unchanged.
        """
        self._require(parent_sid)
        if not name or not name.strip():
            logger.debug(f"Skipping create under {parent_sid}: blank name")
            return None

        result = await self.client.create(name, parent=parent_sid)
        if isinstance(result, ApiError):
            return result.with_context("failed to create directory")

        created = result.value
        # Re-resolve: the parent may have been deleted during the round trip
        parent = self.find(parent_sid)
        if parent is None:
            logger.debug(f"Dropping created directory {created.sid}: parent {parent_sid} is gone")
            return result
        if any(child.sid == created.sid for child in parent.children):
            logger.debug(f"Directory {created.sid} already present under {parent_sid}")
            return result

        parent.children.append(created)
        logger.info(f"Created directory {created.sid} '{created.name}' under {parent_sid}")
        return result

    async def rename(self, sid: int, name: str) -> ApiResult[DirectoryNode]:
        """Rename a directory once the store confirms it.

        An empty name or the current name is a no-op: no request is sent
        and ``Ok(node)`` is returned unchanged.
        """
        node = self._require(sid)
        if not name or name == node.name:
            return Ok(node)

        result = await self.client.rename(sid, name)
        if isinstance(result, ApiError):
            return result.with_context("failed to rename directory")

        current = self.find(sid)
        if current is None:
            logger.debug(f"Dropping rename of {sid}: no longer in the tree")
            return result

        # Only the name changes; the cached children stay as they are
        current.name = result.value.name
        logger.info(f"Renamed directory {sid} to '{current.name}'")
        return Ok(current)

    async def delete(self, sid: int) -> ApiResult[None]:
        """Delete a directory and drop its cached subtree once confirmed.

        Raises:
            ValueError: If ``sid`` is the root of the tree
        """
        if sid == self.root.sid:
            raise ValueError("The root directory cannot be deleted")
        self._require(sid)

        result = await self.client.delete(sid)
        if isinstance(result, ApiError):
            return result.with_context("failed to delete directory")

        parent = self.root.find_parent(sid)
        if parent is None:
            logger.debug(f"Directory {sid} already gone from the tree")
            return result

        parent.children = [child for child in parent.children if child.sid != sid]
        self._discard_stale_edits()
        logger.info(f"Deleted directory {sid} from {parent.sid}")
        return result

    async def reload(self) -> ApiResult[DirectoryNode]:
        """Replace the cached tree with a fresh fetch of the root."""
        result = await self.client.fetch(self.root.sid)
        if isinstance(result, ApiError):
            return result.with_context("failed to reload directory tree")

        self.root = result.value
        self._discard_stale_edits()
        logger.debug(f"Reloaded tree rooted at {self.root.sid} ({self.node_count} directories)")
        return result

    def _discard_stale_edits(self) -> None:
        present = {node.sid for node in self.walk()}
        for sid in [sid for sid in self._edits if sid not in present]:
            del self._edits[sid]
