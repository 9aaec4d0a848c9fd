"""Schemas for directory tree operations."""

from typing import Iterator, List, Optional

from pydantic import AliasChoices, BaseModel, Field

# Lookup key meaning "the caller's root directory"; never a real sid
ROOT_LOOKUP_SID = 0


class DirectoryNode(BaseModel):
    """Directory node as returned by the store, with its children populated."""

    sid: int  # Store-assigned id, immutable once observed
    name: str
    parent: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("parent", "parent_sid"),
    )
    children: List["DirectoryNode"] = []  # Default to empty list
    depth: Optional[int] = None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def walk(self) -> Iterator["DirectoryNode"]:
        """Yield this node and every descendant, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            # Reversed so siblings come out in display order
            stack.extend(reversed(node.children))

    def find(self, sid: int) -> Optional["DirectoryNode"]:
        """Find a node by sid in this subtree."""
        for node in self.walk():
            if node.sid == sid:
                return node
        return None

    def find_parent(self, sid: int) -> Optional["DirectoryNode"]:
        """Find the node whose children contain ``sid``."""
        for node in self.walk():
            if any(child.sid == sid for child in node.children):
                return node
        return None


# Support for recursive model
DirectoryNode.model_rebuild()


class CreateDirectoryRequest(BaseModel):
    """Body of POST /directory. ``parent`` omitted means create under root."""

    name: str = Field(min_length=1)
    parent: Optional[int] = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class RenameDirectoryRequest(BaseModel):
    """Body of PUT /directory/{sid}."""

    name: str = Field(min_length=1)

    def to_payload(self) -> dict:
        return self.model_dump()
