"""Directory commands for the dabox CLI.

Each command acquires the user's root directory, forwards its arguments to
the directory tree, and renders the outcome.
"""

import asyncio
from typing import Annotated, Any, Awaitable, Callable, Coroutine, Optional, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.tree import Tree

from dabox.cli.app import app
from dabox.clients import get_client
from dabox.config import ConfigManager
from dabox.schemas.directory import DirectoryNode
from dabox.schemas.result import ApiError, ApiResult
from dabox.services.directory_service import DirectoryTree
from dabox.services.initialization import RootAcquisition, RootState
from dabox.session import Session

console = Console()

T = TypeVar("T")

UserOption = Annotated[
    Optional[int],
    typer.Option("--user", "-u", help="User id. Defaults to DABOX_USER_ID."),
]


def build_rich_tree(node: DirectoryNode, tree: Optional[Tree] = None) -> Tree:
    """Render a DirectoryNode subtree as a rich Tree."""
    label = f"[bold]{node.name}[/bold] [dim]#{node.sid}[/dim]"
    branch = Tree(label) if tree is None else tree.add(label)
    for child in node.children:
        build_rich_tree(child, branch)
    return branch


async def run_with_tree(
    user: Optional[int], action: Callable[[DirectoryTree], Awaitable[T]]
) -> T:
    """Open a store client for ``user``, acquire the root, then run ``action``.

    Raises:
        ValueError: If no user is logged in or the root cannot be acquired
    """
    config = ConfigManager().config
    session = Session(user if user is not None else config.user_id, config.identity_header)
    if not session.logged_in:
        raise ValueError("not logged in (pass --user or set DABOX_USER_ID)")

    async with get_client(config) as http_client:
        client = session.client(http_client)
        assert client is not None
        acquisition = RootAcquisition(client, root_name=config.root_name)
        if await acquisition.run() == RootState.FAILED:
            raise ValueError(str(acquisition.error))
        return await action(acquisition.tree())


def _run(coro: Coroutine[Any, Any, T], failure: str) -> T:
    try:
        return asyncio.run(coro)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:  # pragma: no cover
        logger.error(f"{failure}: {e}")
        typer.echo(f"{failure}: {e}", err=True)
        raise typer.Exit(1)


def _unwrap(result: ApiResult[T]) -> T:
    """Return the value of an Ok result, raise ValueError for an ApiError."""
    if isinstance(result, ApiError):
        raise ValueError(str(result))
    return result.value


@app.command()
def tree(user: UserOption = None) -> None:
    """Show the directory tree."""

    async def _show(directory_tree: DirectoryTree) -> DirectoryNode:
        return directory_tree.root

    root = _run(run_with_tree(user, _show), "Error loading directory tree")
    console.print(build_rich_tree(root))


@app.command()
def mkdir(
    name: str,
    parent: Annotated[
        Optional[int], typer.Option("--parent", "-p", help="Parent directory id. Defaults to root.")
    ] = None,
    user: UserOption = None,
) -> None:
    """Create a directory."""

    async def _create(directory_tree: DirectoryTree) -> DirectoryNode:
        parent_sid = parent if parent is not None else directory_tree.root.sid
        if directory_tree.find(parent_sid) is None:
            raise ValueError(f"directory {parent_sid} not found")
        result = await directory_tree.create_child(parent_sid, name)
        if result is None:
            raise ValueError("directory name cannot be empty")
        return _unwrap(result)

    created = _run(run_with_tree(user, _create), "Error creating directory")
    console.print(f"[green]Created[/green] {created.name} [dim]#{created.sid}[/dim]")


@app.command()
def rename(sid: int, name: str, user: UserOption = None) -> None:
    """Rename a directory."""

    async def _rename(directory_tree: DirectoryTree) -> DirectoryNode:
        if directory_tree.find(sid) is None:
            raise ValueError(f"directory {sid} not found")
        return _unwrap(await directory_tree.rename(sid, name))

    renamed = _run(run_with_tree(user, _rename), "Error renaming directory")
    console.print(f"[green]Renamed[/green] #{renamed.sid} to {renamed.name}")


@app.command()
def rm(sid: int, user: UserOption = None) -> None:
    """Delete a directory and everything below it."""

    async def _delete(directory_tree: DirectoryTree) -> None:
        if directory_tree.find(sid) is None:
            raise ValueError(f"directory {sid} not found")
        _unwrap(await directory_tree.delete(sid))

    _run(run_with_tree(user, _delete), "Error deleting directory")
    console.print(f"[green]Deleted[/green] #{sid}")
