"""Typed clients for the directory store.

Clients wrap an httpx.AsyncClient and turn responses into typed results.

Usage:
    from dabox.clients import DirectoryClient, get_client

    async with get_client() as http_client:
        directories = DirectoryClient(http_client, user_id)
        result = await directories.fetch(0)
"""

from dabox.clients.async_client import get_client
from dabox.clients.directory import DirectoryClient
from dabox.clients.utils import DirectoryApiException

__all__ = [
    "DirectoryClient",
    "DirectoryApiException",
    "get_client",
]
