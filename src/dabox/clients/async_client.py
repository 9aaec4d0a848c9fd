"""HTTPX client factory for the directory store."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from httpx import AsyncBaseTransport, AsyncClient, Timeout
from loguru import logger

from dabox.config import ConfigManager, DaboxConfig


@asynccontextmanager
async def get_client(
    config: Optional[DaboxConfig] = None,
    transport: Optional[AsyncBaseTransport] = None,
) -> AsyncIterator[AsyncClient]:
    """Yield an AsyncClient pointed at the configured store.

    Args:
        config: Client configuration, loaded from ConfigManager when omitted
        transport: Optional transport override (tests use httpx.MockTransport)
    """
    config = config or ConfigManager().config
    logger.debug(f"Opening store client for {config.api_url}")
    async with AsyncClient(
        base_url=config.api_url,
        timeout=Timeout(config.request_timeout),
        headers={"Content-Type": "application/json"},
        transport=transport,
    ) as client:
        yield client
