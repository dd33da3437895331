"""Scoped access to an optionally shared aiohttp session."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiohttp


@asynccontextmanager
async def client_session(
    shared: aiohttp.ClientSession | None,
    timeout: aiohttp.ClientTimeout,
    headers: dict[str, str],
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the shared session if one was injected, else a short-lived one.

    A shared session is owned by whoever created it and is never closed here.
    """
    if shared is not None:
        yield shared
        return

    async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
        yield session
