"""Delay policy between outbound calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import structlog

from deepsearch.config.settings import Settings

logger = structlog.get_logger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class RequestThrottle:
    """Named pauses inserted between consecutive upstream calls.

    ``term`` separates ordinary search terms, ``dork`` separates query
    refinement variants, ``chunk`` separates scrape chunks and ``batch``
    separates analysis batches.
    """

    term: float = 1.0
    dork: float = 2.0
    chunk: float = 0.5
    batch: float = 1.0
    sleep: Sleeper = field(default=asyncio.sleep, repr=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RequestThrottle":
        return cls(
            term=settings.search_term_delay,
            dork=settings.dork_delay,
            chunk=settings.scrape_chunk_delay,
            batch=settings.analysis_batch_delay,
        )

    @classmethod
    def disabled(cls) -> "RequestThrottle":
        return cls(term=0.0, dork=0.0, chunk=0.0, batch=0.0)

    async def wait(self, kind: str) -> None:
        """Pause for the delay configured under ``kind``."""
        seconds = getattr(self, kind)
        logger.debug("Throttling", kind=kind, seconds=seconds)
        await self.sleep(seconds)
