"""Run blocking codec work off the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Await *func* on a worker thread; one call per request, never fanned out."""

    return await asyncio.to_thread(func, *args, **kwargs)


__all__ = ["run_blocking"]
