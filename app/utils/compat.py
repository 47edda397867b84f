from __future__ import annotations

import asyncio
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, TypeVar

T = TypeVar("T")


async def to_thread(func: Callable[..., T], *args, **kwargs) -> T:
    """Compatibility wrapper for asyncio.to_thread.

    Python 3.9+ has asyncio.to_thread; for older versions we fallback to
    loop.run_in_executor.
    """
    to_thread_fn = getattr(asyncio, "to_thread", None)
    if callable(to_thread_fn):
        return await to_thread_fn(func, *args, **kwargs)

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: func(*args, **kwargs))


def _worker_ready() -> bool:
    return True


async def start_worker_process() -> ProcessPoolExecutor:
    """Start a single-process pool and wait until it has run a no-op.

    Anything raised here means the worker never came up, typically
    ``OSError``, ``NotImplementedError`` or ``BrokenProcessPool``. The
    caller owns the returned pool and must shut it down.
    """
    pool = ProcessPoolExecutor(max_workers=1)
    try:
        await asyncio.get_running_loop().run_in_executor(pool, _worker_ready)
    except BaseException:
        pool.shutdown(wait=False)
        raise
    return pool


async def run_in_worker_process(pool: ProcessPoolExecutor, func: Callable[..., T], *args) -> T:
    """Run a picklable ``func`` in a pool returned by :func:`start_worker_process`."""
    return await asyncio.get_running_loop().run_in_executor(pool, func, *args)
