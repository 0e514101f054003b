"""
psutil-based memory fetcher for the server process.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import psutil

from ..validation import CollectionError
from .base import AbstractMemoryFetcher

logger = logging.getLogger(__name__)

BYTES_PER_MIB = 1024 * 1024


def read_rss_mib(pid: int) -> float:
    """
    Read the resident set size of a process.

    Args:
        pid: Process ID

    Returns:
        RSS in MiB, rounded to two decimals

    Raises:
        CollectionError: If the process is gone or cannot be inspected
    """
    try:
        rss = psutil.Process(pid).memory_info().rss
    except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
        raise CollectionError(f"Cannot read memory of PID {pid}: {e}") from e
    return round(rss / BYTES_PER_MIB, 2)


class PsutilMemoryFetcher(AbstractMemoryFetcher):
    """
    Reads process memory with psutil in a worker thread.

    psutil calls are blocking system calls, so they run in an executor to
    keep the event loop free.
    """

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None):
        self.executor = executor

    async def fetch_memory(self, pid: int) -> float:
        loop = asyncio.get_running_loop()
        memory = await loop.run_in_executor(self.executor, read_rss_mib, pid)
        logger.debug(f"PID {pid} memory: {memory} MiB")
        return memory
