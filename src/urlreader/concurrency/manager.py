"""Thread pool for document conversion work in async contexts."""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class ConcurrencyManager:
    """
    Runs blocking conversion work (BeautifulSoup parsing, html2text
    serialization, pypdf page extraction) on a small thread pool so the
    event loop keeps serving other requests.

    Example:
        async with ConcurrencyManager(max_workers=4) as manager:
            markdown = await manager.run_cpu_bound(html_to_markdown, markup)
    """

    def __init__(self, max_workers: int = 4) -> None:
        """
        Args:
            max_workers: Number of thread pool workers
        """
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        """Get or create the thread pool executor."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="urlreader-convert-",
            )
        return self._executor

    async def run_cpu_bound(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a blocking function in the thread pool and await its result.

        Exceptions raised by func propagate to the awaiting caller.
        """
        loop = asyncio.get_running_loop()
        call = functools.partial(func, *args, **kwargs)
        return await loop.run_in_executor(self.executor, call)

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the thread pool executor."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    async def __aenter__(self) -> "ConcurrencyManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.shutdown(wait=True)
