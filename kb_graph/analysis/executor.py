"""
Bounded Analysis Executor

Runs the computationally heavy analytics (pairwise similarity, relation
graphs) on a bounded worker pool with a hard timeout. Python threads cannot
be killed, so long loops check a CancellationToken and stop themselves once
it is set: on timeout, or when the requesting client disconnects.
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Any, Awaitable, Callable, Optional

from ..config.settings import AnalyticsConfig, settings
from ..exceptions import AnalysisCancelledError, AnalysisTimeoutError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag shared between caller and worker."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str = None) -> None:
        if self._event.is_set():
            raise AnalysisCancelledError(operation)


def check_cancelled(token: Optional[CancellationToken], operation: str = None) -> None:
    """No-op when no token was supplied."""
    if token is not None:
        token.raise_if_cancelled(operation)


class AnalysisExecutor:
    """
    Bounded thread pool for heavy analytics.

    The callable must accept a ``token`` keyword argument and check it
    periodically.

    Usage:
        executor = AnalysisExecutor()
        edges = executor.run(engine.relation_graph, snapshot)

        # From a request handler
        result = await executor.run_async(
            engine.similar_documents, snapshot, 42,
            is_disconnected=request.is_disconnected
        )
    """

    def __init__(self, config: AnalyticsConfig = None):
        self.config = config or settings.analytics
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="kb-analysis"
        )

    def run(self, func: Callable, *args, timeout: float = None,
            token: CancellationToken = None, **kwargs) -> Any:
        """Run func on the pool and wait for it, bounded by timeout."""
        timeout = timeout if timeout is not None else self.config.timeout_seconds
        token = token or CancellationToken()
        operation = getattr(func, "__name__", "analysis")

        future = self._pool.submit(func, *args, token=token, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            token.cancel()
            future.cancel()
            logger.error(f"Analysis '{operation}' timed out after {timeout}s")
            raise AnalysisTimeoutError(operation, timeout)

    async def run_async(self, func: Callable, *args, timeout: float = None,
                        is_disconnected: Callable[[], Awaitable[bool]] = None,
                        token: CancellationToken = None, **kwargs) -> Any:
        """
        Await func on the pool, cancelling it on timeout or client disconnect.

        is_disconnected is polled every ``disconnect_poll_seconds``.
        """
        timeout = timeout if timeout is not None else self.config.timeout_seconds
        token = token or CancellationToken()
        operation = getattr(func, "__name__", "analysis")

        future = asyncio.wrap_future(self._pool.submit(func, *args, token=token, **kwargs))
        deadline = time.monotonic() + timeout

        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    token.cancel()
                    future.cancel()
                    logger.error(f"Analysis '{operation}' timed out after {timeout}s")
                    raise AnalysisTimeoutError(operation, timeout)

                done, _ = await asyncio.wait(
                    {future},
                    timeout=min(remaining, self.config.disconnect_poll_seconds)
                )
                if done:
                    return future.result()

                if is_disconnected is not None and await is_disconnected():
                    token.cancel()
                    future.cancel()
                    logger.info(f"Client disconnected, cancelling '{operation}'")
                    raise AnalysisCancelledError(operation)
        except asyncio.CancelledError:
            # The awaiting task itself was cancelled (server shutdown, disconnect)
            token.cancel()
            future.cancel()
            raise

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)
