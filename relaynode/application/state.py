"""Shared application state.

One ``AppState`` exists per process. It is built after the node has started
and is handed to every request handler. It owns no entity state of its own:
just the node handle and the worker pool blocking node calls run on.
"""

import asyncio
import contextvars
import functools
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeVar

from relaynode.exceptions import NodeOperationError, RelayNodeError
from relaynode.infrastructure.node_handle import NodeHandle
from relaynode.utils.logging import LogPerformance, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AppState:
    """Shared, read-only handle to the node plus its worker pool.

    Handlers never lock around node calls; the engine serializes conflicting
    mutations itself.
    """

    node: NodeHandle
    executor: ThreadPoolExecutor

    @classmethod
    def create(cls, node: NodeHandle, worker_threads: int = 8) -> "AppState":
        """Wrap a started node handle.

        Args:
            node: The started node engine
            worker_threads: Upper bound on concurrently running node calls
        """
        executor = ThreadPoolExecutor(
            max_workers=worker_threads,
            thread_name_prefix="node-call",
        )
        logger.info("app_state_created", worker_threads=worker_threads)
        return cls(node=node, executor=executor)

    async def call(self, func: Callable[..., T], *args: Any) -> T:
        """Run one blocking node operation on the worker pool.

        Engine failures come back as ``NodeOperationError`` carrying the
        engine's message. If the caller goes away the operation still runs to
        completion and its result is dropped.
        """
        operation = getattr(func, "__name__", repr(func))
        loop = asyncio.get_running_loop()
        # Copy the context so worker-side log lines keep the correlation id
        ctx = contextvars.copy_context()
        task = functools.partial(ctx.run, self._invoke, operation, func, *args)
        return await loop.run_in_executor(self.executor, task)

    @staticmethod
    def _invoke(operation: str, func: Callable[..., T], *args: Any) -> T:
        with LogPerformance(f"node_{operation}", logger):
            try:
                return func(*args)
            except RelayNodeError:
                raise
            except Exception as e:
                raise NodeOperationError(
                    str(e) or type(e).__name__,
                    operation=operation,
                    original_error=e,
                ) from e

    def close(self) -> None:
        """Wait for in-flight node calls, then release the worker threads."""
        self.executor.shutdown(wait=True)
        logger.info("app_state_closed")
