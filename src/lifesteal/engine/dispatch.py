"""Per-actor serial dispatch of host side effects.

Host calls (exile, restrict, notify, token minting) must never run while a
ledger lock is held, and must run in order for any one actor. The
dispatcher keeps one FIFO queue per actor and drains it on a shared worker
pool: tasks for the same actor run one after another in submission order,
while different actors proceed in parallel.

A failing task is logged and dropped; it never stops the queue behind it
and never surfaces in the caller that submitted it.
"""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from lifesteal.core.constants import DEFAULT_DISPATCH_WORKERS
from lifesteal.core.exceptions import DispatchError
from lifesteal.core.logging import get_logger
from lifesteal.models.identity import ActorId, ActorLike, actor_key


logger = get_logger(__name__)


@dataclass
class _Task:
    """A queued host call."""

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", repr(self.fn))


class ActorDispatcher:
    """Runs submitted callables serially per actor on a thread pool.

    Example:
        >>> dispatcher = ActorDispatcher(max_workers=2)
        >>> dispatcher.submit("steve", print, "hello")
        >>> dispatcher.wait_idle(timeout=1.0)
        True
        >>> dispatcher.shutdown()
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_DISPATCH_WORKERS,
        *,
        thread_name_prefix: str = "lifesteal-dispatch",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            max_workers: Worker threads shared by all actor queues.
            thread_name_prefix: Prefix for worker thread names.
        """
        if max_workers < 1:
            raise DispatchError(
                "Dispatcher needs at least one worker",
                details={"max_workers": max_workers},
            )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._queues: dict[ActorId, deque[_Task]] = {}
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0
        self._closed = False

    @property
    def pending(self) -> int:
        """Tasks submitted but not yet finished."""
        with self._lock:
            return self._pending

    @property
    def is_closed(self) -> bool:
        """Whether ``shutdown`` has been called."""
        with self._lock:
            return self._closed

    def submit(self, actor: ActorLike, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``fn(*args, **kwargs)`` behind the actor's earlier tasks.

        Args:
            actor: Actor whose queue the task joins.
            fn: Callable to run on a worker thread.
            *args: Positional arguments for ``fn``.
            **kwargs: Keyword arguments for ``fn``.

        Raises:
            DispatchError: If the dispatcher has been shut down.
        """
        key = actor_key(actor)
        task = _Task(fn=fn, args=args, kwargs=kwargs)
        with self._lock:
            if self._closed:
                raise DispatchError(
                    "Dispatcher is shut down",
                    actor_id=key,
                    details={"task": task.name},
                )
            queue = self._queues.get(key)
            start_drain = queue is None
            if queue is None:
                queue = deque()
                self._queues[key] = queue
            queue.append(task)
            self._pending += 1
            if start_drain:
                self._executor.submit(self._drain, key)

    def _drain(self, key: ActorId) -> None:
        """Run the actor's queued tasks until the queue is empty."""
        while True:
            with self._lock:
                queue = self._queues[key]
                if not queue:
                    del self._queues[key]
                    return
                task = queue[0]

            try:
                task.fn(*task.args, **task.kwargs)
            except Exception:
                logger.exception("Host call failed", actor_id=key, task=task.name)
            finally:
                with self._lock:
                    # Popped only after running so a concurrent submit sees the
                    # queue as busy and does not start a second drain.
                    queue.popleft()
                    self._pending -= 1
                    if self._pending == 0:
                        self._idle.notify_all()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted task has finished.

        Args:
            timeout: Seconds to wait; forever when None.

        Returns:
            True if the dispatcher went idle, False on timeout.
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def shutdown(self, timeout: float | None = None) -> bool:
        """Stop accepting tasks and wait for queued ones to finish.

        Args:
            timeout: Seconds to wait for queued tasks; forever when None.

        Returns:
            True if all queued tasks finished before the timeout.
        """
        with self._lock:
            if self._closed:
                return self._pending == 0
            self._closed = True

        drained = self.wait_idle(timeout)
        self._executor.shutdown(wait=drained, cancel_futures=not drained)
        if drained:
            logger.debug("Dispatcher shut down")
        else:
            logger.warning("Dispatcher shut down with tasks pending", pending=self.pending)
        return drained

    def __enter__(self) -> ActorDispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = [
    "ActorDispatcher",
]
