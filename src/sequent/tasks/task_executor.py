# src/sequent/tasks/task_executor.py

from __future__ import annotations

"""
Sequential task executor.

Owns a task registry, an event emitter and the run state of one orchestrator:
- add/get/remove tasks by name,
- resolve requested names into a dependency-ordered sequence,
- walk the sequence one task at a time on the running asyncio loop,
  yielding between steps and publishing lifecycle events.

Two-phase contract of `execute`:
- setup phase: resolution happens and the run is marked active before
  `execute` returns; nothing else runs yet,
- run phase: starts only once the caller yields to the event loop, so handlers
  subscribed right after `execute` still receive `start` and every later event.
"""

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import Callable, Iterable, Sequence

from ..core.events import EventEmitter
from ..core.ports import EventHandler
from .task_errors import ExecutorBusyError, SequentError, TaskFailedError, TaskNotFoundError
from .task_models import BusyPolicy, ExecutorEvent, RunState, Task, TaskCallback
from .task_registry import TaskRegistry
from .task_resolver import resolve_sequence

logger = logging.getLogger(__name__)


class Executor:
    def __init__(
        self,
        *,
        busy_policy: BusyPolicy | str = BusyPolicy.REJECT,
        registry: TaskRegistry | None = None,
        events: EventEmitter | None = None,
    ) -> None:
        self._registry = registry if registry is not None else TaskRegistry()
        self._events = events if events is not None else EventEmitter()
        self._busy_policy = BusyPolicy(busy_policy)
        self._state = RunState.IDLE
        # Queued runs (busy_policy=queue), oldest first. The front one is woken when idle.
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._current: asyncio.Task[None] | None = None

    # ---- registry ----

    def add_task(
        self,
        name: str,
        callback: TaskCallback,
        dependencies: list[str] | None = None,
    ) -> Executor:
        if not callable(callback):
            raise TypeError(f"Task '{name}' callback must be callable, got {type(callback).__name__}")
        self._registry.add(name, callback, dependencies)
        return self

    def task(
        self,
        name: str | None = None,
        *,
        depends_on: Iterable[str] = (),
    ) -> Callable[[TaskCallback], TaskCallback]:
        """
        Decorator form of add_task:

            @executor.task(depends_on=["build"])
            def deploy() -> None: ...
        """

        def decorator(func: TaskCallback) -> TaskCallback:
            self.add_task(name or func.__name__, func, list(depends_on))
            return func

        return decorator

    def has_task(self, name: str) -> bool:
        return name in self._registry

    def get_task(self, name: str) -> Task | None:
        """Live task record (not a copy), or None."""
        return self._registry.get(name)

    def remove_task(self, name: str) -> Executor:
        self._registry.remove(name)
        return self

    @property
    def task_names(self) -> list[str]:
        return self._registry.names()

    # ---- events ----

    @property
    def events(self) -> EventEmitter:
        return self._events

    def on(self, event: str, handler: EventHandler) -> Executor:
        self._events.on(event, handler)
        return self

    def once(self, event: str, handler: EventHandler) -> Executor:
        self._events.once(event, handler)
        return self

    def off(self, event: str, handler: EventHandler) -> Executor:
        self._events.off(event, handler)
        return self

    # ---- run state ----

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is RunState.RUNNING

    @property
    def busy_policy(self) -> BusyPolicy:
        return self._busy_policy

    def resolve(self, *names: str) -> list[str]:
        """Execution sequence for `names` (all registered tasks when empty)."""
        requested = list(names) if names else self._registry.names()
        return resolve_sequence(self._registry, requested)

    # ---- execution ----

    def execute(self, *names: str) -> asyncio.Task[None]:
        """
        Start a run and return the asyncio task that completes after `finish`.

        Must be called from code running on an event loop. Raises
        CyclicDependencyError synchronously, and ExecutorBusyError when a run
        is active and the busy policy is reject.
        """
        loop = asyncio.get_running_loop()

        if self._state is RunState.RUNNING or self._waiters:
            if self._busy_policy is BusyPolicy.REJECT:
                logger.warning("Run rejected, executor is busy (requested=%s)", list(names))
                raise ExecutorBusyError("A run is already active on this executor")

            waiter: asyncio.Future[None] = loop.create_future()
            self._waiters.append(waiter)
            logger.debug("Run queued (requested=%s, queued=%d)", list(names), len(self._waiters))
            queued = loop.create_task(self._run_queued(waiter, names))
            # Cancelled before its first step, the coroutine never runs: clean up from outside.
            queued.add_done_callback(lambda _t: self._drop_waiter(waiter))
            return queued

        sequence = self._begin(names)
        runner = loop.create_task(self._walk(sequence))
        self._current = runner
        runner.add_done_callback(self._release)
        return runner

    run = execute

    def _begin(self, names: Sequence[str]) -> list[str]:
        sequence = self.resolve(*names)
        self._state = RunState.RUNNING
        logger.info("Run started: %d task(s) %s", len(sequence), sequence)
        return sequence

    def _set_idle(self) -> None:
        self._state = RunState.IDLE
        self._wake_next()

    def _release(self, run: asyncio.Task[None]) -> None:
        # A run cancelled before its first step never enters _walk's finally.
        if run is self._current and self._state is RunState.RUNNING:
            self._current = None
            self._set_idle()

    def _wake_next(self) -> None:
        if self._state is RunState.RUNNING or not self._waiters:
            return
        front = self._waiters[0]
        if not front.done():
            front.set_result(None)

    def _drop_waiter(self, waiter: asyncio.Future[None]) -> None:
        if waiter not in self._waiters:
            return
        self._waiters.remove(waiter)
        if not waiter.done():
            waiter.cancel()
        self._wake_next()

    async def _run_queued(self, waiter: asyncio.Future[None], names: Sequence[str]) -> None:
        await waiter
        self._waiters.remove(waiter)
        try:
            sequence = self._begin(names)
        except SequentError:
            self._wake_next()
            raise
        await self._walk(sequence)

    async def _walk(self, sequence: list[str]) -> None:
        try:
            self._events.emit(ExecutorEvent.START)
            await asyncio.sleep(0)

            for name in sequence:
                await self._step(name)
                # One scheduled continuation per step: stack depth does not grow with the sequence.
                await asyncio.sleep(0)
        finally:
            self._current = None
            self._set_idle()

        logger.info("Run finished: %d task(s)", len(sequence))
        self._events.emit(ExecutorEvent.FINISH)

    async def _step(self, name: str) -> None:
        task = self._registry.get(name)
        if task is None:
            logger.warning("Task %r was removed before its step, aborting run", name)
            raise TaskNotFoundError(name)

        logger.debug("Task %r starting", name)
        self._events.emit(ExecutorEvent.TASK_START, name)
        try:
            result = task.callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning("Task %r failed: %s", name, e)
            self._events.emit(ExecutorEvent.TASK_ERROR, name, e)
            raise TaskFailedError(name, e) from e

        task.done = True
        logger.debug("Task %r done", name)
        self._events.emit(ExecutorEvent.TASK_DONE, name)

    def __repr__(self) -> str:
        return f"<Executor(tasks={len(self._registry)}, state={self._state.value})>"
