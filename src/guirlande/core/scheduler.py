"""Recurring and one-shot task scheduling on the asyncio loop."""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[Any]]]


class TaskHandle(ABC):
    """Handle on a scheduled task"""

    @property
    @abstractmethod
    def active(self) -> bool:
        pass

    @abstractmethod
    def stop(self) -> None:
        """Cancel further runs. A run already in progress completes."""
        pass


class Scheduler(ABC):
    """Scheduler interface used by presets, the guirlande and the registry"""

    @abstractmethod
    def run_recurring(self, key: str, callback: Callback, interval_ms: float) -> TaskHandle:
        """Run `callback` every `interval_ms`.

        At most one task exists per key: registering an active key again
        returns the existing handle.
        """
        pass

    @abstractmethod
    def run_once(self, callback: Callback, delay_ms: float) -> TaskHandle:
        """Run `callback` once after `delay_ms`"""
        pass

    @abstractmethod
    async def stop_all(self) -> None:
        """Cancel every scheduled task"""
        pass


async def invoke(callback: Callback, name: str) -> None:
    """Call a sync or async callback, logging failures"""
    try:
        result = callback()
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error(f"Scheduled task {name} failed: {e}", exc_info=True)


class AsyncioTaskHandle(TaskHandle):
    def __init__(self, scheduler: "AsyncioScheduler", name: str):
        self.name = name
        self._scheduler = scheduler
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def active(self) -> bool:
        return not self._stopped and self._task is not None and not self._task.done()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._scheduler._forget(self)
        if self._task is None or self._task.done():
            return
        if self._task is asyncio.current_task():
            # Stopped from inside its own callback: let the callback finish,
            # the loop exits on its next check.
            return
        self._task.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by asyncio tasks on the running loop"""

    def __init__(self):
        self._recurring: Dict[str, AsyncioTaskHandle] = {}
        self._handles: Set[AsyncioTaskHandle] = set()

    def run_recurring(self, key: str, callback: Callback, interval_ms: float) -> TaskHandle:
        existing = self._recurring.get(key)
        if existing is not None and existing.active:
            return existing

        handle = AsyncioTaskHandle(self, key)
        handle._task = asyncio.get_running_loop().create_task(
            self._recurring_loop(handle, callback, interval_ms / 1000)
        )
        self._recurring[key] = handle
        self._handles.add(handle)
        logger.debug(f"Scheduled recurring task {key} every {interval_ms:.0f}ms")
        return handle

    def run_once(self, callback: Callback, delay_ms: float) -> TaskHandle:
        handle = AsyncioTaskHandle(self, f"timer-{id(callback):x}")
        handle._task = asyncio.get_running_loop().create_task(
            self._timer(handle, callback, delay_ms / 1000)
        )
        self._handles.add(handle)
        return handle

    async def stop_all(self) -> None:
        handles = list(self._handles)
        for handle in handles:
            handle.stop()
        tasks = [h._task for h in handles if h._task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Scheduler stopped {len(handles)} tasks")

    async def _recurring_loop(
        self, handle: AsyncioTaskHandle, callback: Callback, interval_s: float
    ) -> None:
        try:
            while not handle._stopped:
                await asyncio.sleep(interval_s)
                if handle._stopped:
                    break
                await invoke(callback, handle.name)
        except asyncio.CancelledError:
            pass
        finally:
            self._forget(handle)

    async def _timer(
        self, handle: AsyncioTaskHandle, callback: Callback, delay_s: float
    ) -> None:
        try:
            await asyncio.sleep(delay_s)
            if not handle._stopped:
                await invoke(callback, handle.name)
        except asyncio.CancelledError:
            pass
        finally:
            handle._stopped = True
            self._forget(handle)

    def _forget(self, handle: AsyncioTaskHandle) -> None:
        self._handles.discard(handle)
        if self._recurring.get(handle.name) is handle:
            del self._recurring[handle.name]
