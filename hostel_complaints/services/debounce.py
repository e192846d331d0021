"""
Debounced async trigger

Each `schedule()` for a key cancels the previous not-yet-fired call for the
same key and starts a new quiet period. A call that has already fired is
never cancelled; it runs to completion and its result must be checked for
staleness by whoever applies it.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Hashable, Set

logger = logging.getLogger(__name__)


class DebouncedTrigger:
    """Per-key cancel-and-reschedule delayed tasks"""

    def __init__(self, delay: float):
        self.delay = delay
        self._pending: Dict[Hashable, asyncio.Task] = {}
        self._running: Dict[Hashable, Set[asyncio.Task]] = {}

    def schedule(self, key: Hashable, factory: Callable[[], Awaitable[None]]) -> asyncio.Task:
        """Run `factory()` after the quiet period unless rescheduled first"""
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(self._run(key, factory))
        self._pending[key] = task
        return task

    async def _run(self, key: Hashable, factory: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)

        # Fired: from here on the call can no longer be cancelled by cancel()
        task = asyncio.current_task()
        if self._pending.get(key) is task:
            del self._pending[key]
        running = self._running.setdefault(key, set())
        running.add(task)
        try:
            await factory()
        except Exception:
            logger.exception(f"Debounced call for {key!r} failed")
        finally:
            running.discard(task)
            if not running:
                self._running.pop(key, None)

    def cancel(self, key: Hashable) -> bool:
        """Cancel the not-yet-fired call for `key`, if any"""
        task = self._pending.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self, key: Hashable) -> bool:
        """True while a call for `key` is waiting or running"""
        return key in self._pending or bool(self._running.get(key))

    async def wait(self, key: Hashable) -> None:
        """Wait for the scheduled and running calls of `key` to finish"""
        tasks = list(self._running.get(key, ()))
        pending = self._pending.get(key)
        if pending is not None:
            tasks.append(pending)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel everything, waiting or running"""
        tasks = list(self._pending.values())
        for running in self._running.values():
            tasks.extend(running)
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._running.clear()
