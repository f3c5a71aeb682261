"""
Tracked background tasks
Fire-and-forget work (audit writes, sync passes, timers) is spawned here
instead of being detached, so shutdown can join it.
"""

import asyncio
from typing import Awaitable, Optional, Set
from loguru import logger


class BackgroundTaskGroup:
    """
    Owns every task spawned off the caller's critical path.
    
    Usage:
        tasks = BackgroundTaskGroup("audit")
        tasks.spawn(sink.save(record))
        ...
        await tasks.join()      # on shutdown
    """
    
    def __init__(self, name: str = "background"):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False
    
    def spawn(self, coro: Awaitable, name: Optional[str] = None) -> Optional[asyncio.Task]:
        """Schedule a coroutine without awaiting it"""
        if self._closed:
            logger.warning(f"[{self.name}] Task group closed, dropping {name or 'task'}")
            coro.close()
            return None
        
        task = asyncio.ensure_future(coro)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task
    
    def _on_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[{self.name}] Background task {task.get_name()} failed: {exc}")
    
    @property
    def pending(self) -> int:
        return len(self._tasks)
    
    async def join(self, timeout: Optional[float] = None):
        """Wait for every outstanding task; cancel whatever is left after timeout"""
        self._closed = True
        if not self._tasks:
            return
        
        tasks = list(self._tasks)
        done, still_running = await asyncio.wait(tasks, timeout=timeout)
        
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"[{self.name}] Cancelled {len(still_running)} task(s) on shutdown")
        
        logger.debug(f"[{self.name}] Joined {len(done)} task(s)")
