"""
Knowledge Sync Coordinator
Keeps the vector knowledge base in step with its two sources:
1. The static rules file (FAQ entries)
2. Live catalog listings

Two triggers feed one sync() entry point:
- a periodic timer (initial delay, then a fixed interval)
- a debounced file-change signal from the watcher

Only one pass runs at a time. A trigger that finds a pass in flight is
skipped, not queued; the next trigger picks up whatever it missed.
"""

import asyncio
import threading
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Optional

from loguru import logger

from ..agents.background import BackgroundTaskGroup
from .knowledge_store import VectorKnowledgeStore
from .sources import KnowledgeRulesFile, read_catalog_documents
from .watcher import KnowledgeFileWatcher


class SyncLock:
    """
    Single-slot exclusion token for sync passes
    
    try_acquire never blocks. Safe to probe from any thread.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
    
    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)
    
    def release(self):
        self._lock.release()
    
    def locked(self) -> bool:
        return self._lock.locked()


@dataclass
class SyncResult:
    """Outcome of one sync() call"""
    skipped: bool = False
    policy_documents: int = 0
    catalog_documents: int = 0
    upserted: int = 0
    error: Optional[str] = None
    duration_ms: int = 0
    finished_at: Optional[str] = None
    
    def to_dict(self) -> dict:
        return asdict(self)


class KnowledgeSyncCoordinator:
    """
    Merges rules file + catalog into the knowledge store
    
    Usage:
        coordinator = KnowledgeSyncCoordinator(store, rules_file, catalog, SyncLock())
        await coordinator.start()
        ...
        await coordinator.stop()
    """
    
    def __init__(
        self,
        knowledge_store: VectorKnowledgeStore,
        rules_file: Optional[KnowledgeRulesFile],
        catalog_source,
        lock: SyncLock,
        collection: str = "stays_knowledge",
        interval_seconds: float = 3600,
        initial_delay_seconds: float = 10,
        debounce_seconds: float = 2.0,
        page_size: int = 200,
        task_group: Optional[BackgroundTaskGroup] = None
    ):
        """
        Args:
            knowledge_store: Destination store
            rules_file: Static FAQ source (None to disable)
            catalog_source: Object exposing async iter_rows(page_size) (None to disable)
            lock: Exclusion token shared by every trigger
            collection: Vector collection name
            interval_seconds: Timer period
            initial_delay_seconds: Delay before the first timer pass
            debounce_seconds: Quiet period after the last file event
            page_size: Catalog page size
            task_group: Owner of spawned passes (created when omitted)
        """
        self.knowledge_store = knowledge_store
        self.rules_file = rules_file
        self.catalog_source = catalog_source
        self.lock = lock
        self.collection = collection
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.debounce_seconds = debounce_seconds
        self.page_size = page_size
        self.task_group = task_group or BackgroundTaskGroup("knowledge-sync")
        
        self.running = False
        self.last_result: Optional[SyncResult] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: List[asyncio.Task] = []
        self._watcher: Optional[KnowledgeFileWatcher] = None
    
    @property
    def is_syncing(self) -> bool:
        return self.lock.locked()
    
    # ============================================
    # Sync pass
    # ============================================
    
    async def sync(self) -> SyncResult:
        """
        Run one pass unless another is in flight
        
        Returns:
            SyncResult: skipped=True when the lock was held
        """
        if not self.lock.try_acquire():
            logger.info("Knowledge sync already running, skipping this trigger")
            return SyncResult(skipped=True)
        
        started = time.perf_counter()
        result = SyncResult()
        try:
            policy_docs = []
            if self.rules_file is not None:
                loop = asyncio.get_running_loop()
                policy_docs = await loop.run_in_executor(None, self.rules_file.read_documents)
            catalog_docs = []
            if self.catalog_source is not None:
                catalog_docs = await read_catalog_documents(self.catalog_source, self.page_size)
            
            documents = [doc.content for doc in policy_docs + catalog_docs]
            result.policy_documents = len(policy_docs)
            result.catalog_documents = len(catalog_docs)
            result.upserted = await self.knowledge_store.replace(self.collection, documents)
            
            logger.info(
                f"Knowledge sync complete: {result.policy_documents} policy + "
                f"{result.catalog_documents} catalog documents, {result.upserted} upserted"
            )
        except Exception as e:
            logger.error(f"Knowledge sync failed: {e}")
            result.error = str(e)
        finally:
            self.lock.release()
            result.duration_ms = int((time.perf_counter() - started) * 1000)
            result.finished_at = datetime.now().isoformat()
            self.last_result = result
        
        return result
    
    # ============================================
    # Triggers
    # ============================================
    
    async def _timer_loop(self):
        await asyncio.sleep(self.initial_delay_seconds)
        while self.running:
            await self.sync()
            await asyncio.sleep(self.interval_seconds)
    
    def notify_file_changed(self):
        """Thread-safe entry point for file events"""
        loop = self._loop
        if loop is None or loop.is_closed() or not self.running:
            return
        loop.call_soon_threadsafe(self._schedule_debounced)
    
    def _schedule_debounced(self):
        # Every new event restarts the quiet period
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._loop.call_later(
            self.debounce_seconds,
            self._fire_debounced
        )
    
    def _fire_debounced(self):
        self._debounce_handle = None
        if not self.running:
            return
        logger.info("Knowledge file changed, triggering sync")
        self.task_group.spawn(self.sync(), name="knowledge-sync:file")
    
    # ============================================
    # Lifecycle
    # ============================================
    
    async def start(self, watch_file: bool = True):
        """Start the timer loop and, optionally, the file watcher"""
        if self.running:
            return
        
        self._loop = asyncio.get_running_loop()
        self.running = True
        self._tasks.append(asyncio.create_task(self._timer_loop()))
        
        if watch_file and self.rules_file is not None:
            self._watcher = KnowledgeFileWatcher(self.rules_file.path, self.notify_file_changed)
            self._watcher.start()
        
        logger.info(
            f"Knowledge sync coordinator started "
            f"(first pass in {self.initial_delay_seconds}s, every {self.interval_seconds}s)"
        )
    
    async def stop(self, timeout: float = 10.0):
        """Stop triggers, cancel the timer and join in-flight passes"""
        self.running = False
        
        if self._watcher is not None:
            await asyncio.get_running_loop().run_in_executor(None, self._watcher.stop)
            self._watcher = None
        
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        
        await self.task_group.join(timeout=timeout)
        logger.info("Knowledge sync coordinator stopped")
