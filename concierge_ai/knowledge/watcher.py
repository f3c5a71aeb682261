"""
Knowledge File Watcher
Watches the directory holding the rules file with watchdog and reports
changes to the sync coordinator. Events arrive on the observer thread;
the callback is responsible for hopping back onto the event loop.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from loguru import logger
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


class KnowledgeFileHandler(FileSystemEventHandler):
    """
    Calls on_change for events touching one file name
    
    Editors often write via rename, so moves onto the file count too.
    """
    
    def __init__(self, filename: str, on_change: Callable[[], None]):
        self.filename = filename
        self.on_change = on_change
    
    def _matches(self, path) -> bool:
        if not path:
            return False
        if isinstance(path, bytes):
            path = path.decode("utf-8", errors="ignore")
        return Path(path).name == self.filename
    
    def on_any_event(self, event):
        if event.is_directory:
            return
        if event.event_type not in ("created", "modified", "moved"):
            return
        
        if self._matches(event.src_path) or self._matches(getattr(event, "dest_path", None)):
            logger.debug(f"Knowledge file {event.event_type}: {self.filename}")
            self.on_change()


class KnowledgeFileWatcher:
    """
    Manages the watchdog observer lifecycle
    
    Usage:
        watcher = KnowledgeFileWatcher("knowledge.json", coordinator.notify_file_changed)
        watcher.start()
        ...
        watcher.stop()
    """
    
    def __init__(self, path: Union[str, Path], on_change: Callable[[], None]):
        self.path = Path(path).resolve()
        self.on_change = on_change
        self.observer: Optional[Observer] = None
    
    @property
    def is_running(self) -> bool:
        return self.observer is not None
    
    def start(self) -> bool:
        """
        Start watching in a background thread
        
        Returns:
            bool: False if the directory does not exist
        """
        if self.observer is not None:
            logger.warning("Knowledge file watcher already running")
            return True
        
        directory = self.path.parent
        if not directory.is_dir():
            logger.warning(f"Knowledge directory not found, not watching: {directory}")
            return False
        
        handler = KnowledgeFileHandler(self.path.name, self.on_change)
        self.observer = Observer()
        self.observer.schedule(handler, str(directory), recursive=False)
        self.observer.daemon = True
        self.observer.start()
        
        logger.info(f"Watching knowledge file: {self.path}")
        return True
    
    def stop(self):
        """Stop the observer and join its thread"""
        if self.observer is None:
            return
        
        self.observer.stop()
        self.observer.join(timeout=5)
        self.observer = None
        logger.info("Knowledge file watcher stopped")
