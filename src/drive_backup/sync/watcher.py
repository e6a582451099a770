"""Watch tracked files and re-upload them when they change.

Filesystem events arrive on watchdog observer threads and are handed to the
asyncio loop, which owns all watcher state. Changes are collected in an
``UploadQueue``: a set of pending paths plus one outstanding deadline. Every
queued change pushes the deadline back, so a burst of saves collapses into a
single processing pass once things go quiet. Only one pass runs at a time.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Set

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from ..config.settings import SyncConfig
from .backup_manager import BackupManager

logger = logging.getLogger(__name__)


class UploadQueue:
    """Debounced, coalescing set of paths waiting for upload."""

    def __init__(self, process: Callable[[List[str]], Awaitable[None]],
                 debounce_delay: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize upload queue.

        Args:
            process: Coroutine function uploading one batch of paths
            debounce_delay: Quiet period in seconds before a pass starts
            loop: Event loop owning the queue (defaults to the running loop)
        """
        self._process = process
        self.debounce_delay = debounce_delay
        self._loop = loop or asyncio.get_running_loop()
        self.pending: Set[str] = set()
        self.is_processing = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    def queue(self, path: str):
        """Add a path and restart the quiet period."""
        self.pending.add(path)
        self._schedule()

    def _schedule(self):
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.debounce_delay, self._on_deadline)

    def _on_deadline(self):
        self._timer = None
        task = self._loop.create_task(self.process_pending())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def process_pending(self):
        """Upload everything queued so far, unless a pass is already running."""
        if self.is_processing or not self.pending:
            return

        self.is_processing = True
        try:
            batch = list(self.pending)
            self.pending.clear()
            await self._process(batch)
        finally:
            self.is_processing = False
            # Paths queued while the pass ran get their own pass
            if self.pending and self._timer is None:
                self._schedule()

    async def close(self):
        """Drop the pending deadline and wait for a pass that is already running."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.pending:
            logger.warning(f"⚠️ Dropping {len(self.pending)} queued change(s) on shutdown")
            self.pending.clear()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


class _FileEventHandler(FileSystemEventHandler):
    """Forward content changes of one file to the watcher."""

    def __init__(self, watcher: "ChangeWatcher", file_path: str):
        self.watcher = watcher
        self.file_path = file_path
        self._resolved = Path(file_path).resolve()

    def _matches(self, path) -> bool:
        return Path(os.fsdecode(path)).resolve() == self._resolved

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory and self._matches(event.src_path):
            self.watcher.notify_file_changed(self.file_path)

    def on_moved(self, event: FileSystemMovedEvent):
        # Editors that save by rename replace the file in one move
        if not event.is_directory and self._matches(event.dest_path):
            self.watcher.notify_file_changed(self.file_path)


class _DirectoryEventHandler(FileSystemEventHandler):
    """Forward any event in a watched directory to the watcher."""

    def __init__(self, watcher: "ChangeWatcher", dir_path: str):
        self.watcher = watcher
        self.dir_path = dir_path

    def on_any_event(self, event: FileSystemEvent):
        if event.is_directory or event.event_type not in ('created', 'modified', 'deleted', 'moved'):
            return
        path = event.dest_path if event.event_type == 'moved' else event.src_path
        self.watcher.notify_directory_event(self.dir_path, Path(os.fsdecode(path)).name)


class ChangeWatcher:
    """Re-upload tracked files shortly after they change."""

    def __init__(self, manager: BackupManager, config: Optional[SyncConfig] = None,
                 observer_factory: Callable[[], Observer] = Observer):
        """Initialize change watcher.

        Args:
            manager: Initialized backup manager used for uploads
            config: Sync configuration (defaults to the manager's)
            observer_factory: Builds the watchdog observer
        """
        self.manager = manager
        self.config = config or manager.config
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.watches: Dict[str, ObservedWatch] = {}
        self.queue: Optional[UploadQueue] = None
        self._settling: Set[asyncio.TimerHandle] = set()

    async def start(self):
        """Subscribe to every configured file and directory."""
        self._loop = asyncio.get_running_loop()
        self.queue = UploadQueue(self.upload_batch, self.config.watch.debounce_delay, self._loop)
        self._observer = self._observer_factory()

        logger.info("👀 Starting file watchers...")
        for file_path in self.config.sync_files:
            self.watch_file(file_path)
        for dir_path in self.config.watch_dirs:
            self.watch_directory(dir_path)

        self._observer.start()
        logger.info("✅ Google Drive real-time sync started")

    def watch_file(self, file_path: str):
        if not Path(file_path).is_file():
            logger.warning(f"⚠️ File not found: {file_path}")
            return

        try:
            parent = str(Path(file_path).parent)
            self.watches[file_path] = self._observer.schedule(
                _FileEventHandler(self, file_path), parent, recursive=False
            )
            logger.info(f"👀 Watching: {file_path}")
        except OSError as e:
            logger.error(f"❌ Failed to watch {file_path}: {e}")

    def watch_directory(self, dir_path: str):
        if not Path(dir_path).is_dir():
            logger.warning(f"⚠️ Directory not found: {dir_path}")
            return

        try:
            self.watches[dir_path] = self._observer.schedule(
                _DirectoryEventHandler(self, dir_path), dir_path, recursive=False
            )
            logger.info(f"👀 Watching directory: {dir_path}/")
        except OSError as e:
            logger.error(f"❌ Failed to watch {dir_path}: {e}")

    # Observer threads call these; the real work happens on the loop.

    def notify_file_changed(self, file_path: str):
        self._loop.call_soon_threadsafe(self.on_file_changed, file_path)

    def notify_directory_event(self, dir_path: str, file_name: str):
        self._loop.call_soon_threadsafe(self.on_directory_event, dir_path, file_name)

    def on_file_changed(self, file_path: str):
        if self._observer is None:
            return
        self.queue.queue(file_path)

    def on_directory_event(self, dir_path: str, file_name: str):
        """Queue a dated file once it has had time to settle."""
        if self._observer is None or not self.config.is_memory_file(file_name):
            return

        full_path = str(Path(dir_path) / file_name)
        handle = None

        def settled():
            self._settling.discard(handle)
            if Path(full_path).exists():
                self.queue.queue(full_path)

        handle = self._loop.call_later(self.config.watch.settle_delay, settled)
        self._settling.add(handle)

    async def upload_batch(self, paths: List[str]):
        """Upload paths one after another; a failure only affects its own file."""
        for file_path in paths:
            logger.info(f"🔄 File changed: {file_path}")
            try:
                await asyncio.to_thread(self.manager.upload_file, file_path)
                logger.info(f"✅ Synced: {file_path}")
            except Exception as e:
                logger.error(f"❌ Failed to sync {file_path}: {e}")

    async def stop(self):
        """Cancel every subscription; queued but unprocessed changes are dropped."""
        for handle in self._settling:
            handle.cancel()
        self._settling.clear()

        if self._observer is not None:
            # Files in the same directory share one watch
            self._observer.unschedule_all()
            for path in self.watches:
                logger.info(f"🛑 Stopped watching: {path}")
            self._observer.stop()
            await asyncio.to_thread(self._observer.join)
            self._observer = None
        self.watches.clear()

        if self.queue is not None:
            await self.queue.close()

    async def __aenter__(self) -> "ChangeWatcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    async def run(self, stop_event: asyncio.Event):
        """Watch until ``stop_event`` is set."""
        async with self:
            await stop_event.wait()
            logger.info("🛑 Shutting down watchers...")
