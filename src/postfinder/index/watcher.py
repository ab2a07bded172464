"""Rebuild the search index whenever posts change.

File events arrive on watchdog's observer thread and only mark the
coordinator dirty. A single worker thread performs the rebuilds, so at most
one rebuild runs at a time and any number of events during a rebuild
collapse into one follow-up rebuild.
"""

from __future__ import annotations

import logging
import threading
import time
from functools import partial
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from postfinder.index.indexer import Indexer
from postfinder.index.storage import touch_marker
from postfinder.utils.files import is_hidden, is_markdown

LOGGER = logging.getLogger(__name__)


class RebuildCoordinator:
    """Runs ``rebuild`` on a worker thread with at most one pending request."""

    def __init__(
        self,
        rebuild: Callable[[], object],
        on_rebuilt: Optional[Callable[[], None]] = None,
    ) -> None:
        self._rebuild = rebuild
        self._on_rebuilt = on_rebuilt
        self._condition = threading.Condition()
        self._dirty = False
        self._running = False
        self._stopped = False
        self._thread: threading.Thread | None = None
        self.rebuilds = 0
        self.failures = 0

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="postfinder-rebuild", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        with self._condition:
            self._stopped = True
            self._condition.notify_all()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def notify(self) -> None:
        """Request a rebuild; coalesces with any request already pending."""
        with self._condition:
            self._dirty = True
            self._condition.notify_all()

    @property
    def busy(self) -> bool:
        with self._condition:
            return self._dirty or self._running

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no rebuild is running or pending."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._condition:
            while self._dirty or self._running:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._condition.wait(remaining)
        return True

    def _run(self) -> None:
        while True:
            with self._condition:
                while not self._dirty and not self._stopped:
                    self._condition.wait()
                if self._stopped:
                    return
                self._dirty = False
                self._running = True

            self._run_once()

            with self._condition:
                self._running = False
                self._condition.notify_all()

    def _run_once(self) -> None:
        try:
            self._rebuild()
        except Exception:
            self.failures += 1
            LOGGER.exception("Rebuilding the search index failed; still watching")
            return

        self.rebuilds += 1
        if self._on_rebuilt is None:
            return
        try:
            self._on_rebuilt()
        except Exception:
            LOGGER.exception("Post-rebuild callback failed")


class MarkdownEventHandler(FileSystemEventHandler):
    """Forwards changes to markdown posts under ``root`` to the coordinator."""

    def __init__(self, root: Path, coordinator: RebuildCoordinator) -> None:
        super().__init__()
        self.root = Path(root)
        self.coordinator = coordinator

    def _relevant(self, raw_path: str | bytes) -> bool:
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        if not raw_path:
            return False
        path = Path(raw_path)
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return False
        return is_markdown(path) and not is_hidden(relative)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        if event.is_directory:
            # Removing or moving a folder takes its posts with it.
            if event.event_type in ("deleted", "moved"):
                LOGGER.debug("Directory %s: %s", event.event_type, event.src_path)
                self.coordinator.notify()
            return

        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(self._relevant(path) for path in paths):
            LOGGER.debug("Post %s: %s", event.event_type, event.src_path)
            self.coordinator.notify()


class IndexWatcher:
    """Builds the index once, then keeps it current while posts change."""

    def __init__(
        self,
        content_dir: Path,
        output_path: Path,
        *,
        on_rebuilt: Optional[Callable[[], None]] = None,
    ) -> None:
        self.content_dir = Path(content_dir).resolve()
        self.indexer = Indexer(self.content_dir, output_path)
        self.coordinator = RebuildCoordinator(self.indexer.build, on_rebuilt)
        self.handler = MarkdownEventHandler(self.content_dir, self.coordinator)
        self._observer = None

    def start(self) -> None:
        self.coordinator.start()
        self.coordinator.notify()
        observer = Observer()
        observer.schedule(self.handler, str(self.content_dir), recursive=True)
        observer.start()
        self._observer = observer
        LOGGER.info("Watching %s for changes", self.content_dir)

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self.coordinator.stop()


def watch(
    content_dir: Path,
    output_path: Path,
    *,
    marker_path: Path | None = None,
    on_rebuilt: Optional[Callable[[], None]] = None,
    stop_event: threading.Event | None = None,
) -> None:
    """Watch ``content_dir`` until ``stop_event`` is set or interrupted.

    Without an explicit ``on_rebuilt`` callback, each successful rebuild
    touches ``marker_path`` (when given).
    """
    if on_rebuilt is None and marker_path is not None:
        on_rebuilt = partial(touch_marker, marker_path)

    watcher = IndexWatcher(content_dir, output_path, on_rebuilt=on_rebuilt)
    watcher.start()
    if stop_event is None:
        stop_event = threading.Event()
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        LOGGER.info("Stopping watcher")
    finally:
        watcher.stop()
