"""Tests for the rebuild coordinator and file watcher."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

from watchdog.events import (
    DirDeletedEvent,
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from postfinder.index.watcher import (
    IndexWatcher,
    MarkdownEventHandler,
    RebuildCoordinator,
    watch,
)


class TestRebuildCoordinator:
    """Test rebuild scheduling."""

    def test_single_notify_rebuilds_once(self) -> None:
        calls = []
        coordinator = RebuildCoordinator(lambda: calls.append(1))
        coordinator.start()
        try:
            coordinator.notify()
            assert coordinator.wait_idle(5)
        finally:
            coordinator.stop(5)

        assert calls == [1]
        assert coordinator.rebuilds == 1

    def test_events_during_rebuild_coalesce(self) -> None:
        """Many changes during a rebuild lead to exactly one more rebuild."""
        started = threading.Event()
        release = threading.Event()
        calls = []

        def rebuild() -> None:
            calls.append(1)
            if len(calls) == 1:
                started.set()
                release.wait(5)

        coordinator = RebuildCoordinator(rebuild)
        coordinator.start()
        try:
            coordinator.notify()
            assert started.wait(5)
            for _ in range(10):
                coordinator.notify()
            assert coordinator.busy
            release.set()
            assert coordinator.wait_idle(5)
        finally:
            coordinator.stop(5)

        assert len(calls) == 2

    def test_failure_keeps_running(self) -> None:
        """A failing rebuild is logged and later rebuilds still run."""
        attempts = []

        def rebuild() -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")

        coordinator = RebuildCoordinator(rebuild)
        coordinator.start()
        try:
            coordinator.notify()
            assert coordinator.wait_idle(5)
            coordinator.notify()
            assert coordinator.wait_idle(5)
        finally:
            coordinator.stop(5)

        assert coordinator.failures == 1
        assert coordinator.rebuilds == 1

    def test_callback_only_after_success(self) -> None:
        on_rebuilt = MagicMock()
        outcomes = [RuntimeError("boom"), None]

        def rebuild() -> None:
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome

        coordinator = RebuildCoordinator(rebuild, on_rebuilt)
        coordinator.start()
        try:
            coordinator.notify()
            assert coordinator.wait_idle(5)
            on_rebuilt.assert_not_called()
            coordinator.notify()
            assert coordinator.wait_idle(5)
        finally:
            coordinator.stop(5)

        on_rebuilt.assert_called_once_with()

    def test_wait_idle_times_out(self) -> None:
        """Without a worker, pending work never drains."""
        coordinator = RebuildCoordinator(lambda: None)
        coordinator.notify()

        assert coordinator.wait_idle(0.05) is False


class TestMarkdownEventHandler:
    """Test which file events trigger a rebuild."""

    def _handler(self, tmp_path: Path) -> tuple[MarkdownEventHandler, MagicMock]:
        coordinator = MagicMock()
        return MarkdownEventHandler(tmp_path, coordinator), coordinator

    def test_markdown_changes_notify(self, tmp_path: Path) -> None:
        handler, coordinator = self._handler(tmp_path)
        path = str(tmp_path / "post.md")

        for event in (FileCreatedEvent(path), FileModifiedEvent(path), FileDeletedEvent(path)):
            handler.on_any_event(event)

        assert coordinator.notify.call_count == 3

    def test_rename_to_markdown_notifies(self, tmp_path: Path) -> None:
        handler, coordinator = self._handler(tmp_path)

        handler.on_any_event(FileMovedEvent(str(tmp_path / "draft.txt"), str(tmp_path / "post.md")))

        coordinator.notify.assert_called_once_with()

    def test_other_files_ignored(self, tmp_path: Path) -> None:
        handler, coordinator = self._handler(tmp_path)

        handler.on_any_event(FileModifiedEvent(str(tmp_path / "image.png")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".post.md.swp")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".drafts" / "post.md")))

        coordinator.notify.assert_not_called()

    def test_outside_root_ignored(self, tmp_path: Path) -> None:
        handler, coordinator = self._handler(tmp_path / "content")

        handler.on_any_event(FileModifiedEvent(str(tmp_path / "elsewhere.md")))

        coordinator.notify.assert_not_called()

    def test_close_events_ignored(self, tmp_path: Path) -> None:
        handler, coordinator = self._handler(tmp_path)

        handler.on_any_event(FileClosedEvent(str(tmp_path / "post.md")))

        coordinator.notify.assert_not_called()

    def test_directory_events(self, tmp_path: Path) -> None:
        """Removing a folder notifies; touching one does not."""
        handler, coordinator = self._handler(tmp_path)

        handler.on_any_event(DirModifiedEvent(str(tmp_path / "docker")))
        coordinator.notify.assert_not_called()

        handler.on_any_event(DirDeletedEvent(str(tmp_path / "docker")))
        coordinator.notify.assert_called_once_with()


class TestIndexWatcher:
    """Test the watcher end to end with the observer replaced."""

    def test_initial_build_and_rebuild(self, tmp_path: Path, content_dir: Path, write_post) -> None:
        """Builds on start and again after a post changes."""
        write_post("a.md", "Alpha")
        output = tmp_path / "public" / "search-index.json"
        rebuilt = MagicMock()

        with patch("postfinder.index.watcher.Observer") as observer_cls:
            watcher = IndexWatcher(content_dir, output, on_rebuilt=rebuilt)
            watcher.start()
            try:
                assert watcher.coordinator.wait_idle(5)
                assert [item["slug"] for item in json.loads(output.read_text())] == ["a"]

                new_post = write_post("b.md", "Bravo")
                watcher.handler.on_any_event(FileCreatedEvent(str(new_post.resolve())))
                assert watcher.coordinator.wait_idle(5)
            finally:
                watcher.stop()

        assert [item["slug"] for item in json.loads(output.read_text())] == ["a", "b"]
        assert rebuilt.call_count == 2
        observer_cls.return_value.schedule.assert_called_once()
        observer_cls.return_value.stop.assert_called_once_with()

    def test_watch_touches_marker(self, tmp_path: Path, content_dir: Path, write_post) -> None:
        """The default callback rewrites the freshness marker."""
        write_post("a.md", "Alpha")
        output = tmp_path / "index.json"
        marker = tmp_path / ".stamp"
        stop_event = threading.Event()
        built = threading.Event()

        def on_start(self) -> None:
            self.coordinator.start()
            self.coordinator.notify()
            self.coordinator.wait_idle(5)
            built.set()
            stop_event.set()

        with patch.object(IndexWatcher, "start", on_start):
            watch(content_dir, output, marker_path=marker, stop_event=stop_event)

        assert built.is_set()
        assert output.exists()
        assert marker.read_text().startswith("refreshed at ")
