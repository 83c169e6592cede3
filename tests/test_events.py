import os
import queue
import shutil
import time

import pytest
from watchdog.events import (DirCreatedEvent, DirModifiedEvent, DirMovedEvent,
                             FileCreatedEvent, FileDeletedEvent, FileModifiedEvent,
                             FileMovedEvent)

from fwatcher import events as events_module
from fwatcher.errors import WatchRegistrationError, WatchSourceError
from fwatcher.events import ChangeEvent, EventKind, WatchSource
from fwatcher.patterns import PatternFilter


@pytest.mark.parametrize("wd_event, kind", [
    (FileCreatedEvent("./src/app.py"), EventKind.CREATED),
    (DirCreatedEvent("./src/pkg"), EventKind.CREATED),
    (FileModifiedEvent("./src/app.py"), EventKind.MODIFIED),
    (FileDeletedEvent("./src/app.py"), EventKind.REMOVED),
])
def test_from_watchdog_maps_path_events(wd_event, kind):
    event = ChangeEvent.from_watchdog(wd_event)
    assert event.kind == kind
    assert event.path == os.path.normpath(wd_event.src_path)


@pytest.mark.parametrize("wd_event", [
    FileMovedEvent("src/.app.py.tmp123", "./src/app.py"),
    DirMovedEvent("src/old_pkg", "./src/app.py"),
])
def test_from_watchdog_maps_moves_to_created_destination(wd_event):
    event = ChangeEvent.from_watchdog(wd_event)
    assert event == ChangeEvent.created(os.path.join("src", "app.py"))


def test_from_watchdog_maps_directory_modification_to_other():
    event = ChangeEvent.from_watchdog(DirModifiedEvent("src"))
    assert event.kind == EventKind.OTHER
    assert event.path is None
    assert not event.actionable


def test_only_created_and_modified_are_actionable():
    assert ChangeEvent.created("a").actionable
    assert ChangeEvent.modified("a").actionable
    assert not ChangeEvent.removed("a").actionable


def test_start_rejects_missing_directory(tmp_path):
    source = WatchSource([str(tmp_path), str(tmp_path / "missing")])
    with pytest.raises(WatchRegistrationError):
        source.start()


def test_start_rejects_empty_directory_list():
    with pytest.raises(WatchRegistrationError):
        WatchSource([]).start()


def test_closed_source_raises_watch_source_error():
    source = WatchSource(["."])
    source.put(ChangeEvent.modified("a.py"))
    source.close("observer died")
    events = iter(source)
    assert next(events) == ChangeEvent.modified("a.py")
    with pytest.raises(WatchSourceError, match="observer died"):
        next(events)


def test_watchdog_delivers_file_changes(tmp_path):
    """Real file writes in any watched root reach the queue."""
    first = tmp_path / "first"
    second = tmp_path / "second" / "nested"
    first.mkdir()
    second.mkdir(parents=True)
    source = WatchSource([str(first), str(tmp_path / "second")])
    source.start()
    try:
        # Allow the observer to register its watches
        time.sleep(0.5)
        target = second / "app.py"
        target.write_text("print('hi')\n")

        seen = set()
        deadline = time.monotonic() + 10
        while time.monotonic() < deadline and str(target) not in seen:
            try:
                event = source.get(timeout=0.5)
            except queue.Empty:
                continue
            if event.actionable:
                seen.add(event.path)
        assert str(target) in seen
    finally:
        source.stop()


def _drain_relevant(source, path_filter, want, seconds=10):
    """Collect actionable, relevant paths until ``want`` is seen or time runs out."""
    seen = set()
    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline and want not in seen:
        try:
            event = source.get(timeout=0.5)
        except queue.Empty:
            continue
        if event.actionable and path_filter.is_relevant(event.path):
            seen.add(event.path)
    return seen


def test_rename_over_target_counts_as_change(tmp_path):
    """Editors that save via a temp file plus rename still trigger."""
    src = tmp_path / "src"
    src.mkdir()
    target = src / "app.py"
    target.write_text("x = 1\n")
    source = WatchSource([str(src)])
    source.start()
    try:
        time.sleep(0.5)
        temp = src / ".app.py.tmp123"
        temp.write_text("x = 2\n")
        os.replace(str(temp), str(target))

        seen = _drain_relevant(source, PatternFilter(["**/*.py"]), str(target))
        assert str(target) in seen
    finally:
        source.stop()


def test_removed_watch_root_ends_the_source(tmp_path):
    src = tmp_path / "src"
    (src / "pkg").mkdir(parents=True)
    source = WatchSource([str(src)])
    source.start()
    try:
        time.sleep(0.5)
        shutil.rmtree(str(src))

        deadline = time.monotonic() + 10
        with pytest.raises(WatchSourceError):
            while time.monotonic() < deadline:
                try:
                    source.get(timeout=0.5)
                except queue.Empty:
                    continue
    finally:
        source.stop()


class _DeadEmitter:
    class watch:
        path = "src"

    def is_alive(self):
        return False


class _FakeObserver:
    """Observer whose single emitter dies right after starting."""

    def __init__(self):
        self.emitters = set()

    def schedule(self, handler, path, recursive=False):
        self.emitters.add(_DeadEmitter())

    def start(self):
        pass

    def is_alive(self):
        return True

    def stop(self):
        pass

    def join(self, timeout=None):
        pass


def test_dead_emitter_is_reported_as_watch_error(tmp_path, monkeypatch):
    monkeypatch.setattr(events_module, "LIVENESS_CHECK_INTERVAL", 0.05)
    source = WatchSource([str(tmp_path)], observer_factory=_FakeObserver)
    source.start()
    with pytest.raises(WatchSourceError, match="Stopped watching src"):
        source.get()


def test_queued_events_are_delivered_before_a_dead_emitter(tmp_path, monkeypatch):
    monkeypatch.setattr(events_module, "LIVENESS_CHECK_INTERVAL", 0.05)
    source = WatchSource([str(tmp_path)], observer_factory=_FakeObserver)
    source.start()
    source.put(ChangeEvent.modified("src/app.py"))
    assert source.get() == ChangeEvent.modified("src/app.py")
    with pytest.raises(WatchSourceError):
        source.get()
