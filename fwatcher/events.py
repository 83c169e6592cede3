"""
Change events and the watchdog-backed watch source.

The watch source registers one recursive watch per directory on a watchdog
observer. Observer threads push ChangeEvent values onto a queue and the
controller consumes them from a single loop.
"""

import enum
import logging
import os
import queue
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

from watchdog.events import (DirCreatedEvent, DirDeletedEvent, DirMovedEvent,
                             FileCreatedEvent, FileDeletedEvent, FileModifiedEvent,
                             FileMovedEvent, FileSystemEvent, FileSystemEventHandler)
from watchdog.observers import Observer

from fwatcher.errors import WatchRegistrationError, WatchSourceError

logger = logging.getLogger(__name__)

# Seconds between observer liveness checks while waiting for an event.
LIVENESS_CHECK_INTERVAL = 1.0


class EventKind(enum.Enum):
    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    OTHER = "other"


@dataclass(frozen=True)
class ChangeEvent:
    """A single file-system change. ``path`` is None for OTHER events."""

    kind: EventKind
    path: Optional[str] = None

    @classmethod
    def created(cls, path: str) -> "ChangeEvent":
        return cls(EventKind.CREATED, path)

    @classmethod
    def modified(cls, path: str) -> "ChangeEvent":
        return cls(EventKind.MODIFIED, path)

    @classmethod
    def removed(cls, path: str) -> "ChangeEvent":
        return cls(EventKind.REMOVED, path)

    @classmethod
    def other(cls) -> "ChangeEvent":
        return cls(EventKind.OTHER)

    @property
    def actionable(self) -> bool:
        return self.kind in (EventKind.CREATED, EventKind.MODIFIED)

    @classmethod
    def from_watchdog(cls, event: FileSystemEvent) -> "ChangeEvent":
        """
        Convert a watchdog event.

        A move is reported as the creation of its destination, so saves that
        write a temporary file and rename it over the target are seen.
        Directory modifications and open/close notifications map to OTHER.
        """
        path = os.fsdecode(event.src_path)
        if isinstance(event, (FileMovedEvent, DirMovedEvent)):
            return cls.created(os.path.normpath(os.fsdecode(event.dest_path)))
        if isinstance(event, (FileCreatedEvent, DirCreatedEvent)):
            return cls.created(os.path.normpath(path))
        if isinstance(event, FileModifiedEvent):
            return cls.modified(os.path.normpath(path))
        if isinstance(event, FileDeletedEvent):
            return cls.removed(os.path.normpath(path))
        return cls.other()


def _root_key(path) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class _Closed:
    def __init__(self, reason: str):
        self.reason = reason


class _QueueingHandler(FileSystemEventHandler):
    """Forwards every watchdog event to the source's queue."""

    def __init__(self, events: "queue.Queue", roots: Sequence[str]):
        self.events = events
        self.roots = {_root_key(root) for root in roots}

    def on_any_event(self, event: FileSystemEvent) -> None:
        self.events.put(ChangeEvent.from_watchdog(event))
        if isinstance(event, DirDeletedEvent) and _root_key(event.src_path) in self.roots:
            self.events.put(_Closed(f"Watched directory {os.fsdecode(event.src_path)} was removed"))


class WatchSource:
    """
    Recursive watch over one or more directories.

    Attributes:
        directories (list): Directories to watch.
        recursive (bool): Whether subdirectories are watched too.
        events (queue.Queue): Channel of ChangeEvent values.
    """

    def __init__(
        self,
        directories: Sequence[str],
        recursive: bool = True,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self.directories: List[str] = list(directories)
        self.recursive = recursive
        self.events: "queue.Queue" = queue.Queue()
        self._observer_factory = observer_factory
        self._observer = None

    def start(self) -> None:
        """
        Register every directory and start the observer.

        Raises:
            WatchRegistrationError: If a directory does not exist or cannot be watched.
        """
        if not self.directories:
            raise WatchRegistrationError("No directories to watch")

        observer = self._observer_factory()
        handler = _QueueingHandler(self.events, self.directories)
        for directory in self.directories:
            if not os.path.isdir(directory):
                raise WatchRegistrationError(f"Can not watch {directory}: not a directory")
            try:
                observer.schedule(handler, directory, recursive=self.recursive)
            except OSError as e:
                raise WatchRegistrationError(f"Can not watch {directory}: {e}") from e

        try:
            observer.start()
        except OSError as e:
            raise WatchRegistrationError(f"Can not start watching {self.directories}: {e}") from e

        self._observer = observer
        logger.info("Watching %s (recursive=%s)", ", ".join(self.directories), self.recursive)

    def put(self, event: ChangeEvent) -> None:
        """Inject an event, as the observer threads do."""
        self.events.put(event)

    def close(self, reason: str = "watch source closed") -> None:
        """Close the channel; the consumer fails with WatchSourceError."""
        self.events.put(_Closed(reason))

    def check_alive(self) -> None:
        """
        Raise if the running observer, or any of its emitters, has died.

        Raises:
            WatchSourceError: If a watch stopped delivering events.
        """
        observer = self._observer
        if observer is None:
            return
        if not observer.is_alive():
            raise WatchSourceError("Watch observer stopped")
        for emitter in observer.emitters:
            if not emitter.is_alive():
                raise WatchSourceError(f"Stopped watching {emitter.watch.path}")

    def get(self, timeout: Optional[float] = None) -> ChangeEvent:
        """
        Block until the next event arrives.

        Queued events are always delivered before a dead observer is reported.

        Raises:
            WatchSourceError: If the channel was closed or the observer died.
            queue.Empty: If ``timeout`` elapsed without an event.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            wait = LIVENESS_CHECK_INTERVAL
            if deadline is not None:
                wait = max(0.0, min(wait, deadline - time.monotonic()))
            try:
                item = self.events.get(timeout=wait)
            except queue.Empty:
                self.check_alive()
                if deadline is not None and time.monotonic() >= deadline:
                    raise
                continue
            if isinstance(item, _Closed):
                raise WatchSourceError(item.reason)
            return item

    def __iter__(self) -> Iterator[ChangeEvent]:
        while True:
            yield self.get()

    def stop(self) -> None:
        """Stop the observer, if running."""
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout=2.0)
            logger.debug("Stopped watching %s", ", ".join(self.directories))
        self._observer = None
