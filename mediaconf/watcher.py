"""Watching a configuration file for changes."""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

MIN_INTERVAL = 1.0
ADDITIONAL_WAIT = 0.01


def _resolve(path: str) -> str:
    """Resolve symlinks; an empty string if the file does not exist."""
    if not os.path.exists(path):
        return ""
    return os.path.realpath(path)


def _absolute(path: Any) -> str:
    path = os.path.abspath(os.fsdecode(path))
    return os.path.join(os.path.realpath(os.path.dirname(path)), os.path.basename(path))


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: "ConfWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher._on_event(event)


class ConfWatcher:
    """Signals when a configuration file is written, replaced or recreated."""

    def __init__(self, conf_path: str) -> None:
        os.stat(conf_path)

        self._watched_path = os.path.abspath(conf_path)
        self._previous = _resolve(self._watched_path)
        self._last_called: Optional[float] = None
        self._cond = threading.Condition()
        self._pending = False
        self._closed = False

        self._observer = Observer()
        self._observer.schedule(
            _Handler(self), os.path.dirname(self._watched_path), recursive=False
        )
        self._observer.start()

    def _touches(self, event: FileSystemEvent, current: str) -> bool:
        if event.event_type in ("modified", "created"):
            return _absolute(event.src_path) == current
        if event.event_type == "moved":
            return _absolute(getattr(event, "dest_path", "")) == current
        return False

    def _on_event(self, event: FileSystemEvent) -> None:
        if self._last_called is not None and time.monotonic() - self._last_called < MIN_INTERVAL:
            return

        current = _resolve(self._watched_path)
        if not current:
            # the file was removed; wait for it to come back
            self._previous = ""
            return

        if current != self._previous or self._touches(event, current):
            # give the writer some time to complete its job
            time.sleep(ADDITIONAL_WAIT)
            self._previous = current
            self._last_called = time.monotonic()
            with self._cond:
                self._pending = True
                self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for a change; True if one happened, False on timeout or close."""
        with self._cond:
            self._cond.wait_for(lambda: self._pending or self._closed, timeout)
            if self._pending:
                self._pending = False
                return True
            return False

    def close(self) -> None:
        """Stop watching."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        self._observer.stop()
        self._observer.join()

    def __enter__(self) -> "ConfWatcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()