"""Thread-safe holder for the active policy snapshot."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from safetykit.config.models import PolicySnapshot
from safetykit.errors import ConfigurationAliasError


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers take priority over newly arriving readers so a steady
    stream of reads cannot starve a configuration change.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ConfigStore:
    """Holds the active :class:`PolicySnapshot`.

    Snapshots are replaced as a whole and never mutated. Before the first
    :meth:`set`, :meth:`get` returns an all-defaults snapshot.
    """

    def __init__(self, initial: PolicySnapshot | None = None) -> None:
        self._lock = ReadWriteLock()
        self._snapshot = initial
        self._empty = PolicySnapshot()

    def get(self) -> PolicySnapshot:
        with self._lock.read():
            return self._snapshot if self._snapshot is not None else self._empty

    def set(self, snapshot: PolicySnapshot) -> None:
        """Publish *snapshot*.

        Raises:
            ConfigurationAliasError: *snapshot* is the object already active.
        """
        with self._lock.write():
            if snapshot is not None and snapshot is self._snapshot:
                raise ConfigurationAliasError(
                    "set called with the existing configuration snapshot"
                )
            self._snapshot = snapshot
