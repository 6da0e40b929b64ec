import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers so a steady stream of readers cannot
    starve a refresh. A thread that already holds a read may take it again
    without waiting, so nested reads cannot deadlock behind a queued writer.
    Upgrading a held read to a write is not supported and raises
    ``RuntimeError`` instead of blocking forever.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._reader_threads: dict[int, int] = {}
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if me not in self._reader_threads:
                while self._writer or self._writers_waiting:
                    self._cond.wait()
            self._readers += 1
            self._reader_threads[me] = self._reader_threads.get(me, 0) + 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            held = self._reader_threads.get(me, 0)
            if not held:
                raise RuntimeError("release_read() called without a matching acquire_read()")
            if held == 1:
                del self._reader_threads[me]
            else:
                self._reader_threads[me] = held - 1
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            if threading.get_ident() in self._reader_threads:
                raise RuntimeError("cannot acquire the write lock while holding a read lock")
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
