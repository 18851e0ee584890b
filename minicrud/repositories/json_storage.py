"""
JSON-array file persistence shared by the user and record stores.

Each collection lives in a single file holding one JSON array. Reads never
fail: a missing or broken file is an empty collection. Writes go through
``JsonCollection.transact`` which serializes the whole load/mutate/write cycle
per file (thread lock + ``flock`` on a sidecar lock file) and replaces the
target atomically, so readers only ever see a complete old or new file.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional
import fcntl
import json
import logging
import os
import tempfile
import threading
import time

from minicrud.core.config import get_settings
from minicrud.core.errors import Busy, EncodingError, StorageIOError

logger = logging.getLogger("minicrud.storage")

Collection = List[Any]
Mutator = Callable[[Collection], Optional[Collection]]

_POLL_INTERVAL = 0.01

_thread_locks: dict[str, threading.Lock] = {}
_thread_locks_guard = threading.Lock()


def _thread_lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _thread_locks_guard:
        lock = _thread_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _thread_locks[key] = lock
        return lock


def encode(items: Collection) -> bytes:
    """Serialize a collection to the UTF-8 bytes stored on disk."""
    try:
        return (json.dumps(items, ensure_ascii=False, indent=2) + "\n").encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise EncodingError(f"Could not encode collection: {exc}") from exc


class JsonCollection:
    """A JSON array stored in one file, with atomic read-modify-write."""

    def __init__(self, path: Path | str, *, lock_timeout: float | None = None):
        self._path = Path(path)
        if lock_timeout is None:
            lock_timeout = get_settings().lock_timeout_seconds
        self.lock_timeout = lock_timeout

    def __repr__(self) -> str:
        return f"JsonCollection({str(self._path)!r})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return self._path.with_name(self._path.name + ".lock")

    # -------------------------------------- reads --------------------------------------
    def load(self) -> Collection:
        """Return the stored array, or ``[]`` when the file is absent or unusable."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s, treating as empty: %s", self._path, exc)
            return []
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("%s does not contain valid JSON, treating as empty", self._path)
            return []
        if not isinstance(data, list):
            logger.warning("%s does not contain a JSON array, treating as empty", self._path)
            return []
        return data

    def ensure_exists(self) -> None:
        """Create the file holding ``[]`` if it is not there yet."""
        if self._path.exists():
            return
        with self._locked():
            if not self._path.exists():
                self._write([])

    # -------------------------------------- writes --------------------------------------
    def transact(self, mutator: Mutator) -> Collection:
        """Run ``mutator`` on the current collection and persist its result.

        The mutator receives a freshly loaded list and returns the new list
        (returning ``None`` keeps the list it was given, mutated in place).
        Any exception it raises aborts the transaction and leaves the file
        untouched. Raises ``Busy`` when the lock cannot be taken in time.
        """
        with self._locked():
            current = self.load()
            result = mutator(current)
            if result is None:
                result = current
            self._write(result)
            logger.debug("Committed %d item(s) to %s", len(result), self._path)
            return result

    def _write(self, items: Collection) -> None:
        payload = encode(items)
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tf:
                tmp_name = tf.name
                tf.write(payload)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            logger.exception("Failed to write %s", self._path)
            raise StorageIOError(f"Could not write {self._path.name}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass

    # -------------------------------------- locking --------------------------------------
    @contextmanager
    def _locked(self) -> Iterator[None]:
        deadline = time.monotonic() + self.lock_timeout
        thread_lock = _thread_lock_for(self._path)
        if not thread_lock.acquire(timeout=self.lock_timeout):
            logger.warning("Timed out waiting for lock on %s", self._path)
            raise Busy()
        try:
            try:
                self.lock_path.parent.mkdir(parents=True, exist_ok=True)
                handle = open(self.lock_path, "a+")
            except OSError as exc:
                logger.exception("Cannot open lock file %s", self.lock_path)
                raise StorageIOError(f"Could not lock {self._path.name}") from exc
            with handle:
                while True:
                    try:
                        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                        break
                    except BlockingIOError:
                        if time.monotonic() >= deadline:
                            logger.warning("Timed out waiting for file lock on %s", self._path)
                            raise Busy()
                        time.sleep(_POLL_INTERVAL)
                try:
                    yield
                finally:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            thread_lock.release()
