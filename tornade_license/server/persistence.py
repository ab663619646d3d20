"""
Activation record stores.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from tornade_license.common.exceptions import StoreUnavailable
from tornade_license.common.models import ActivationRecord

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.01


class InMemoryActivationStore:
    """Process-local store, mainly for tests and single-process deployments."""

    def __init__(self) -> None:
        self._records: dict[str, list[str]] = {}
        self._lock = threading.Lock()
        self.writes = 0

    def get(self, key: str) -> ActivationRecord | None:
        with self._lock:
            devices = self._records.get(key)
        if devices is None:
            return None
        return ActivationRecord(devices=list(devices))

    def set(self, key: str, record: ActivationRecord) -> None:
        with self._lock:
            self._records[key] = list(record.devices)
            self.writes += 1

    def compare_and_set(
        self,
        key: str,
        expected: ActivationRecord | None,
        record: ActivationRecord,
    ) -> bool:
        with self._lock:
            current = self._records.get(key)
            wanted = None if expected is None else expected.devices
            if current != wanted:
                return False
            self._records[key] = list(record.devices)
            self.writes += 1
            return True


class JsonFileActivationStore:
    """Keeps all activation records in one JSON object on disk.

    Every write replaces the whole file atomically, so a reader never sees a
    half-written document. Writes hold an exclusive OS lock on a sidecar
    ``.lock`` file from load to save, so compare-and-set also holds between
    store instances and processes sharing the file.
    """

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self.file_path = file_path
        self.lock_path = file_path.with_name(f"{file_path.name}.lock")
        self.lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self.writes = 0

    @staticmethod
    def _try_lock(handle: Any) -> bool:
        try:
            if sys.platform == "win32":
                import msvcrt

                handle.seek(0)
                msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
            else:
                import fcntl

                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            return False
        return True

    @staticmethod
    def _unlock(handle: Any) -> None:
        if sys.platform == "win32":
            import msvcrt

            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
        else:
            import fcntl

            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    @contextmanager
    def _file_lock(self) -> Iterator[None]:
        """Exclusive lock on the sidecar file, waiting at most ``lock_timeout``."""
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            handle = self.lock_path.open("a+")
        except OSError as err:
            logger.exception("Could not open store lock %s", self.lock_path)
            msg = f"activation store lock unavailable: {self.lock_path}"
            raise StoreUnavailable(msg) from err

        with handle:
            deadline = time.monotonic() + self.lock_timeout
            while not self._try_lock(handle):
                if time.monotonic() >= deadline:
                    msg = (
                        f"timed out after {self.lock_timeout}s waiting for "
                        f"{self.lock_path}"
                    )
                    raise StoreUnavailable(msg)
                time.sleep(LOCK_POLL_INTERVAL)
            try:
                yield
            finally:
                self._unlock(handle)

    def _load(self) -> dict[str, Any]:
        try:
            with self.file_path.open() as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as err:
            logger.exception("Could not read activation store %s", self.file_path)
            msg = f"activation store unreadable: {self.file_path}"
            raise StoreUnavailable(msg) from err
        if not isinstance(data, dict):
            msg = f"activation store is not a JSON object: {self.file_path}"
            raise StoreUnavailable(msg)
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.file_path.parent, prefix=f".{self.file_path.name}."
            )
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.replace(tmp_name, self.file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as err:
            logger.exception("Could not write activation store %s", self.file_path)
            msg = f"activation store not writable: {self.file_path}"
            raise StoreUnavailable(msg) from err
        self.writes += 1

    @staticmethod
    def _record(raw: Any) -> ActivationRecord | None:
        if raw is None:
            return None
        try:
            return ActivationRecord.model_validate(raw)
        except ValidationError as err:
            msg = "activation store holds a malformed record"
            raise StoreUnavailable(msg) from err

    def get(self, key: str) -> ActivationRecord | None:
        with self._lock:
            return self._record(self._load().get(key))

    def set(self, key: str, record: ActivationRecord) -> None:
        with self._lock, self._file_lock():
            data = self._load()
            data[key] = record.model_dump()
            self._save(data)

    def compare_and_set(
        self,
        key: str,
        expected: ActivationRecord | None,
        record: ActivationRecord,
    ) -> bool:
        with self._lock, self._file_lock():
            data = self._load()
            if self._record(data.get(key)) != expected:
                return False
            data[key] = record.model_dump()
            self._save(data)
            return True
