"""Append-only byte writer with rename-and-create rotation, size limits, and backup retention."""

import logging
import os
import threading
from datetime import datetime, timedelta, timezone

from logsink.config import Config
from logsink.errors import WriteTooLargeError
from logsink.retention import backup_name, compress_file, enforce_retention

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_BYTES = 100 * 1024 * 1024


class RotatingFile:
    """File writer that can be rotated on demand.

    ``rotate()`` renames the active file to ``<name>.<UTC timestamp>`` and
    opens a fresh one. A write that would push the file past
    ``max_file_size_bytes`` rotates first. Backups are optionally gzipped and
    pruned by count and age after every rotation.
    """

    def __init__(
        self,
        filepath: str,
        max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
        max_backups: int = 0,
        max_age_days: int = 0,
        compress: bool = False,
        time_func=None,
    ):
        self._filepath = os.path.abspath(filepath)
        self._log_dir = os.path.dirname(self._filepath)
        self._log_filename = os.path.basename(self._filepath)
        self._max_size = max_file_size_bytes
        self._max_backups = max_backups
        self._max_age_days = max_age_days
        self._compress = compress
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._file = None
        self._size = 0

    @classmethod
    def from_config(cls, config: Config, time_func=None) -> "RotatingFile":
        return cls(
            config.log_file_path,
            max_file_size_bytes=config.max_file_size_bytes,
            max_backups=config.max_backups,
            max_age_days=config.max_age_days,
            compress=config.compression_enabled,
            time_func=time_func,
        )

    @property
    def filepath(self) -> str:
        return self._filepath

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    def _open(self):
        os.makedirs(self._log_dir, exist_ok=True)
        self._file = open(self._filepath, "ab")
        self._size = os.fstat(self._file.fileno()).st_size

    def _close(self):
        if self._file is not None and not self._file.closed:
            self._file.close()
        self._file = None

    def _backup_path(self) -> str:
        when = self._time_func()
        path = os.path.join(self._log_dir, backup_name(self._log_filename, when))
        # Two rotations inside one microsecond must not overwrite each other
        while os.path.exists(path) or os.path.exists(path + ".gz"):
            when += timedelta(microseconds=1)
            path = os.path.join(self._log_dir, backup_name(self._log_filename, when))
        return path

    def _rotate(self) -> tuple[str | None, list[str]]:
        self._close()
        rotated_path = None
        if os.path.exists(self._filepath):
            rotated_path = self._backup_path()
            os.rename(self._filepath, rotated_path)
        self._open()

        if rotated_path is not None and self._compress:
            rotated_path = compress_file(rotated_path)
        purged = enforce_retention(
            self._log_dir,
            self._log_filename,
            max_backups=self._max_backups,
            max_age_days=self._max_age_days,
            time_func=self._time_func,
        )
        return rotated_path, purged

    def _log_purged(self, purged: list[str]):
        if purged:
            logger.debug("Purged %d backup(s) of %s: %s", len(purged), self._log_filename, ", ".join(purged))

    def rotate(self) -> str | None:
        """Close the active file, archive it, and open a new one. Returns the backup path."""
        with self._lock:
            rotated, purged = self._rotate()
        # Notices go out only after the mutex is released
        self._log_purged(purged)
        return rotated

    def write(self, data: bytes) -> int:
        if len(data) > self._max_size:
            raise WriteTooLargeError(
                f"write of {len(data)} bytes exceeds maximum file size {self._max_size}"
            )
        rotated = purged = None
        with self._lock:
            if self._file is None:
                self._open()
            if self._size + len(data) > self._max_size:
                rotated, purged = self._rotate()
            n = self._file.write(data)
            self._file.flush()
            self._size += n
        if purged is not None:
            logger.info("Size limit reached, rotated %s to %s", self._log_filename, rotated)
            self._log_purged(purged)
        return n

    def flush(self):
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self):
        with self._lock:
            self._close()
