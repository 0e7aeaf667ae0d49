"""Writer that rotates its underlying file once per fixed, epoch-aligned time window."""

import logging
import threading
import time
from datetime import datetime, timezone

from logsink.errors import RotationError
from logsink.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

NANOSECONDS = 1_000_000_000


def truncate(instant_ns: int, interval_ns: int) -> int:
    """Round *instant_ns* down to a multiple of *interval_ns* since the Unix epoch."""
    return instant_ns - instant_ns % interval_ns


class TimedRotatingWriter:
    """Rotates the wrapped writer whenever a new window of ``interval_seconds`` begins.

    The check runs on every ``write``; there is no background timer, so a
    quiet writer stays on its old file until the next write arrives.

    Writes hold the lock shared and may run in parallel with each other.
    Rotation holds it exclusively, so no write straddles two files.

    If ``underlying.rotate()`` fails, the window is still marked as rotated
    and the next attempt happens only once another full window has passed.
    """

    def __init__(self, underlying, interval_seconds: float, clock=None):
        interval_ns = round(interval_seconds * NANOSECONDS)
        if interval_ns <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._underlying = underlying
        self._interval = interval_ns
        self._clock = clock or time.time_ns
        self._lock = ReadWriteLock()
        self._held = threading.local()
        with self._lock.write_locked():
            self._last_rotated = truncate(self._clock(), self._interval)

    @property
    def interval_ns(self) -> int:
        return self._interval

    @property
    def last_rotated(self) -> int:
        """Start of the current window, in nanoseconds since the epoch."""
        with self._lock.read_locked():
            return self._last_rotated

    def _rotate_if_needed(self):
        error = None
        with self._lock.write_locked():
            now = self._clock()
            if now - self._last_rotated < self._interval:
                return
            self._last_rotated = truncate(now, self._interval)
            window = self._last_rotated
            self._held.active = True
            try:
                self._underlying.rotate()
            except Exception as exc:
                error = exc
            finally:
                self._held.active = False

        # Logged only once the exclusive lock is released
        window_start = datetime.fromtimestamp(window / NANOSECONDS, tz=timezone.utc)
        if error is not None:
            raise RotationError(f"rotation for window {window_start.isoformat()} failed: {error}") from error
        logger.info("Rotated log file for window starting %s", window_start.isoformat())

    def write(self, data: bytes) -> int:
        if getattr(self._held, "active", False):
            # Issued from inside an underlying call on this thread, e.g. a
            # notice logged back into this writer; the held lock covers it
            return self._underlying.write(data)

        self._rotate_if_needed()
        with self._lock.read_locked():
            self._held.active = True
            try:
                return self._underlying.write(data)
            finally:
                self._held.active = False

    def flush(self):
        flush = getattr(self._underlying, "flush", None)
        if flush is not None:
            with self._lock.read_locked():
                flush()

    def close(self):
        close = getattr(self._underlying, "close", None)
        if close is not None:
            with self._lock.write_locked():
                close()
