"""Shared pytest fixtures for the timed log sink test suite."""

from __future__ import annotations

import threading

import pytest

from logsink.config import Config

# 2023-11-14T22:13:20Z, a multiple of every interval used in the tests
EPOCH_ALIGNED_NS = 1_700_000_000 * 1_000_000_000


class FakeClock:
    """Manually advanced nanosecond clock."""

    def __init__(self, start_ns: int):
        self.now_ns = start_ns
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self.now_ns

    def advance(self, seconds: float):
        with self._lock:
            self.now_ns += round(seconds * 1_000_000_000)


class RecordingFile:
    """In-memory stand-in for a rotating file, with failure injection."""

    def __init__(self):
        self._lock = threading.Lock()
        self.segments: list[bytearray] = [bytearray()]
        self.rotate_attempts = 0
        self.rotations = 0
        self.rotate_failures = 0  # number of upcoming rotate() calls that fail
        self.write_error: Exception | None = None
        self.closed = False

    @property
    def data(self) -> bytes:
        with self._lock:
            return b"".join(bytes(s) for s in self.segments)

    def write(self, data: bytes) -> int:
        if self.write_error is not None:
            raise self.write_error
        with self._lock:
            self.segments[-1] += data
        return len(data)

    def rotate(self):
        with self._lock:
            self.rotate_attempts += 1
            if self.rotate_failures > 0:
                self.rotate_failures -= 1
                raise PermissionError("permission denied: rename app.log")
            self.rotations += 1
            self.segments.append(bytearray())

    def close(self):
        self.closed = True


@pytest.fixture()
def clock() -> FakeClock:
    """Clock starting 3 ms into an epoch-aligned window."""
    return FakeClock(EPOCH_ALIGNED_NS + 3_000_000)


@pytest.fixture()
def recording_file() -> RecordingFile:
    return RecordingFile()


@pytest.fixture()
def file_config(tmp_path) -> Config:
    """Config writing to a file under tmp_path, retention disabled."""
    return Config(
        log_file_path=str(tmp_path / "logs" / "app.log"),
        enable_dual_sink=True,
        enable_rotation=True,
        rotation_interval_seconds=10**9,  # next window boundary is in 2033
        min_log_level="DEBUG",
    )
