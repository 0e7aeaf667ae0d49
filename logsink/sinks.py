"""Plain byte sinks used as fan-out members: the console and a non-rotating file."""

import os
import sys
import threading


class ConsoleSink:
    """Byte writer over a console stream (stderr by default). Closing only flushes."""

    def __init__(self, stream=None):
        stream = stream if stream is not None else sys.stderr
        self._stream = getattr(stream, "buffer", stream)

    def write(self, data: bytes) -> int:
        n = self._stream.write(data)
        self._stream.flush()
        return len(data) if n is None else n

    def flush(self):
        self._stream.flush()

    def close(self):
        self.flush()


class AppendFileSink:
    """Append-only file writer with thread-safe access and no rotation."""

    def __init__(self, filepath: str):
        self._filepath = os.path.abspath(filepath)
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(self._filepath), exist_ok=True)
        self._file = open(self._filepath, "ab")

    @property
    def filepath(self) -> str:
        return self._filepath

    def write(self, data: bytes) -> int:
        with self._lock:
            if self._file is None:
                raise ValueError(f"write to closed file {self._filepath}")
            n = self._file.write(data)
            self._file.flush()
            return n

    def flush(self):
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self):
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
