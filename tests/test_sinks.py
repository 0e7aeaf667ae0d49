"""Tests for the console and append-only file sinks."""

import io
import os
import threading

import pytest

from logsink.sinks import AppendFileSink, ConsoleSink


class TestConsoleSink:
    def test_writes_to_binary_stream(self):
        stream = io.BytesIO()
        sink = ConsoleSink(stream)
        assert sink.write(b"to console\n") == 11
        assert stream.getvalue() == b"to console\n"

    def test_uses_buffer_of_text_stream(self):
        raw = io.BytesIO()
        text = io.TextIOWrapper(raw, encoding="utf-8")
        sink = ConsoleSink(text)
        sink.write(b"bytes\n")
        assert raw.getvalue() == b"bytes\n"

    def test_close_only_flushes(self):
        stream = io.BytesIO()
        sink = ConsoleSink(stream)
        sink.close()
        assert not stream.closed


class TestAppendFileSink:
    def test_creates_directory_and_appends(self, tmp_path):
        path = tmp_path / "nested" / "plain.log"
        sink = AppendFileSink(str(path))
        sink.write(b"one\n")
        sink.write(b"two\n")
        sink.close()
        assert path.read_bytes() == b"one\ntwo\n"

    def test_write_after_close_raises(self, tmp_path):
        sink = AppendFileSink(str(tmp_path / "plain.log"))
        sink.close()
        sink.close()  # idempotent
        with pytest.raises(ValueError):
            sink.write(b"late\n")

    def test_concurrent_writes(self, tmp_path):
        path = tmp_path / "plain.log"
        sink = AppendFileSink(str(path))

        def worker(thread_id):
            for i in range(200):
                sink.write(f"t{thread_id}-{i:03d}\n".encode())

        threads = [threading.Thread(target=worker, args=(t,)) for t in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        sink.close()

        lines = path.read_text().splitlines()
        assert len(lines) == 800
        assert len(set(lines)) == 800
        assert os.path.getsize(path) == sum(len(line) + 1 for line in lines)
