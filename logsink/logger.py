"""Standard-library logging wired onto the fan-out/rotating sink.

``build_logger(config)`` returns an explicit logger handle meant to be built
once at startup and passed to whatever needs to log; nothing here keeps a
process-wide instance.
"""

import logging
import sys
import time

from logsink.config import Config
from logsink.fanout import FanoutSink
from logsink.rotating_file import RotatingFile
from logsink.sinks import AppendFileSink, ConsoleSink
from logsink.timed_writer import TimedRotatingWriter

CONSOLE_FORMAT = "%(asctime)s\t%(levelname)s\t%(filename)s:%(lineno)d\t%(message)s"


class ConsoleFormatter(logging.Formatter):
    """Tab-separated console lines with ISO-8601 UTC timestamps."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def __init__(self, fmt: str = CONSOLE_FORMAT):
        super().__init__(fmt)


class SinkHandler(logging.Handler):
    """Encodes each formatted record as UTF-8 and writes it to a byte sink."""

    terminator = "\n"

    def __init__(self, sink, level=logging.NOTSET):
        super().__init__(level)
        self.sink = sink

    def emit(self, record):
        try:
            msg = self.format(record) + self.terminator
            self.sink.write(msg.encode("utf-8"))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def flush(self):
        flush = getattr(self.sink, "flush", None)
        if flush is not None:
            self.acquire()
            try:
                flush()
            finally:
                self.release()


def build_sink(config: Config, stream=None) -> FanoutSink:
    """Compose console and file writers according to *config*."""
    console = ConsoleSink(stream)
    if not config.log_file_path:
        return FanoutSink(console)

    if config.enable_rotation:
        file_writer = TimedRotatingWriter(
            RotatingFile.from_config(config),
            config.rotation_interval_seconds,
        )
    else:
        file_writer = AppendFileSink(config.log_file_path)

    if config.enable_dual_sink:
        return FanoutSink(console, file_writer)
    return FanoutSink(file_writer)


def build_logger(config: Config, name: str = "app", sink=None, stream=None) -> logging.Logger:
    """Return a non-propagating logger writing to *sink* (built from *config* if omitted)."""
    if sink is None:
        sink = build_sink(config, stream)

    handler = SinkHandler(sink)
    handler.setFormatter(ConsoleFormatter())

    log = logging.getLogger(name)
    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()
    log.addHandler(handler)
    log.setLevel(config.min_log_level)
    log.propagate = False
    return log


def get_sink(log: logging.Logger):
    for handler in log.handlers:
        if isinstance(handler, SinkHandler):
            return handler.sink
    return None


def close_sink(log: logging.Logger):
    """Flush and close every sink attached to *log*."""
    for handler in list(log.handlers):
        if isinstance(handler, SinkHandler):
            try:
                handler.sink.close()
            finally:
                log.removeHandler(handler)
                handler.close()


def fatal(log: logging.Logger, msg: str, *args):
    """Log at CRITICAL, flush, and exit the process with status 1."""
    log.critical(msg, *args, stacklevel=2)
    for handler in log.handlers:
        handler.flush()
    sys.exit(1)
