"""Exceptions raised by the log sink."""


class SinkError(Exception):
    pass


class RotationError(SinkError):
    """The underlying file could not be rotated; the triggering write was skipped."""


class WriteTooLargeError(SinkError):
    """A single buffer is larger than the maximum file size."""


class ConfigError(SinkError, ValueError):
    pass
