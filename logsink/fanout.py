"""Fan-out sink: one logical writer delivering every buffer to a fixed list of members."""


class FanoutSink:
    """Writes each buffer to every member, in order.

    A failing member does not stop delivery to the members after it; once
    all have been tried the first exception is re-raised. Delivery is
    best-effort, so some members may hold a record that others lost.
    """

    def __init__(self, *members):
        self._members = tuple(members)

    @property
    def members(self) -> tuple:
        return self._members

    def write(self, data: bytes) -> int:
        if not self._members:
            return len(data)

        first_error = None
        written = None
        for member in self._members:
            try:
                n = member.write(data)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                continue
            if n is None:
                n = len(data)
            written = n if written is None else min(written, n)

        if first_error is not None:
            raise first_error
        return written

    def _call_each(self, method_name: str):
        first_error = None
        for member in self._members:
            method = getattr(member, method_name, None)
            if method is None:
                continue
            try:
                method()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def flush(self):
        self._call_each("flush")

    def close(self):
        self._call_each("close")
