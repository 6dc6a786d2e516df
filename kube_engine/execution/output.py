"""
Line-buffered output sink for remote process streams.
"""

from typing import TextIO, Union


class LineWriter:
    """
    Buffers stream chunks and forwards only complete lines to ``output``.

    A trailing partial line is held until a newline arrives or ``flush`` is
    called.
    """

    def __init__(self, output: TextIO):
        self.output = output
        self._buffer = ""
        self.lines = 0

    def write(self, data: Union[str, bytes]) -> int:
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        if not data:
            return 0

        self._buffer += data
        complete, sep, rest = self._buffer.rpartition("\n")
        if sep:
            self._emit(complete + sep)
            self._buffer = rest
        return len(data)

    def flush(self) -> None:
        """Forward any residual partial line."""
        if self._buffer:
            self._emit(self._buffer + "\n")
            self._buffer = ""
        if hasattr(self.output, "flush"):
            self.output.flush()

    def _emit(self, text: str) -> None:
        self.output.write(text)
        self.lines += text.count("\n")
