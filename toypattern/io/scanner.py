# toypattern/io/scanner.py
from __future__ import annotations

from typing import Iterator


class ByteScanner:
    """Split a byte slice into delimiter-bounded tokens, lazily and without copying.

    Tokens are memoryview slices of the backing bytes. Consecutive delimiters
    yield empty tokens; callers decide whether that is an error.

    Examples
    --------
    >>> [bytes(t) for t in ByteScanner(b"0,,1", b",")]
    [b'0', b'', b'1']
    """

    __slots__ = ("_data", "_view", "_pos", "_delimiter", "_done")

    def __init__(self, data: bytes | bytearray, delimiter: bytes) -> None:
        if len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single byte, got {delimiter!r}")
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"data must be bytes or bytearray, got {type(data).__name__}")
        self._data = data
        self._view = memoryview(data)
        self._pos = 0
        self._delimiter = delimiter
        self._done = False

    def next(self) -> memoryview | None:
        """Return the next token, or None once the slice is exhausted."""
        if self._done:
            return None

        start = self._pos
        tail = self._data.find(self._delimiter, start)
        if tail == -1:
            self._done = True
            return self._view[start:]

        self._pos = tail + 1
        return self._view[start:tail]

    def __iter__(self) -> Iterator[memoryview]:
        while (token := self.next()) is not None:
            yield token
