# toypattern/io/reader.py
from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Any, Protocol

import numpy as np

from toypattern.core import (
    Feature,
    Header,
    MalformedHeaderField,
    MalformedPointValue,
    Points,
    ReaderOptions,
    StrideViolation,
    TransportError,
    UnsupportedVersion,
    Version,
)
from toypattern.core.points import STRENGTH_DTYPE, STRENGTH_MAX
from toypattern.io.scanner import ByteScanner

logger = logging.getLogger(__name__)

HEADER_PREFIX = b"V:"
HEADER_TERMINATOR = b"#"

_INT_RE = re.compile(rb"[+-]?[0-9]+")


class ByteSource(Protocol):
    """Anything bytes can be read from sequentially (files, sockets, BytesIO...)."""

    def read(self, size: int = -1, /) -> bytes:
        ...


class PatternReader:
    """Buffered reader over a pattern byte stream.

    Decoding happens in two phases: `read_header()` then `read_points()`.
    The reader requests `options.chunk_size` bytes at a time from the
    source and never needs the whole input in memory.

    The read-ahead buffer is released by `close()`, which also runs when the
    reader is used as a context manager. The source itself is not closed.
    """

    def __init__(self, source: ByteSource, options: ReaderOptions | None = None):
        self._source = source
        self._options = options if options is not None else ReaderOptions()
        self._buf = bytearray()
        self._pos = 0
        self._eof = False

    @property
    def options(self) -> ReaderOptions:
        return self._options

    # ------------------------------------------------------------------
    # Buffering
    # ------------------------------------------------------------------
    def _fill(self) -> bool:
        """Append one chunk from the source. Returns False at end of input."""
        if self._eof:
            return False
        try:
            chunk = self._source.read(self._options.chunk_size)
        except OSError as e:
            raise TransportError(f"cannot read from source: {e}") from e

        if not chunk:
            self._eof = True
            return False

        if self._pos:
            del self._buf[:self._pos]
            self._pos = 0
        self._buf += chunk
        return True

    def peek(self, n: int) -> bytes:
        """Return up to n bytes without consuming them. Shorter only at end of input."""
        while len(self._buf) - self._pos < n and self._fill():
            pass
        return bytes(self._buf[self._pos:self._pos + n])

    def read_until(self, delimiter: bytes) -> tuple[bytes, bool]:
        """Consume bytes up to and including `delimiter`.

        Returns (data, found). At end of input the remaining bytes are
        returned with found=False; an exhausted reader returns (b"", False).
        """
        searched = self._pos
        while True:
            i = self._buf.find(delimiter, searched)
            if i != -1:
                data = bytes(self._buf[self._pos:i + 1])
                self._pos = i + 1
                return data, True

            # _fill() may compact the buffer, keep the offset relative.
            searched = len(self._buf) - self._pos
            if not self._fill():
                data = bytes(self._buf[self._pos:])
                self._pos = len(self._buf)
                return data, False
            searched += self._pos

    def count_buffered(self, *delimiters: bytes) -> int:
        """Count delimiter bytes currently in the read-ahead buffer (no reads)."""
        pending = self._buf[self._pos:]
        return sum(pending.count(d) for d in delimiters)

    def close(self) -> None:
        self._buf = bytearray()
        self._pos = 0
        self._eof = True

    def __enter__(self) -> "PatternReader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    def read_header(self) -> Header:
        """Read the header if the stream starts with "V:", else return the Legacy default.

        Only the peeked bytes are looked at when there is no header.
        """
        if self.peek(len(HEADER_PREFIX)) != HEADER_PREFIX:
            logger.debug("no header prefix, assuming legacy pattern")
            return Header()

        raw, found = self.read_until(HEADER_TERMINATOR)
        if not found:
            raise TransportError(
                f"unexpected end of input before header terminator {HEADER_TERMINATOR!r}"
            )

        header = parse_header(raw[:-len(HEADER_TERMINATOR)])
        logger.debug(
            "decoded header",
            extra={
                "pattern_version": int(header.version),
                "pattern_features": list(header.features),
                "pattern_interval_ms": header.interval // timedelta(milliseconds=1),
            },
        )
        return header

    def read_points(self, version: Version) -> Points:
        """Decode the rest of the stream with the algorithm owned by `version`."""
        decoder_cls = _POINT_DECODERS[Version(version)]
        return decoder_cls(self).decode()


# ----------------------------------------------------------------------
# Header fields
# ----------------------------------------------------------------------
def _parse_int(key: str, raw: bytes) -> int:
    if not _INT_RE.fullmatch(raw):
        raise MalformedHeaderField(key, raw)
    try:
        return int(raw)
    except ValueError as e:
        # int() refuses digit runs past the interpreter limit.
        raise MalformedHeaderField(key, raw, reason="out of range") from e


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


def parse_header(raw: bytes) -> Header:
    """Parse the header body (terminator already stripped) into a Header.

    Fields are `key:value` pairs joined by `;`. Unknown keys and fields
    without a `:` are ignored. Absent fields keep the Header defaults.
    """
    fields: dict[str, Any] = {}

    for token in ByteScanner(raw, b";"):
        key, sep, value = bytes(token).partition(b":")
        if not sep:
            continue

        if key == b"V":
            v = _parse_int("V", value)
            try:
                fields["version"] = Version(v)
            except ValueError as e:
                raise UnsupportedVersion(value) from e
        elif key == b"T":
            fields["device_type"] = _text(value)
        elif key == b"F":
            fields["features"] = tuple(
                Feature(_text(bytes(motor))) for motor in ByteScanner(value, b",")
            )
        elif key == b"S":
            ms = _parse_int("S", value)
            try:
                fields["interval"] = timedelta(milliseconds=ms)
            except OverflowError as e:
                raise MalformedHeaderField("S", value, reason="out of range") from e
        elif key == b"M":
            fields["content_hash"] = _text(value)

    return Header(**fields)


# ----------------------------------------------------------------------
# Point streams
# ----------------------------------------------------------------------
def parse_strength(token: bytes) -> int:
    """Parse one data token as an unsigned integer within the strength width."""
    if not token.isdigit():
        raise MalformedPointValue(token)
    digits = token.lstrip(b"0") or b"0"
    if len(digits) > len(str(STRENGTH_MAX)):
        raise MalformedPointValue(token, reason=f"value out of range 0..{STRENGTH_MAX}")
    value = int(digits)
    if value > STRENGTH_MAX:
        raise MalformedPointValue(token, reason=f"value out of range 0..{STRENGTH_MAX}")
    return value


class _StrengthBuffer:
    """Growable flat uint8 backing for decoded strengths."""

    __slots__ = ("_data", "_n")

    def __init__(self, capacity: int) -> None:
        self._data = np.empty(max(capacity, 16), dtype=STRENGTH_DTYPE)
        self._n = 0

    def __len__(self) -> int:
        return self._n

    def append(self, value: int) -> None:
        if self._n == self._data.size:
            grown = np.empty(self._data.size * 2, dtype=STRENGTH_DTYPE)
            grown[:self._n] = self._data
            self._data = grown
        self._data[self._n] = value
        self._n += 1

    def to_points(self, stride: int) -> Points:
        return Points(self._data[:self._n].reshape(-1, stride))


class _PointDecoder:
    def __init__(self, reader: PatternReader) -> None:
        self._reader = reader

    def decode(self) -> Points:
        raise NotImplementedError


class LegacyPointDecoder(_PointDecoder):
    """Flat comma-separated run of values, one single-channel Point per value."""

    def decode(self) -> Points:
        reader = self._reader
        # The estimate only presizes the backing; the loop does the real work.
        backing = _StrengthBuffer(reader.count_buffered(b",") + 1)

        while True:
            raw, found = reader.read_until(b",")
            token = (raw[:-1] if found else raw).strip()

            if token.startswith(HEADER_TERMINATOR):
                break
            if token:
                backing.append(parse_strength(token))
            if not found:
                break

        logger.debug("decoded legacy points", extra={"pattern_points": len(backing)})
        return backing.to_points(1)


class StandardPointDecoder(_PointDecoder):
    """`;`-terminated groups of `,`-separated values, one Point per group.

    The first non-empty group fixes the stride for the whole file.
    """

    def decode(self) -> Points:
        reader = self._reader
        backing = _StrengthBuffer(reader.count_buffered(b";", b",") + 1)
        stride = -1

        while True:
            raw, found = reader.read_until(b";")
            group = (raw[:-1] if found else raw).strip()

            if group.startswith(HEADER_TERMINATOR):
                break
            if group:
                if stride == -1:
                    # Each value but the first is preceded by a comma.
                    stride = group.count(b",") + 1
                self._decode_group(group, stride, backing)
            if not found:
                break

        if stride == -1:
            return Points.empty()

        logger.debug(
            "decoded standard points",
            extra={"pattern_points": len(backing) // stride, "pattern_stride": stride},
        )
        return backing.to_points(stride)

    def _decode_group(self, group: bytes, stride: int, backing: _StrengthBuffer) -> None:
        scanner = ByteScanner(group, b",")
        for got in range(stride):
            token = scanner.next()
            if token is None:
                raise StrideViolation(group, stride, got)
            backing.append(parse_strength(bytes(token).strip()))

        extra = sum(1 for _ in scanner)
        if extra:
            if self._reader.options.strict_stride:
                raise StrideViolation(group, stride, stride + extra)
            logger.warning(
                "ignoring %d value(s) past stride %d in group %r",
                extra, stride, group,
            )


_POINT_DECODERS: dict[Version, type[_PointDecoder]] = {
    Version.LEGACY: LegacyPointDecoder,
    Version.STANDARD: StandardPointDecoder,
}
