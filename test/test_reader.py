# test/test_reader.py
import io

import pytest

from toypattern.core import (
    Header,
    MalformedPointValue,
    Points,
    ReaderOptions,
    StrideViolation,
    TransportError,
    Version,
)
from toypattern.io.reader import PatternReader, parse_strength


class FailingSource:
    """Byte source that serves some data, then raises an I/O error."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)

    def read(self, size=-1):
        chunk = self._data.read(size)
        if not chunk:
            raise OSError("connection reset")
        return chunk


def make_reader(data: bytes, chunk_size: int = 4096, **kwargs) -> PatternReader:
    return PatternReader(io.BytesIO(data), ReaderOptions(chunk_size=chunk_size, **kwargs))


class TestBuffering:
    """Peek / read_until over small chunks."""

    def test_peek_does_not_consume(self):
        r = make_reader(b"V:1;#", chunk_size=1)

        assert r.peek(2) == b"V:"
        assert r.peek(2) == b"V:"
        assert r.read_until(b"#") == (b"V:1;#", True)

    def test_peek_short_at_end_of_input(self):
        r = make_reader(b"7")
        assert r.peek(2) == b"7"

    def test_read_until_across_chunks(self):
        r = make_reader(b"aaaa;bbbbbb;cc", chunk_size=3)

        assert r.read_until(b";") == (b"aaaa;", True)
        assert r.read_until(b";") == (b"bbbbbb;", True)
        assert r.read_until(b";") == (b"cc", False)
        assert r.read_until(b";") == (b"", False)

    def test_count_buffered_reads_nothing_new(self):
        r = make_reader(b"1,2;3,4;5,6;", chunk_size=4)

        assert r.count_buffered(b";") == 0
        r.peek(1)
        assert r.count_buffered(b";", b",") == 2

    def test_close_releases_buffer(self):
        with make_reader(b"0,1;1,0;") as r:
            r.peek(2)
        assert r.count_buffered(b";") == 0
        assert r.read_until(b";") == (b"", False)

    def test_source_errors_become_transport_errors(self):
        r = PatternReader(FailingSource(b"V:1;T:Ed"))
        with pytest.raises(TransportError, match="connection reset"):
            r.read_header()


class TestReadHeader:

    def test_no_prefix_returns_default_and_consumes_nothing(self):
        r = make_reader(b"0,1,2")

        assert r.read_header() == Header()
        assert r.read_until(b",") == (b"0,", True)

    def test_empty_stream_is_legacy(self):
        assert make_reader(b"").read_header() == Header()

    def test_header_longer_than_chunk(self):
        r = make_reader(b"V:1;T:Edge;F:v1,v2;S:100;M:deadbeef;#0,1;", chunk_size=5)
        h = r.read_header()

        assert h.version is Version.STANDARD
        assert h.content_hash == "deadbeef"
        assert r.read_until(b";") == (b"0,1;", True)

    def test_missing_terminator_is_transport_error(self):
        r = make_reader(b"V:1;T:Edge;F:v1,v2")
        with pytest.raises(TransportError):
            r.read_header()


class TestLegacyPoints:

    def test_values_in_file_order(self):
        r = make_reader(b"0,0,0,8,8,8,7,7,7,6")
        pts = r.read_points(Version.LEGACY)

        assert pts.stride == 1
        assert pts.tolist() == [[0], [0], [0], [8], [8], [8], [7], [7], [7], [6]]

    def test_blank_tokens_and_whitespace_are_skipped(self):
        r = make_reader(b"1,,2, 3 ,\n4,\r\n")
        assert r.read_points(Version.LEGACY).tolist() == [[1], [2], [3], [4]]

    def test_value_wider_than_strength_fails(self):
        r = make_reader(b"1,2,256")
        with pytest.raises(MalformedPointValue) as exc:
            r.read_points(Version.LEGACY)
        assert exc.value.token == b"256"

    def test_non_integer_fails(self):
        with pytest.raises(MalformedPointValue):
            make_reader(b"1,x,2").read_points(Version.LEGACY)

    def test_empty_stream(self):
        pts = make_reader(b"").read_points(Version.LEGACY)
        assert len(pts) == 0

    def test_one_byte_chunks(self):
        data = b"10,20,30,40,50,60,70,80,90,100"
        one = make_reader(data, chunk_size=1).read_points(Version.LEGACY)
        whole = make_reader(data).read_points(Version.LEGACY)
        assert one == whole
        assert len(one) == 10


class TestStandardPoints:

    def test_groups_become_points(self):
        r = make_reader(b"0,1;1,0;20,20;")
        assert r.read_points(Version.STANDARD) == Points.from_points([[0, 1], [1, 0], [20, 20]])

    def test_hash_ends_data_section(self):
        r = make_reader(b"0,1;1,0;#trailing")
        assert r.read_points(Version.STANDARD).tolist() == [[0, 1], [1, 0]]

    def test_blank_lines_are_skipped(self):
        r = make_reader(b"\n0,1;\n\n;1,0;\n")
        assert r.read_points(Version.STANDARD).tolist() == [[0, 1], [1, 0]]

    def test_end_of_input_terminates_last_group(self):
        r = make_reader(b"0,1;1,0")
        assert r.read_points(Version.STANDARD).tolist() == [[0, 1], [1, 0]]

    def test_short_group_is_stride_violation(self):
        r = make_reader(b"0,1,2;3,4;5,6,7;")
        with pytest.raises(StrideViolation) as exc:
            r.read_points(Version.STANDARD)
        assert exc.value.expected == 3
        assert exc.value.got == 2
        assert exc.value.group == b"3,4"

    def test_truncated_final_group_fails(self):
        r = make_reader(b"0,1;1,0;1")
        with pytest.raises(StrideViolation):
            r.read_points(Version.STANDARD)

    def test_long_group_is_truncated_by_default(self, caplog):
        r = make_reader(b"0,1;1,0,9;2,2;")
        with caplog.at_level("WARNING", logger="toypattern.io.reader"):
            pts = r.read_points(Version.STANDARD)

        assert pts.tolist() == [[0, 1], [1, 0], [2, 2]]
        assert "past stride 2" in caplog.text

    def test_long_group_fails_with_strict_stride(self):
        r = make_reader(b"0,1;1,0,9;", strict_stride=True)
        with pytest.raises(StrideViolation) as exc:
            r.read_points(Version.STANDARD)
        assert exc.value.expected == 2
        assert exc.value.got == 3

    def test_empty_token_in_group_fails(self):
        with pytest.raises(MalformedPointValue):
            make_reader(b"0,,1;").read_points(Version.STANDARD)

    def test_empty_stream(self):
        assert make_reader(b"").read_points(Version.STANDARD) == Points.empty()

    def test_small_chunks_match_single_read(self):
        data = b"0,1;1,0;1,0;0,1;20,0;0,20;20,20;0,0;#"
        for size in (1, 2, 3, 7):
            got = make_reader(data, chunk_size=size).read_points(Version.STANDARD)
            assert got == make_reader(data).read_points(Version.STANDARD)


@pytest.mark.parametrize("token, value", [(b"0", 0), (b"20", 20), (b"255", 255), (b"007", 7)])
def test_parse_strength_ok(token, value):
    assert parse_strength(token) == value


@pytest.mark.parametrize("token", [b"", b"-1", b"+1", b"1.5", b"1_0", b"256", b"abc"])
def test_parse_strength_rejects(token):
    with pytest.raises(MalformedPointValue):
        parse_strength(token)


def test_parse_strength_accepts_long_zero_padding():
    assert parse_strength(b"0" * 5000) == 0
    assert parse_strength(b"0" * 5000 + b"20") == 20


def test_parse_strength_rejects_long_digit_runs():
    with pytest.raises(MalformedPointValue) as exc:
        parse_strength(b"1" * 5000)
    assert "out of range" in str(exc.value)


def test_legacy_long_digit_run_is_malformed_value():
    r = make_reader(b"1," + b"1" * 5000)
    with pytest.raises(MalformedPointValue):
        r.read_points(Version.LEGACY)
