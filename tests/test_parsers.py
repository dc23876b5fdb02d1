from __future__ import annotations

import pytest

from respwire import Config
from respwire._unpacker import NOT_ENOUGH_DATA, Unpacker
from respwire.codec import decode, decode_all, encode
from respwire.exceptions import (
    ConnectionError,
    EndOfStreamError,
    InvalidResponse,
    InvalidSizeError,
    ProtocolError,
)
from respwire.reply import Array, Bulk, Error, Integer, NullBulk, Status


@pytest.fixture
def unpacker():
    return Unpacker()


class TestDecode:
    def test_simple_string(self):
        reply = decode(b"+OK\r\n")
        assert reply == Status(b"OK")
        assert reply.as_string() == "OK"

    def test_error(self):
        reply = decode(b"-ERR unknown command 'foobar'\r\n")
        assert reply == Error(b"ERR unknown command 'foobar'")
        assert reply.code == "ERR"

    def test_integer(self):
        reply = decode(b":1000\r\n")
        assert isinstance(reply, Integer)
        assert reply.as_int() == 1000

    def test_negative_integer(self):
        assert decode(b":-42\r\n").as_int() == -42

    def test_bulk_string(self):
        reply = decode(b"$6\r\nfoobar\r\n")
        assert reply == Bulk(b"foobar")
        assert reply.as_string() == "foobar"

    def test_empty_bulk_string(self):
        reply = decode(b"$0\r\n\r\n")
        assert reply == Bulk(b"")
        assert not isinstance(reply, NullBulk)
        assert not reply.is_null

    def test_nil_bulk_string(self):
        reply = decode(b"$-1\r\n")
        assert reply == NullBulk()
        assert reply.is_null

    def test_nil_bulk_consumes_nothing_more(self):
        assert list(decode_all(b"$-1\r\n+OK\r\n")) == [NullBulk(), Status(b"OK")]

    def test_binary_bulk_string(self):
        payload = b"\x00\r\n\xff\r"
        assert decode(b"$5\r\n" + payload + b"\r\n") == Bulk(payload)

    def test_array(self):
        reply = decode(b"*2\r\n$3\r\nfoo\r\n$3\r\nbar\r\n")
        assert reply == Array((Bulk(b"foo"), Bulk(b"bar")))
        assert reply.as_string_list() == ["foo", "bar"]

    def test_empty_array(self):
        reply = decode(b"*0\r\n")
        assert reply == Array()
        assert len(reply) == 0

    def test_mixed_array(self):
        reply = decode(b"*5\r\n:1\r\n:2\r\n:3\r\n:4\r\n$6\r\nfoobar\r\n")
        assert reply == Array(
            (Integer(b"1"), Integer(b"2"), Integer(b"3"), Integer(b"4"), Bulk(b"foobar"))
        )

    def test_array_with_error_and_null(self):
        reply = decode(b"*3\r\n$3\r\nfoo\r\n$-1\r\n-ERR oops\r\n")
        assert reply == Array((Bulk(b"foo"), NullBulk(), Error(b"ERR oops")))

    def test_nested_array(self):
        reply = decode(b"*2\r\n*3\r\n:1\r\n:2\r\n:3\r\n*2\r\n+Foo\r\n-Bar\r\n")
        assert reply == Array(
            (
                Array((Integer(b"1"), Integer(b"2"), Integer(b"3"))),
                Array((Status(b"Foo"), Error(b"Bar"))),
            )
        )

    def test_nested_array_trailing_sibling(self):
        reply = decode(b"*3\r\n*1\r\n*0\r\n:1\r\n*1\r\n$1\r\nx\r\n")
        assert reply == Array(
            (Array((Array(),)), Integer(b"1"), Array((Bulk(b"x"),)))
        )

    def test_deeply_nested_array(self):
        depth = 200
        reply = decode(b"*1\r\n" * depth + b":7\r\n")
        for _ in range(depth):
            assert isinstance(reply, Array)
            assert len(reply) == 1
            reply = reply[0]
        assert reply == Integer(b"7")

    def test_round_trip_command(self):
        args = [b"SET", b"key", b"", b"\r\n binary \x00"]
        reply = decode(encode(*args))
        assert [element.as_bytes() for element in reply] == args

    def test_decode_all(self):
        assert list(decode_all(b"+OK\r\n:1\r\n$1\r\na\r\n")) == [
            Status(b"OK"),
            Integer(b"1"),
            Bulk(b"a"),
        ]


class TestMalformed:
    def test_empty_stream(self):
        with pytest.raises(EndOfStreamError):
            decode(b"")

    def test_end_of_stream_is_not_a_protocol_error(self):
        with pytest.raises(EndOfStreamError) as exc_info:
            decode(b"")
        assert not isinstance(exc_info.value, ProtocolError)
        assert isinstance(exc_info.value, ConnectionError)

    def test_truncated_bulk_body(self):
        with pytest.raises(ProtocolError, match="middle of a reply"):
            decode(b"$6\r\nfoo")

    def test_truncated_simple_line(self):
        with pytest.raises(ProtocolError):
            decode(b"+OK")

    def test_truncated_array(self):
        with pytest.raises(ProtocolError, match="1 incomplete arrays"):
            decode(b"*2\r\n:1\r\n")

    def test_bulk_with_bad_terminator(self):
        with pytest.raises(ProtocolError, match="Improper line ending"):
            decode(b"$3\r\nfooXY")

    def test_bulk_longer_than_declared(self):
        with pytest.raises(ProtocolError):
            decode(b"$2\r\nfoo\r\n")

    def test_cr_inside_simple_line(self):
        with pytest.raises(ProtocolError, match="cannot contain a CR or LF"):
            decode(b"+O\rK\r\n")

    def test_cr_inside_simple_line_detected_early(self, unpacker):
        unpacker.feed(b"+O\rK")
        with pytest.raises(ProtocolError, match="cannot contain a CR or LF"):
            unpacker.parse()

    def test_bare_lf(self):
        with pytest.raises(ProtocolError, match="bare LF"):
            decode(b"+OK\n")

    def test_unknown_marker(self):
        with pytest.raises(InvalidResponse) as exc_info:
            decode(b"!oops\r\n")
        assert exc_info.value.marker == ord("!")

    def test_unknown_marker_detected_before_line(self, unpacker):
        unpacker.feed(b"?")
        with pytest.raises(InvalidResponse):
            unpacker.parse()

    def test_invalid_bulk_length(self):
        with pytest.raises(ProtocolError, match="Invalid length"):
            decode(b"$abc\r\n")

    @pytest.mark.parametrize("header", [b"$", b"*"])
    def test_oversized_length_line(self, header):
        with pytest.raises(ProtocolError, match="Invalid length"):
            decode(header + b"1" * 5000 + b"\r\n")

    def test_length_line_digit_limit(self):
        with pytest.raises(ProtocolError, match="Invalid length"):
            decode(b"*" + b"0" * 19 + b"1\r\n:1\r\n")
        assert decode(b"*" + b"0" * 18 + b"1\r\n:1\r\n") == Array((Integer(b"1"),))

    def test_negative_bulk_length(self):
        with pytest.raises(InvalidSizeError) as exc_info:
            decode(b"$-2\r\n")
        assert exc_info.value.size == -2

    def test_bulk_length_above_cap(self):
        with pytest.raises(InvalidSizeError, match="Supports bulk strings up to"):
            decode(b"$2147483647\r\n")

    def test_configured_bulk_cap(self):
        unpacker = Unpacker(max_bulk_size=4)
        unpacker.feed(b"$5\r\nhello\r\n")
        with pytest.raises(InvalidSizeError):
            unpacker.parse()

    def test_null_array_is_rejected(self):
        with pytest.raises(InvalidSizeError, match="multi bulk length"):
            decode(b"*-1\r\n")

    def test_nesting_limit(self):
        with pytest.raises(ProtocolError, match="nested deeper than 3"):
            decode(b"*1\r\n*1\r\n*1\r\n*1\r\n:1\r\n", max_nesting_depth=3)
        assert decode(b"*1\r\n*1\r\n*1\r\n:1\r\n", max_nesting_depth=3)

    def test_nesting_limit_from_config(self, monkeypatch):
        try:
            Config.max_nesting_depth = 2
            with pytest.raises(ProtocolError):
                decode(b"*1\r\n*1\r\n*0\r\n")
        finally:
            Config.max_nesting_depth = None
        monkeypatch.setenv("RESPWIRE_MAX_NESTING_DEPTH", "1")
        with pytest.raises(ProtocolError):
            decode(b"*1\r\n*0\r\n")


class TestIncremental:
    @pytest.mark.parametrize(
        "payload",
        [
            b"+OK\r\n",
            b"-ERR unknown command 'foobar'\r\n",
            b":1000\r\n",
            b"$6\r\nfoobar\r\n",
            b"$0\r\n\r\n",
            b"$-1\r\n",
            b"*2\r\n$3\r\nfoo\r\n$3\r\nbar\r\n",
            b"*2\r\n*1\r\n$-1\r\n*2\r\n+a\r\n:2\r\n",
        ],
    )
    def test_byte_at_a_time(self, unpacker, payload):
        expected = decode(payload)
        for i in range(len(payload) - 1):
            unpacker.feed(payload[i : i + 1])
            assert unpacker.parse() is NOT_ENOUGH_DATA
        unpacker.feed(payload[-1:])
        assert unpacker.parse() == expected
        assert not unpacker.pending

    def test_incomplete_data(self, unpacker):
        unpacker.feed(b"$10")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        unpacker.feed(b"\r\nhello")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        assert unpacker.pending
        unpacker.feed(b"world\r\n")
        assert unpacker.parse() == Bulk(b"helloworld")

    def test_multiple_replies_in_one_chunk(self, unpacker):
        unpacker.feed(b"+OK\r\n:1\r\n$3\r\nfo")
        assert unpacker.parse() == Status(b"OK")
        assert unpacker.parse() == Integer(b"1")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        unpacker.feed(b"o\r\n")
        assert unpacker.parse() == Bulk(b"foo")

    def test_partial_array_survives_feeds(self, unpacker):
        unpacker.feed(b"*3\r\n:1\r\n")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        assert len(unpacker.nodes) == 1
        unpacker.feed(b"*1\r\n+x")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        unpacker.feed(b"\r\n$1\r\nz\r\n")
        assert unpacker.parse() == Array((Integer(b"1"), Array((Status(b"x"),)), Bulk(b"z")))

    def test_eof_between_replies(self, unpacker):
        unpacker.feed(b"+OK\r\n")
        unpacker.parse()
        with pytest.raises(EndOfStreamError):
            unpacker.on_eof()

    def test_eof_inside_reply(self, unpacker):
        unpacker.feed(b"*2\r\n")
        assert unpacker.parse() is NOT_ENOUGH_DATA
        with pytest.raises(ProtocolError):
            unpacker.on_eof()

    def test_reset(self, unpacker):
        unpacker.feed(b"*2\r\n:1")
        unpacker.parse()
        unpacker.reset()
        assert not unpacker.pending
        unpacker.feed(b"+OK\r\n")
        assert unpacker.parse() == Status(b"OK")


@pytest.mark.parametrize("depth", [0, -1])
def test_invalid_nesting_depth(depth):
    with pytest.raises(ValueError, match="at least 1"):
        Unpacker(max_nesting_depth=depth)
