"""
Tests for line framing, guess parsing and the connection wrapper.
"""

import socket

import pytest

from guessgame.shared.constants import (
    HIGH_MESSAGE,
    INVALID_MESSAGE,
    LOW_MESSAGE,
    MAX_LINE_LENGTH,
    WELCOME_MESSAGE,
    WIN_MESSAGE,
)
from guessgame.shared.protocols import (
    LineBuffer,
    LineConnection,
    MessageKind,
    TransportError,
    classify_message,
    is_quit,
    open_connection,
    parse_guess,
)


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.settimeout(5.0)
    b.settimeout(5.0)
    yield a, b
    a.close()
    b.close()


class TestLineBuffer:
    def test_partial_delivery_is_reassembled(self):
        buf = LineBuffer()
        assert buf.feed(b"4") == []
        assert buf.feed(b"2") == []
        assert buf.feed(b"\n") == ["42"]

    def test_several_lines_in_one_chunk(self):
        buf = LineBuffer()
        assert buf.feed(b"1\n2\n3") == ["1", "2"]
        assert buf.feed(b"\n") == ["3"]

    def test_carriage_return_is_dropped(self):
        assert LineBuffer().feed(b"50\r\n") == ["50"]

    def test_flush_returns_unterminated_tail(self):
        buf = LineBuffer()
        buf.feed(b"17")
        assert buf.flush() == "17"
        assert buf.flush() is None

    def test_oversized_line_is_emitted_once(self):
        buf = LineBuffer(max_line_length=8)
        assert buf.feed(b"123456789") == ["12345678"]
        # rest of the same line is discarded up to the newline
        assert buf.feed(b"000\n7\n") == ["7"]

    def test_complete_long_line_is_capped(self):
        buf = LineBuffer(max_line_length=8)
        assert buf.feed(b"9" * 20 + b"\n42\n") == ["9" * 8, "42"]

    def test_invalid_utf8_is_replaced(self):
        (line,) = LineBuffer().feed(b"\xff1\n")
        assert parse_guess(line) is None


class TestParseGuess:
    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        ("0", 0),
        ("007", 7),
        (" 15 ", 15),
        ("100\n", 100),
        ("500", 500),
        (str(2**31 - 1), 2**31 - 1),
    ])
    def test_valid(self, text, expected):
        assert parse_guess(text) == expected

    @pytest.mark.parametrize("text", [
        "", "   ", "abc", "-5", "+5", "4 2", "4.2", "12a", "٣", str(2**31), "9" * MAX_LINE_LENGTH, "9" * 5000,
    ])
    def test_invalid(self, text):
        assert parse_guess(text) is None

    def test_leading_zeros_do_not_count_towards_length(self):
        assert parse_guess("0" * 5000 + "7") == 7
        assert parse_guess("0" * 5000) == 0


def test_quit_is_case_sensitive():
    assert is_quit("QUIT")
    assert is_quit("QUIT\r\n")
    assert not is_quit("quit")
    assert not is_quit("QUITTING")


@pytest.mark.parametrize("text,kind", [
    (WELCOME_MESSAGE, MessageKind.WELCOME),
    (LOW_MESSAGE, MessageKind.LOW_HINT),
    (HIGH_MESSAGE, MessageKind.HIGH_HINT),
    (WIN_MESSAGE.rstrip("\n"), MessageKind.WIN),
    (INVALID_MESSAGE, MessageKind.INVALID_INPUT),
    ("QUIT", MessageKind.QUIT),
    ("37", MessageKind.GUESS_LINE),
])
def test_classify_message(text, kind):
    assert classify_message(text) is kind


class TestLineConnection:
    def test_reads_lines_across_split_sends(self, pair):
        a, b = pair
        conn = LineConnection(b)
        a.sendall(b"5")
        a.sendall(b"0\n1")
        a.sendall(b"0\n")
        assert conn.recv_line() == "50"
        assert conn.recv_line() == "10"

    def test_eof_returns_tail_then_none(self, pair):
        a, b = pair
        conn = LineConnection(b)
        a.sendall(b"QUIT")
        a.shutdown(socket.SHUT_WR)
        assert conn.recv_line() == "QUIT"
        assert conn.recv_line() is None
        assert conn.recv_line() is None

    def test_send_line_appends_only_newline(self, pair):
        a, b = pair
        LineConnection(a).send_line("hello")
        assert b.recv(64) == b"hello\n"

    def test_send_after_close_raises_transport_error(self, pair):
        a, _ = pair
        conn = LineConnection(a)
        conn.close()
        with pytest.raises(TransportError):
            conn.send_message(WIN_MESSAGE)

    def test_close_is_idempotent(self, pair):
        a, _ = pair
        conn = LineConnection(a)
        conn.close()
        conn.close()
        assert conn.closed

    def test_timeout_surfaces_as_transport_error(self, pair):
        _, b = pair
        conn = LineConnection(b, timeout=0.05)
        with pytest.raises(TransportError):
            conn.recv_line()


def test_open_connection_refused():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(TransportError):
        open_connection("127.0.0.1", port, timeout=2.0)
