import os
import io
import threading

from uci_client.readers import read_lines, start_reader


class FailingStream:
    def __init__(self, lines, exc) -> None:
        self._lines = list(lines)
        self._exc = exc

    def readline(self) -> str:
        if self._lines:
            return self._lines.pop(0)
        raise self._exc


def test_forwards_non_empty_lines_until_eof() -> None:
    received, errors = [], []
    stream = io.StringIO("uciok\n\n   \nreadyok\r\nbestmove e2e4\n")
    read_lines(stream, received.append, errors.append)
    assert received == ["uciok", "readyok", "bestmove e2e4"]
    assert errors == []


def test_read_failure_is_reported_once() -> None:
    received, errors = [], []
    stream = FailingStream(["info depth 1\n"], OSError("pipe broke"))
    read_lines(stream, received.append, errors.append, label="stdout")
    assert received == ["info depth 1"]
    assert errors == ["Error reading stdout: pipe broke"]


def test_failure_during_shutdown_is_silent() -> None:
    errors = []
    stopping = threading.Event()
    stopping.set()
    read_lines(FailingStream([], ValueError("I/O operation on closed file")), lambda _: None, errors.append, stopping)
    assert errors == []


def test_readers_do_not_block_each_other() -> None:
    read_fd, write_fd = os.pipe()
    stalled = open(read_fd, "r")
    writer = open(write_fd, "w")
    try:
        received = []
        done = threading.Event()

        def on_line(line: str) -> None:
            received.append(line)
            if line == "readyok":
                done.set()

        start_reader("stderr", stalled, lambda _: None, lambda _: None)
        start_reader("stdout", io.StringIO("uciok\nreadyok\n"), on_line, lambda _: None)
        assert done.wait(2.0)
        assert received == ["uciok", "readyok"]
    finally:
        writer.close()


def test_keep_blank_forwards_every_line_unparsed() -> None:
    received = []
    stream = io.StringIO("  indented warning\n\nlast line\r\n")
    read_lines(stream, received.append, lambda _: None, label="stderr", keep_blank=True)
    assert received == ["  indented warning", "", "last line"]
