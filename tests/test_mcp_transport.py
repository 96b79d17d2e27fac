"""Tests for the cancellable stdin line reader."""

import os
import sys
import time

import anyio
import pytest

from mcp_server.transport import StdinLines

pytestmark = [
    pytest.mark.anyio,
    pytest.mark.skipif(sys.platform == "win32", reason="POSIX pipes only"),
]


class Pipe:
    """OS pipe closed at most once per end."""

    def __init__(self):
        self.read_fd, self.write_fd = os.pipe()
        self._open = {self.read_fd, self.write_fd}

    def write(self, data):
        os.write(self.write_fd, data)

    def close_writer(self):
        self._close(self.write_fd)

    def close(self):
        for fd in (self.read_fd, self.write_fd):
            self._close(fd)

    def _close(self, fd):
        if fd in self._open:
            self._open.discard(fd)
            os.close(fd)


@pytest.fixture
def pipe():
    """A pipe whose read end is polled by StdinLines."""
    p = Pipe()
    yield p
    p.close()


class TestStdinLines:
    """Tests for StdinLines."""

    async def test_splits_lines_across_chunks(self, pipe):
        """Lines split over several reads should be reassembled."""
        pipe.write(b'{"a": 1}\n{"b"')
        pipe.write(b': 2}\nlast')
        pipe.close_writer()

        lines = [line async for line in StdinLines(pipe.read_fd, chunk_size=4)]

        assert lines == ['{"a": 1}\n', '{"b": 2}\n', "last"]

    async def test_invalid_utf8_is_replaced(self, pipe):
        """Undecodable bytes should not stop the reader."""
        pipe.write(b"\xff\xfe\n")
        pipe.close_writer()

        lines = [line async for line in StdinLines(pipe.read_fd)]

        assert lines == ["\ufffd\ufffd\n"]

    async def test_read_is_cancellable(self, pipe):
        """Waiting for input must end promptly when cancelled."""
        read_fd = pipe.read_fd
        lines = []
        started = time.monotonic()

        with anyio.move_on_after(0.2) as scope:
            async for line in StdinLines(read_fd):
                lines.append(line)

        assert scope.cancelled_caught
        assert lines == []
        assert time.monotonic() - started < 2

    async def test_regular_file(self, tmp_path):
        """A regular file redirected to stdin is read without polling."""
        path = tmp_path / "input.jsonl"
        path.write_bytes(b"one\ntwo\n")
        fd = os.open(path, os.O_RDONLY)
        try:
            lines = [line async for line in StdinLines(fd)]
        finally:
            os.close(fd)

        assert lines == ["one\n", "two\n"]
