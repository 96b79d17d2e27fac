"""Cancellable standard input for the stdio transport.

The SDK reads stdin from a worker thread that cannot be interrupted, so a
cancelled server would wait for the next input line before it could
finish. StdinLines waits for readability on the event loop instead and
only calls os.read() once data (or EOF) is available, which keeps every
read cancellable.
"""

import logging
import os
import stat
import sys
from collections.abc import AsyncGenerator

import anyio
import anyio.lowlevel

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 65536


class StdinLines:
    """Async iterator over text lines read from a file descriptor.

    Lines keep their trailing newline; invalid UTF-8 is replaced. A final
    line without a newline is still yielded at EOF.
    """

    def __init__(self, fd: int | None = None, chunk_size: int = READ_CHUNK_SIZE) -> None:
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._chunk_size = chunk_size
        # Regular files are always readable and cannot be polled
        self._pollable = not stat.S_ISREG(os.fstat(self._fd).st_mode)

    async def _read_chunk(self) -> bytes:
        if self._pollable:
            await anyio.wait_readable(self._fd)
        else:
            await anyio.lowlevel.checkpoint()
        return os.read(self._fd, self._chunk_size)

    async def __aiter__(self) -> AsyncGenerator[str, None]:
        pending = b""
        while True:
            chunk = await self._read_chunk()
            if not chunk:
                break
            pending += chunk
            *lines, pending = pending.split(b"\n")
            for line in lines:
                yield line.decode("utf-8", errors="replace") + "\n"

        logger.debug("Standard input reached EOF")
        if pending:
            yield pending.decode("utf-8", errors="replace")


__all__ = ["READ_CHUNK_SIZE", "StdinLines"]
