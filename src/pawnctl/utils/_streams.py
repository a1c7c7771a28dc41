"""Line-oriented reading of subprocess output streams."""

from typing import TYPE_CHECKING

import anyio
from anyio.streams.text import TextReceiveStream

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from anyio.abc import ByteReceiveStream


async def iter_lines(stream: "ByteReceiveStream") -> "AsyncIterator[str]":
    """Yield complete lines from a byte stream as they arrive.

    Chunks are decoded as UTF-8 (undecodable bytes are replaced) and split
    on newlines. Trailing ``\\r`` is stripped so Windows output reads the
    same as POSIX output. A final unterminated line is yielded at EOF.

    Args:
        stream: The byte stream to read, typically a process stdout/stderr.

    Yields:
        Each line without its line terminator.
    """
    pending = ""
    text_stream = TextReceiveStream(stream, errors="replace")
    try:
        async for chunk in text_stream:
            pending += chunk
            *complete, pending = pending.split("\n")
            for line in complete:
                yield line.rstrip("\r")
    except (anyio.ClosedResourceError, anyio.BrokenResourceError):
        # Stream closed, which is expected on process exit
        pass
    if pending:
        yield pending.rstrip("\r")
