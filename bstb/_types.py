"""
Source capabilities consumed by the converters.

A failing chunk source is reported as a transport error, a failing reader
as an I/O error.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
from typing import Protocol, Union

import httpx

ByteChunk = Union[bytes, bytearray, memoryview]

# An ``httpx.Response`` is drained through its decoded byte stream.
ChunkSource = Union[httpx.Response, AsyncIterable[ByteChunk]]
SyncChunkSource = Union[httpx.Response, Iterable[ByteChunk]]


class AsyncByteReader(Protocol):
    """An object with an async ``read`` returning ``b""`` at end of stream.

    ``asyncio.StreamReader`` and ``anyio.AsyncFile`` both qualify.
    """

    async def read(self, size: int = -1) -> bytes: ...


class SyncByteReader(Protocol):
    """A binary file-like object with a blocking ``read``."""

    def read(self, size: int = -1) -> bytes: ...
