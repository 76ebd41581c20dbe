from __future__ import annotations

from typing import Any

from . import _drain
from ._types import AsyncByteReader, ChunkSource, SyncByteReader, SyncChunkSource
from .util import DEFAULT_BUFFER_SIZE


class StreamConverter:
    """Drain HTTP response bodies and byte streams into ``bytes`` or ``str``.

    Two kinds of source are accepted:

    * **chunk sources**: an :class:`httpx.Response` (its decoded body is
      streamed with ``aiter_bytes()`` / ``iter_bytes()``) or any iterable of
      byte chunks.  Failures while pulling a chunk raise
      :class:`~bstb.TransportError`.
    * **byte readers**: objects with ``read(size) -> bytes`` (async or
      blocking) such as ``asyncio.StreamReader``, ``anyio.AsyncFile`` or a
      binary file, plus :class:`anyio.abc.ByteReceiveStream`.  They are read
      ``buffer_size`` bytes at a time and failures raise
      :class:`~bstb.StreamIOError`.

    The whole stream is held in memory; there is no size limit.  Wrap calls in
    :func:`anyio.fail_after` (or configure an ``httpx`` timeout) to bound a
    stalled source.

    Parameters
    ----------
    buffer_size:
        Maximum number of bytes requested per read on the reader paths
        (default ``8192``).  Not validated: ``0`` makes every reader look
        empty.

    Examples
    --------
    >>> converter = StreamConverter()
    >>> async with httpx.AsyncClient() as client:
    ...     async with client.stream("GET", "https://www.example.com") as r:
    ...         text = await converter.abody_to_string(r)
    """

    __slots__ = ("_buffer_size",)

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._buffer_size = buffer_size

    @classmethod
    def with_buffer_size(cls, buffer_size: int) -> StreamConverter:
        return cls(buffer_size)

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(buffer_size={self._buffer_size!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, StreamConverter):
            return NotImplemented
        return self._buffer_size == other._buffer_size

    def __hash__(self) -> int:
        return hash((StreamConverter, self._buffer_size))

    # ------------------------------------------------------------------
    # Chunk sources
    # ------------------------------------------------------------------

    async def abody_to_bytes(self, body: ChunkSource) -> bytes:
        """Concatenate every chunk of ``body`` in delivery order."""
        return await _drain.adrain_chunks(body)

    async def abody_to_string(self, body: ChunkSource) -> str:
        """Drain ``body`` and decode the complete buffer as UTF-8.

        Validation happens once, after the last chunk, so a code point split
        across two chunks is accepted.
        """
        return _drain.decode_utf8(await _drain.adrain_chunks(body))

    def body_to_bytes(self, body: SyncChunkSource) -> bytes:
        """Sync version of :meth:`abody_to_bytes`."""
        return _drain.drain_chunks(body)

    def body_to_string(self, body: SyncChunkSource) -> str:
        """Sync version of :meth:`abody_to_string`."""
        return _drain.decode_utf8(_drain.drain_chunks(body))

    # ------------------------------------------------------------------
    # Byte readers
    # ------------------------------------------------------------------

    async def aread_to_bytes(self, reader: AsyncByteReader) -> bytes:
        """Read ``reader`` to the end, ``buffer_size`` bytes at a time."""
        return await _drain.adrain_reader(reader, self._buffer_size)

    async def aread_to_string(self, reader: AsyncByteReader) -> str:
        """Read ``reader`` to the end and decode it as UTF-8.

        Each read is validated as it arrives.  An incomplete multi-byte
        sequence at the end of one read is completed by the next, so only a
        stream that *ends* mid code point raises :class:`~bstb.EncodingError`.
        """
        return await _drain.adecode_reader(reader, self._buffer_size)

    def read_to_bytes(self, reader: SyncByteReader) -> bytes:
        """Sync version of :meth:`aread_to_bytes`."""
        return _drain.drain_reader(reader, self._buffer_size)

    def read_to_string(self, reader: SyncByteReader) -> str:
        """Sync version of :meth:`aread_to_string`."""
        return _drain.decode_reader(reader, self._buffer_size)
