from __future__ import annotations

import codecs
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Iterator
from contextlib import aclosing, closing
from typing import Any

import anyio
import anyio.abc
import httpx

from ._exceptions import EncodingError, StreamIOError, TransportError, _error_message
from ._types import ByteChunk, ChunkSource, SyncChunkSource

logger = logging.getLogger("bstb.drain")


# ---------------------------------------------------------------------------
# Chunk sources
# ---------------------------------------------------------------------------


def _aiter_chunks(source: ChunkSource) -> AsyncIterator[ByteChunk]:
    if isinstance(source, httpx.Response):
        return source.aiter_bytes()
    return aiter(source)


def _iter_chunks(source: SyncChunkSource) -> Iterator[ByteChunk]:
    if isinstance(source, httpx.Response):
        return source.iter_bytes()
    return iter(source)


async def _aclose_chunks(chunks: AsyncIterator[ByteChunk], *, failing: bool) -> None:
    aclose = getattr(chunks, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as exc:
        # An error already propagating from the drain takes precedence.
        if failing:
            return
        raise TransportError(_error_message(exc)) from exc


def _close_chunks(chunks: Iterator[ByteChunk], *, failing: bool) -> None:
    close = getattr(chunks, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as exc:
        if failing:
            return
        raise TransportError(_error_message(exc)) from exc


async def adrain_chunks(source: ChunkSource) -> bytes:
    """Pull every chunk from ``source`` and return them joined.

    Any exception raised while pulling a chunk, or while closing the source
    afterwards, aborts the drain with a :class:`TransportError`; the bytes
    collected so far are dropped.
    """
    chunks = _aiter_chunks(source)
    buf = bytearray()
    count = 0
    try:
        while True:
            try:
                chunk = await anext(chunks)
            except StopAsyncIteration:
                break
            except Exception as exc:
                raise TransportError(_error_message(exc)) from exc
            buf += chunk
            count += 1
    except BaseException:
        await _aclose_chunks(chunks, failing=True)
        raise
    await _aclose_chunks(chunks, failing=False)

    logger.debug("Drained %d bytes from %d chunks", len(buf), count)
    return bytes(buf)


def drain_chunks(source: SyncChunkSource) -> bytes:
    """Sync version of :func:`adrain_chunks`."""
    chunks = _iter_chunks(source)
    buf = bytearray()
    count = 0
    try:
        while True:
            try:
                chunk = next(chunks)
            except StopIteration:
                break
            except Exception as exc:
                raise TransportError(_error_message(exc)) from exc
            buf += chunk
            count += 1
    except BaseException:
        _close_chunks(chunks, failing=True)
        raise
    _close_chunks(chunks, failing=False)

    logger.debug("Drained %d bytes from %d chunks", len(buf), count)
    return bytes(buf)


# ---------------------------------------------------------------------------
# Byte readers
# ---------------------------------------------------------------------------


async def _read_once(reader: Any, size: int) -> bytes:
    if isinstance(reader, anyio.abc.ByteReceiveStream):
        try:
            return await reader.receive(size)
        except anyio.EndOfStream:
            return b""
    return await reader.read(size)


def _check_read(data: Any) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        # Non-blocking raw streams return None when no data is ready yet.
        raise StreamIOError(
            f"read() returned {type(data).__name__}, expected bytes"
        )
    return data


async def aiter_reads(reader: Any, size: int) -> AsyncGenerator[bytes, None]:
    """Yield non-empty reads of up to ``size`` bytes until end of stream.

    ``reader`` is either an object with ``async read(size)`` returning
    ``b""`` at the end, or an :class:`anyio.abc.ByteReceiveStream`, which
    signals the end with :exc:`anyio.EndOfStream`.  Any other non-bytes
    result raises :class:`StreamIOError`.
    """
    while True:
        try:
            data = await _read_once(reader, size)
        except Exception as exc:
            raise StreamIOError(_error_message(exc)) from exc
        # A zero-length read marks the end of the stream.
        if not _check_read(data):
            return
        yield data


def iter_reads(reader: Any, size: int) -> Iterator[bytes]:
    """Sync version of :func:`aiter_reads` for blocking ``read(size)``."""
    while True:
        try:
            data = reader.read(size)
        except Exception as exc:
            raise StreamIOError(_error_message(exc)) from exc
        if not _check_read(data):
            return
        yield data


async def adrain_reader(reader: Any, size: int) -> bytes:
    buf = bytearray()
    count = 0
    async with aclosing(aiter_reads(reader, size)) as reads:
        async for data in reads:
            buf += data
            count += 1

    logger.debug("Drained %d bytes in %d reads of up to %d", len(buf), count, size)
    return bytes(buf)


def drain_reader(reader: Any, size: int) -> bytes:
    buf = bytearray()
    count = 0
    with closing(iter_reads(reader, size)) as reads:
        for data in reads:
            buf += data
            count += 1

    logger.debug("Drained %d bytes in %d reads of up to %d", len(buf), count, size)
    return bytes(buf)


async def adecode_reader(reader: Any, size: int) -> str:
    """Drain ``reader`` into text, validating UTF-8 as each read arrives.

    The decoder carries an incomplete multi-byte sequence over to the next
    read, so only a stream that ends mid code point is rejected.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    parts: list[str] = []
    count = 0
    try:
        async with aclosing(aiter_reads(reader, size)) as reads:
            async for data in reads:
                parts.append(decoder.decode(data))
                count += 1
        parts.append(decoder.decode(b"", final=True))
    except UnicodeDecodeError as exc:
        raise EncodingError(_error_message(exc)) from exc

    text = "".join(parts)
    logger.debug(
        "Decoded %d characters in %d reads of up to %d", len(text), count, size
    )
    return text


def decode_reader(reader: Any, size: int) -> str:
    decoder = codecs.getincrementaldecoder("utf-8")()
    parts: list[str] = []
    count = 0
    try:
        with closing(iter_reads(reader, size)) as reads:
            for data in reads:
                parts.append(decoder.decode(data))
                count += 1
        parts.append(decoder.decode(b"", final=True))
    except UnicodeDecodeError as exc:
        raise EncodingError(_error_message(exc)) from exc

    text = "".join(parts)
    logger.debug(
        "Decoded %d characters in %d reads of up to %d", len(text), count, size
    )
    return text


def decode_utf8(data: bytes) -> str:
    """Strict whole-buffer UTF-8 decode raising :class:`EncodingError`."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(_error_message(exc)) from exc
