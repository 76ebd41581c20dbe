"""
One-off stream draining without a :class:`~bstb.StreamConverter`.

>>> from bstb.process import aprocess_stream
>>> async with client.stream("GET", url) as response:
...     body = await aprocess_stream(response)
"""

from __future__ import annotations

from . import _drain
from ._types import ChunkSource, SyncChunkSource


async def aprocess_stream(body: ChunkSource) -> bytes:
    """Drain a chunk source into ``bytes``.

    Behaves exactly like :meth:`~bstb.StreamConverter.abody_to_bytes`: chunks
    are joined in order and a failing pull raises
    :class:`~bstb.TransportError` with nothing returned.
    """
    return await _drain.adrain_chunks(body)


def process_stream(body: SyncChunkSource) -> bytes:
    """Sync version of :func:`aprocess_stream`."""
    return _drain.drain_chunks(body)
