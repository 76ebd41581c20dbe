"""
Pure helpers for byte and text handling.

None of these functions raise for malformed input: :func:`bytes_to_string`
reports invalid UTF-8 as ``None``.
"""

from __future__ import annotations

from collections.abc import Iterable

from ._types import ByteChunk

DEFAULT_BUFFER_SIZE = 8192


def bytes_to_string(data: ByteChunk) -> str | None:
    """Decode ``data`` as UTF-8, returning ``None`` if it is not valid.

    >>> bytes_to_string(b"Hello, World!")
    'Hello, World!'
    >>> bytes_to_string(b"\\xff\\xff\\xff") is None
    True
    """
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return None


def concat_bytes(chunks: Iterable[ByteChunk]) -> bytes:
    """Join ``chunks`` in order into a single ``bytes`` value.

    >>> concat_bytes([b"Hello", b", ", b"World!"])
    b'Hello, World!'
    """
    return b"".join(chunks)


def default_buffer_size() -> int:
    """Read size used by :class:`~bstb.StreamConverter` unless configured."""
    return DEFAULT_BUFFER_SIZE
