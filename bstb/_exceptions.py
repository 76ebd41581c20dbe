"""
Error hierarchy raised by the stream converters.

The set is closed: every failure surfaced by :mod:`bstb` is exactly one of

* :class:`StreamIOError`: a byte reader failed to produce bytes
* :class:`EncodingError`: the drained bytes are not valid UTF-8
* :class:`TransportError`: a chunk source failed to produce a chunk

Each error carries its :class:`ErrorKind` and the underlying exception::

    try:
        text = await converter.abody_to_string(response)
    except bstb.StreamConverterError as exc:
        match exc.kind:
            case bstb.ErrorKind.TRANSPORT:
                ...
            case bstb.ErrorKind.ENCODING:
                ...
            case bstb.ErrorKind.IO:
                ...
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    IO = "IO"
    ENCODING = "Encoding"
    TRANSPORT = "Transport"


class StreamConverterError(Exception):
    """Base class for all errors raised while draining a stream."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        """The exception this error was raised from, if any."""
        return self.__cause__

    def __str__(self) -> str:
        return f"{self.kind.value} error: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class StreamIOError(StreamConverterError):
    kind = ErrorKind.IO


class EncodingError(StreamConverterError, ValueError):
    kind = ErrorKind.ENCODING


class TransportError(StreamConverterError):
    kind = ErrorKind.TRANSPORT


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__
