# ruff: noqa: I001
from .__version__ import __description__, __title__, __version__  # noqa: F401
from ._converter import StreamConverter  # noqa: F401
from ._exceptions import (  # noqa: F401
    EncodingError,
    ErrorKind,
    StreamConverterError,
    StreamIOError,
    TransportError,
)
from ._types import (  # noqa: F401
    AsyncByteReader,
    ByteChunk,
    ChunkSource,
    SyncByteReader,
    SyncChunkSource,
)
from . import process, util  # noqa: F401
from .process import aprocess_stream, process_stream  # noqa: F401
from .util import (  # noqa: F401
    DEFAULT_BUFFER_SIZE,
    bytes_to_string,
    concat_bytes,
    default_buffer_size,
)

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "bstb" command requires the CLI extra. '
            'Install it with: pip install "bstb[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)

_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
