"""src/wayfetch/http/body.py

Request body resolution and HTTP body framing (chunked, fixed-length,
streaming) for Wayfetch.
"""

import asyncio
import collections.abc
import os
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, AsyncIterator, Dict, Optional, Union

from wayfetch.exceptions import FilesystemError, InvalidInputError

__all__ = [
    "BodyKind",
    "BodySource",
    "resolve_body",
    "iter_body_chunks",
    "write_chunked",
    "read_exact",
    "iter_read_chunked",
]

PathType = Union[str, "os.PathLike[str]"]

CHUNK_SIZE = 64 * 1024
_BODYLESS_METHODS = ("GET", "HEAD")


class BodyKind(Enum):
    """Where a request payload comes from."""

    NONE = "none"
    BYTES = "bytes"
    TEXT = "text"
    FILE = "file"
    STREAM = "stream"


@dataclass(frozen=True)
class BodySource:
    """
    Resolved request payload.

    Attributes:
        kind: Shape of the payload.
        data: Bytes, text, file path or stream object, depending on ``kind``.
        length: Byte length when known, else None.
    """

    kind: BodyKind = BodyKind.NONE
    data: Any = None
    length: Optional[int] = None

    @property
    def is_streaming(self) -> bool:
        return self.kind in (BodyKind.FILE, BodyKind.STREAM)

    @property
    def is_chunked(self) -> bool:
        """Streamed without a known length, so sent with chunked framing."""
        return self.is_streaming and self.length is None


def _is_stream(body: Any) -> bool:
    return (
        hasattr(body, "read")
        or isinstance(body, collections.abc.Iterator)
        or isinstance(body, collections.abc.AsyncIterator)
    )


def _classify(body: Any, length: Optional[int]) -> BodySource:
    if body is None:
        return BodySource(BodyKind.NONE, None, length)

    if isinstance(body, (bytes, bytearray, memoryview)):
        data = bytes(body)
        return BodySource(BodyKind.BYTES, data, len(data) if length is None else length)

    if isinstance(body, str):
        if length is None:
            length = len(body.encode("utf-8"))
        return BodySource(BodyKind.TEXT, body, length)

    if _is_stream(body):
        return BodySource(BodyKind.STREAM, body, length)

    raise InvalidInputError(f"Unsupported request body type: {type(body).__name__}")


def resolve_body(
    method: str,
    headers: Dict[str, str],
    body: Any = None,
    file: Optional[PathType] = None,
) -> BodySource:
    """
    Work out the payload and its length for one request.

    ``headers`` must already be normalized. When a length is determined it
    is written back into ``headers`` as ``content-length``.

    Raises:
        FilesystemError: If ``file`` cannot be stat'ed.
        InvalidInputError: If ``body`` is of an unsupported type, or the
            declared content-length is not a non-negative integer.
    """
    if method.upper() in _BODYLESS_METHODS:
        headers["content-length"] = "0"
        return BodySource(BodyKind.NONE, None, 0)

    declared = headers.get("content-length")
    if declared is not None:
        try:
            length = int(declared)
        except ValueError:
            length = -1
        if length < 0:
            raise InvalidInputError(f"Invalid content-length header: {declared!r}")
        if file:
            return BodySource(BodyKind.FILE, os.fspath(file), length)
        return _classify(body, length)

    if file:
        path = os.fspath(file)
        try:
            stat = os.stat(path)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot read request body file {path!r}: {exc.strerror or exc}",
                filename=path,
                errno=exc.errno,
            ) from exc
        source = BodySource(BodyKind.FILE, path, stat.st_size)
    else:
        source = _classify(body, None)

    if source.length is not None:
        headers["content-length"] = str(source.length)

    return source


async def _iter_fileobj(fileobj: IO[bytes], chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        try:
            chunk = await asyncio.to_thread(fileobj.read, chunk_size)
        except OSError as exc:
            name = getattr(fileobj, "name", None)
            raise FilesystemError(
                f"Cannot read request body file {name!r}: {exc.strerror or exc}",
                filename=name if isinstance(name, str) else None,
                errno=exc.errno,
            ) from exc
        if not chunk:
            break
        yield chunk


def _as_bytes(chunk: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def iter_body_chunks(
    stream: Any, chunk_size: int = CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """
    Iterate a file-like object, a sync iterator or an async iterator as
    bytes chunks, without blocking the event loop on file reads.
    """
    if hasattr(stream, "read"):
        async for chunk in _iter_fileobj(stream, chunk_size):
            yield _as_bytes(chunk)
    elif isinstance(stream, collections.abc.AsyncIterator):
        async for chunk in stream:
            yield _as_bytes(chunk)
    else:
        for chunk in stream:
            yield _as_bytes(chunk)


async def write_chunked(
    writer: asyncio.StreamWriter, chunks: AsyncIterator[bytes]
) -> None:
    """
    Write an async iterable of bytes chunks using HTTP chunked transfer encoding.

    Each chunk is sent as ``{hex_size}\\r\\n{data}\\r\\n``.
    A final ``0\\r\\n\\r\\n`` terminator is sent after all chunks.
    """
    async for chunk in chunks:
        if not chunk:
            continue
        size_line = f"{len(chunk):x}\r\n".encode("ascii")
        writer.write(size_line + chunk + b"\r\n")
        await writer.drain()
    # Terminating chunk
    writer.write(b"0\r\n\r\n")
    await writer.drain()


async def read_exact(reader: asyncio.StreamReader, n: int) -> bytes:
    """Read exactly n bytes from the stream."""
    if n <= 0:
        return b""
    try:
        return await reader.readexactly(n)
    except asyncio.IncompleteReadError as exc:
        raise EOFError("Stream closed prematurely") from exc


async def iter_read_chunked(reader: asyncio.StreamReader) -> AsyncIterator[bytes]:
    """Iterate over a chunked transfer-encoded response body."""
    while True:
        line = await reader.readline()
        if not line.endswith(b"\n"):
            raise EOFError("Stream closed during chunk header")

        try:
            size = int(line.split(b";")[0].strip(), 16)
        except ValueError as exc:
            raise ValueError(f"Invalid chunk size: {line!r}") from exc

        if size == 0:
            # Skip trailer fields up to the closing blank line
            while True:
                trailer = await reader.readline()
                if trailer in (b"\r\n", b"\n", b""):
                    break
            break

        yield await read_exact(reader, size)

        # Consume chunk trailer CRLF
        await read_exact(reader, 2)
