"""src/wayfetch/client/collector.py

Response body collection.

Drains a response body off the connection according to its framing and
turns it into text using the requested encoding.
"""

from typing import Tuple

from wayfetch.client.options import BINARY
from wayfetch.exceptions import InvalidResponseError, NetworkError
from wayfetch.http.body import CHUNK_SIZE, iter_read_chunked, read_exact
from wayfetch.http.headers import Headers
from wayfetch.transport.connection import AsyncConnection

__all__ = ["collect_body", "decode_body"]


def _has_body(status_code: int) -> bool:
    return not (100 <= status_code < 200 or status_code in (204, 304))


def decode_body(data: bytes, encoding: str) -> str:
    """
    Decode drained body bytes.

    ``"binary"`` maps every byte to the character with the same code point,
    anything else decodes as UTF-8 with invalid sequences replaced.
    """
    if encoding == BINARY:
        return data.decode("latin-1")
    return data.decode("utf-8", errors="replace")


async def _drain(conn: AsyncConnection, status_code: int, headers: Headers) -> bytes:
    reader = conn.reader
    if reader is None:
        raise NetworkError("Connection is not open")

    buffer = bytearray()
    if not _has_body(status_code):
        return bytes(buffer)

    if "chunked" in headers.get("transfer-encoding", "").lower():
        chunks = iter_read_chunked(reader)
        while True:
            try:
                chunk = await conn.read(chunks.__anext__())
            except StopAsyncIteration:
                break
            buffer += chunk
        return bytes(buffer)

    content_length = headers.get("content-length")
    if content_length is not None:
        try:
            expected = int(content_length.split(",")[0])
        except ValueError as exc:
            raise InvalidResponseError(
                f"Invalid Content-Length: {content_length!r}"
            ) from exc
        return await conn.read(read_exact(reader, expected))

    # No framing, the body runs until the server closes the connection
    while True:
        chunk = await conn.read(reader.read(CHUNK_SIZE))
        if not chunk:
            break
        buffer += chunk
    return bytes(buffer)


async def collect_body(
    conn: AsyncConnection, status_code: int, headers: Headers, encoding: str
) -> Tuple[bytes, str]:
    """
    Read the whole response body.

    Returns:
        Tuple of (raw bytes, decoded text).

    Raises:
        NetworkError: If the stream fails or ends early.
        InvalidResponseError: If the body framing is malformed.
        ReadTimeout: If a read exceeds the configured timeout.
    """
    try:
        data = await _drain(conn, status_code, headers)
    except EOFError as exc:
        raise NetworkError(
            "Connection closed before the full response body was received"
        ) from exc
    except ValueError as exc:
        raise InvalidResponseError(f"Malformed response body: {exc}") from exc
    except OSError as exc:
        raise NetworkError(f"Network error during read: {exc}") from exc

    return data, decode_body(data, encoding)
