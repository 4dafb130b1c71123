"""src/wayfetch/client/dispatcher.py

Single HTTP round trip.

:func:`dispatch` opens a connection through the agent, sends the request
head and payload, and returns the parsed :class:`Response`. It never follows
redirects; that is the job of :mod:`wayfetch.client.redirects`.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import IO, Any, AsyncIterator, Dict, Optional, Tuple, cast

from wayfetch.client.collector import collect_body
from wayfetch.client.options import RequestSpec
from wayfetch.client.response import Response
from wayfetch.exceptions import FilesystemError, NetworkError, ProtocolError
from wayfetch.http.body import (
    BodyKind,
    BodySource,
    iter_body_chunks,
    resolve_body,
    write_chunked,
)
from wayfetch.http.headers import Headers, normalize_headers
from wayfetch.http.http11 import HttpParser, build_request_head
from wayfetch.http.url import URL
from wayfetch.transport.agent import Agent
from wayfetch.transport.connection import AsyncConnection
from wayfetch.utils.timing import Timeout

__all__ = ["DispatchContext", "prepare", "dispatch"]

log = logging.getLogger(__name__)

_HEAD_TERMINATOR = b"\r\n\r\n"


@dataclass
class DispatchContext:
    """
    Fully resolved outbound request for one hop.

    Attributes:
        url: Parsed effective URL of the hop.
        method: Upper-case method.
        headers: Normalized headers, content-length included when known.
        agent: Connection agent.
        timeout: Timeouts for this hop, None for none.
    """

    url: URL
    method: str
    headers: Dict[str, str]
    agent: Agent
    timeout: Optional[Timeout] = None

    @property
    def scheme(self) -> str:
        return self.url.scheme

    @property
    def host(self) -> str:
        return self.url.host

    @property
    def port(self) -> int:
        return self.url.port

    @property
    def path(self) -> str:
        return self.url.path

    def wire_headers(self, source: BodySource) -> Dict[str, str]:
        """Headers as sent, with lower-case defaults filled in."""
        headers = {
            "host": self.url.netloc,
            "user-agent": self.agent.user_agent,
            "connection": "close",
        }
        headers.update(self.headers)
        if source.is_chunked:
            headers["transfer-encoding"] = "chunked"
        return headers


def prepare(spec: RequestSpec) -> Tuple[DispatchContext, BodySource]:
    """
    Resolve a spec into the context and payload of one hop.

    Raises:
        InvalidInputError: If the URL or body is unusable.
        FilesystemError: If the body file cannot be stat'ed.
    """
    url = URL(spec.url)
    headers = normalize_headers(spec.headers)
    source = resolve_body(spec.method, headers, spec.body, spec.file)
    context = DispatchContext(
        url=url,
        method=spec.method,
        headers=headers,
        agent=spec.agent or Agent(),
        timeout=spec.timeout,
    )
    return context, source


def _open_file(path: str) -> IO[bytes]:
    try:
        return open(path, "rb")  # pylint: disable=consider-using-with
    except OSError as exc:
        raise FilesystemError(
            f"Cannot read request body file {path!r}: {exc.strerror or exc}",
            filename=path,
            errno=exc.errno,
        ) from exc


async def _pipe(
    writer: asyncio.StreamWriter, chunks: AsyncIterator[bytes], chunked: bool
) -> None:
    if chunked:
        await write_chunked(writer, chunks)
        return
    async for chunk in chunks:
        writer.write(chunk)
        await writer.drain()


async def _send_body(
    writer: asyncio.StreamWriter, source: BodySource, stream: Any
) -> None:
    if source.kind is BodyKind.BYTES:
        writer.write(source.data)
    elif source.kind is BodyKind.TEXT:
        writer.write(source.data.encode("utf-8"))
    elif stream is not None:
        await _pipe(writer, iter_body_chunks(stream), chunked=source.is_chunked)

    await writer.drain()


async def _read_head(
    conn: AsyncConnection, parser: HttpParser
) -> Tuple[int, str, Headers]:
    reader = cast(asyncio.StreamReader, conn.reader)

    while True:
        try:
            raw = await conn.read(reader.readuntil(_HEAD_TERMINATOR))
        except asyncio.IncompleteReadError as exc:
            if not exc.partial:
                raise NetworkError(
                    "Server closed connection without response"
                ) from exc
            raise NetworkError(
                "Connection closed while reading response headers"
            ) from exc
        except asyncio.LimitOverrunError as exc:
            raise ProtocolError("Response headers are too large") from exc

        status_code, reason, headers = parser.parse_head(raw)
        # 100 Continue and other interim responses precede the final one
        if 100 <= status_code < 200 and status_code != 101:
            continue
        return status_code, reason, headers


async def _exchange(
    conn: AsyncConnection,
    context: DispatchContext,
    head: bytes,
    source: BodySource,
    stream: Any,
    encoding: str,
    parser: HttpParser,
) -> Response:
    writer = cast(asyncio.StreamWriter, conn.writer)
    writer.write(head)
    await _send_body(writer, source, stream)

    status_code, reason, headers = await _read_head(conn, parser)
    log.debug(
        '%s "%s %s" %s', context.url.origin, context.method, context.path, status_code
    )

    if context.method == "HEAD":
        return Response(status_code, headers, None, reason=reason, url=context.url.raw)

    content, body = await collect_body(conn, status_code, headers, encoding)
    return Response(
        status_code,
        headers,
        body,
        content,
        reason=reason,
        url=context.url.raw,
        encoding=encoding,
    )


async def dispatch(
    context: DispatchContext,
    source: BodySource,
    encoding: str,
    parser: Optional[HttpParser] = None,
) -> Response:
    """
    Perform exactly one request/response cycle.

    HEAD requests return as soon as the response head is parsed: the
    connection is aborted and the Response has no body. The connection and
    any file opened for the body are released before returning.

    Raises:
        FilesystemError: If the body file cannot be opened (before connecting)
            or fails while it is being sent.
        NetworkError: On connection or I/O failures.
        ProtocolError: If the server response is malformed.
    """
    head = build_request_head(context.method, context.path, context.wire_headers(source))

    with contextlib.ExitStack() as stack:
        stream = source.data if source.kind is BodyKind.STREAM else None
        if source.kind is BodyKind.FILE:
            stream = stack.enter_context(_open_file(source.data))

        conn = await context.agent.get_connection(
            context.host, context.port, context.url.use_ssl, timeout=context.timeout
        )
        if conn.writer is None or conn.reader is None:
            raise NetworkError("Failed to establish stream connection")

        done = False
        try:
            response = await _exchange(
                conn, context, head, source, stream, encoding, parser or HttpParser()
            )
            done = context.method != "HEAD"
            return response

        except FilesystemError:
            raise

        except OSError as exc:
            raise NetworkError(f"Network error: {exc}") from exc

        finally:
            if done:
                await context.agent.put_connection(conn)
            else:
                if context.method == "HEAD":
                    log.debug("Aborting HEAD request to %s", context.url.origin)
                context.agent.discard_connection(conn)
