import asyncio
from typing import List, Optional
from unittest import mock

import pytest

from wayfetch.transport.agent import Agent
from wayfetch.transport.connection import AsyncConnection
from wayfetch.utils.timing import Timeout


def make_writer(sink: bytearray) -> mock.Mock:
    """Mock StreamWriter recording everything written into ``sink``."""
    writer = mock.Mock()
    writer.write.side_effect = sink.extend
    writer.drain = mock.AsyncMock()
    writer.wait_closed = mock.AsyncMock()
    writer.is_closing.return_value = False
    return writer


def make_reader(data: bytes, eof: bool = True) -> asyncio.StreamReader:
    """StreamReader preloaded with ``data``."""
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


def make_connection(data: bytes, sink: Optional[bytearray] = None) -> AsyncConnection:
    """Open-looking AsyncConnection serving ``data`` as the server reply."""
    conn = AsyncConnection("example.com", 80)
    conn.reader = make_reader(data)
    conn.writer = make_writer(sink if sink is not None else bytearray())
    return conn


class ScriptedAgent(Agent):
    """
    Agent replying with canned raw responses, one per connection, and
    recording what each request wrote.
    """

    def __init__(self, replies: List[bytes]) -> None:
        super().__init__()
        self.replies = list(replies)
        self.requests: List[bytearray] = []
        self.targets: List[tuple] = []
        self.released: List[AsyncConnection] = []
        self.discarded: List[AsyncConnection] = []

    async def get_connection(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        timeout: Optional[Timeout] = None,
    ) -> AsyncConnection:
        self.targets.append((host, port, use_ssl))
        sink = bytearray()
        self.requests.append(sink)
        return make_connection(self.replies.pop(0), sink)

    async def put_connection(self, conn: AsyncConnection) -> None:
        self.released.append(conn)
        await super().put_connection(conn)

    def discard_connection(self, conn: AsyncConnection) -> None:
        self.discarded.append(conn)
        super().discard_connection(conn)


def raw_response(
    status: int = 200,
    body: bytes = b"",
    headers: Optional[dict] = None,
    reason: str = "OK",
) -> bytes:
    """Serialize a simple HTTP/1.1 response with a Content-Length."""
    head = [f"HTTP/1.1 {status} {reason}"]
    all_headers = {"Content-Length": str(len(body))}
    all_headers.update(headers or {})
    head.extend(f"{k}: {v}" for k, v in all_headers.items())
    return ("\r\n".join(head) + "\r\n\r\n").encode("latin-1") + body


@pytest.fixture
def scripted_agent():
    """Factory fixture building a ScriptedAgent from raw replies."""

    def _factory(*replies: bytes) -> ScriptedAgent:
        return ScriptedAgent(list(replies))

    return _factory


@pytest.fixture
def build_response():
    """Fixture exposing raw_response()."""
    return raw_response


@pytest.fixture
def build_connection():
    """Fixture exposing make_connection()."""
    return make_connection
