"""src/wayfetch/transport/connection.py

Asynchronous TCP and TLS connection management.

This module provides low-level connection handling over asyncio streams with
TLS encryption, optional timeouts, and translation of socket level failures
into Wayfetch exceptions.
"""

import asyncio
import contextlib
import logging
import ssl
from typing import Awaitable, Optional

from wayfetch.exceptions import ConnectTimeout, NetworkError, ReadTimeout, TlsError
from wayfetch.transport.tls import create_ssl_context
from wayfetch.utils.timing import Timeout

log = logging.getLogger(__name__)


class AsyncConnection:
    """
    A single TCP (optionally TLS) connection backed by asyncio streams.

    Attributes:
        host: The target hostname or IP address.
        port: The target port number.
        use_ssl: Whether to use TLS encryption.
        timeout: Timeout configuration, None for no timeout.
        ssl_context: Context used for TLS, created on demand.
        reader: Stream reader once open.
        writer: Stream writer once open.
    """

    __slots__ = ("host", "port", "use_ssl", "timeout", "ssl_context", "reader", "writer")

    def __init__(
        self,
        host: str,
        port: int,
        use_ssl: bool = False,
        timeout: Optional[Timeout] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.ssl_context = ssl_context
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def open(self) -> None:
        """
        Open the connection.

        Raises:
            ConnectTimeout: If connecting or the TLS handshake times out.
            TlsError: If the TLS handshake fails.
            NetworkError: For DNS failures, refused connections and the like.
        """
        context = None
        if self.use_ssl:
            context = self.ssl_context or create_ssl_context()

        connect_to = self.timeout.connect_timeout if self.timeout else None

        log.debug(
            "Starting new %s connection: %s:%s",
            "HTTPS" if self.use_ssl else "HTTP",
            self.host,
            self.port,
        )
        try:
            coro = asyncio.open_connection(
                self.host,
                self.port,
                ssl=context,
                server_hostname=self.host if context else None,
            )
            if connect_to is not None:
                self.reader, self.writer = await asyncio.wait_for(
                    coro, timeout=connect_to
                )
            else:
                self.reader, self.writer = await coro

        except asyncio.TimeoutError as e:
            raise ConnectTimeout(
                f"Timeout connecting to {self.host}:{self.port}"
            ) from e

        except ssl.SSLError as e:
            raise TlsError(f"TLS connection failed: {e}") from e

        except OSError as e:
            raise NetworkError(
                f"Connection error to {self.host}:{self.port} - {e}"
            ) from e

    async def read(self, op: Awaitable[bytes]) -> bytes:
        """
        Await a read operation on ``reader`` under the read timeout.

        Raises:
            ReadTimeout: If the read timeout elapses.
        """
        read_to = self.timeout.read_timeout if self.timeout else None
        try:
            if read_to is not None:
                return await asyncio.wait_for(op, timeout=read_to)
            return await op
        except asyncio.TimeoutError as e:
            raise ReadTimeout(f"Read timed out after {read_to}s") from e

    def is_usable(self) -> bool:
        """Check if connection is usable."""
        if not self.writer:
            return False

        return not self.writer.is_closing()

    def abort(self) -> None:
        """Drop the connection at once, without a graceful shutdown."""
        if self.writer:
            self.writer.transport.abort()
            self.reader = None
            self.writer = None

    async def close(self) -> None:
        """Close the connection if it is open."""
        if self.writer:
            self.writer.close()
            with contextlib.suppress(OSError, ssl.SSLError):
                await self.writer.wait_closed()

            self.reader = None
            self.writer = None
