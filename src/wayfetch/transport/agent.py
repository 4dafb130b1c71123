"""src/wayfetch/transport/agent.py

Connection agent: the object a request asks for a connection and hands it
back to when the hop is over.
"""

import ssl
from typing import Optional

from wayfetch.transport.connection import AsyncConnection
from wayfetch.utils.timing import Timeout

__all__ = ["Agent", "DEFAULT_USER_AGENT"]

DEFAULT_USER_AGENT = "wayfetch/0.1"


class Agent:
    """
    Hands out connections for request hops.

    The default implementation opens a fresh connection per hop and closes
    it on release. Subclasses may override ``get_connection`` and
    ``put_connection`` to reuse connections; the request engine passes the
    agent through untouched.

    Attributes:
        ssl_context: Context used for https targets, None for the default.
        user_agent: Value of the ``user-agent`` header when the caller sets none.
    """

    __slots__ = ("ssl_context", "user_agent")

    def __init__(
        self,
        ssl_context: Optional[ssl.SSLContext] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.ssl_context = ssl_context
        self.user_agent = user_agent

    async def get_connection(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        timeout: Optional[Timeout] = None,
    ) -> AsyncConnection:
        """Return an open connection to ``host:port``."""
        conn = AsyncConnection(
            host, port, use_ssl, timeout=timeout, ssl_context=self.ssl_context
        )
        await conn.open()
        return conn

    async def put_connection(self, conn: AsyncConnection) -> None:
        """Give back a connection once its hop has finished."""
        if conn.is_usable():
            await conn.close()
        else:
            conn.abort()

    def discard_connection(self, conn: AsyncConnection) -> None:
        """Drop a connection that must not be reused (aborted or failed)."""
        conn.abort()
