"""src/wayfetch/__init__.py

Wayfetch - single-connection HTTP/HTTPS request engine on asyncio.

Wayfetch performs one logical request per call: it sends a body taken from
bytes, text, a stream or a file, follows a bounded number of 301/302
redirects, and hands back the fully buffered response (text or single-byte
"binary" text) or, for HEAD requests, just the headers.

Key Features:
    - Zero external dependencies
    - Callback and awaitable interfaces
    - HTTP/1.1 over asyncio streams, TLS 1.2+
    - File and streaming uploads (chunked when the length is unknown)
    - Bounded 301/302 redirect following

Example:
    Awaitable usage::

        import asyncio
        import wayfetch

        async def main():
            result = await wayfetch.fetch("https://example.com/data")
            print(result.response.status_code, result.payload)

        asyncio.run(main())

    Callback usage::

        import asyncio
        import wayfetch

        def done(err, body, response, termination):
            if err:
                print("failed:", err)
            else:
                print(response.status_code, len(body))

        async def main():
            await wayfetch.post(
                {"url": "https://example.com/upload", "file": "report.pdf"}, done
            )

        asyncio.run(main())
"""

import logging
from logging import NullHandler
from typing import TextIO

from wayfetch.client.facade import delete, down, fetch, get, head, post, put, remote
from wayfetch.client.options import RequestSpec
from wayfetch.client.redirects import Result, Termination
from wayfetch.client.response import Response
from wayfetch.exceptions import (
    FilesystemError,
    InvalidInputError,
    NetworkError,
    RedirectLimitExceeded,
    WayfetchError,
)
from wayfetch.transport.agent import Agent
from wayfetch.utils.timing import Timeout
from wayfetch.version import __version__

__all__ = [
    "fetch",
    "remote",
    "head",
    "get",
    "post",
    "put",
    "delete",
    "down",
    "RequestSpec",
    "Response",
    "Result",
    "Termination",
    "Agent",
    "Timeout",
    "WayfetchError",
    "InvalidInputError",
    "FilesystemError",
    "NetworkError",
    "RedirectLimitExceeded",
    "add_stderr_logger",
]

logging.getLogger(__name__).addHandler(NullHandler())


def add_stderr_logger(level: int = logging.DEBUG) -> "logging.StreamHandler[TextIO]":
    """
    Helper for quickly adding a StreamHandler to the logger. Useful for
    debugging.

    Returns the handler after adding it.
    """
    logger = logging.getLogger(__name__)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Added a stderr logging handler to logger: %s", __name__)
    return handler


del NullHandler
