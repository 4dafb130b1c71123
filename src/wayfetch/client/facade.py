"""src/wayfetch/client/facade.py

Public entry points.

``fetch`` is the awaitable core. ``remote`` and the verb helpers wrap it in
a task that reports back through a callback, called exactly once with
``(error, payload, response, termination)``.
"""

import asyncio
from typing import Any, Callable, Optional, Union

from wayfetch.client.options import BINARY, OptionsType, RequestSpec
from wayfetch.client.redirects import RedirectController, Result, Termination
from wayfetch.client.response import Response
from wayfetch.http.headers import Headers

__all__ = [
    "Callback",
    "fetch",
    "remote",
    "head",
    "get",
    "post",
    "put",
    "delete",
    "down",
]

Callback = Callable[
    [
        Optional[BaseException],
        Optional[Union[str, Headers]],
        Optional[Response],
        Termination,
    ],
    Any,
]


def _noop(*_args: Any) -> None:
    return None


async def fetch(options: OptionsType, **overrides: Any) -> Result:
    """
    Perform a request, following 301/302 redirects.

    Args:
        options: URL string, mapping of :class:`RequestSpec` fields, or a
            RequestSpec.
        overrides: Fields forced on top of ``options``.

    Returns:
        The :class:`Result` of the final hop.

    Raises:
        InvalidInputError: If the options are unusable.
        FilesystemError: If the body file cannot be read.
        NetworkError: On transport failures.
        ProtocolError: If a server response is malformed.
        RedirectLimitExceeded: If too many redirects are received.
    """
    spec = RequestSpec.coerce(options, **overrides)
    return await RedirectController(spec).run()


async def _deliver(
    options: OptionsType, callback: Callback, overrides: Any
) -> Optional[Result]:
    try:
        result = await fetch(options, **overrides)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        callback(exc, None, None, Termination.HEAD_OR_ERROR)
        return None

    callback(None, result.payload, result.response, result.termination)
    return result


def remote(
    options: OptionsType, callback: Optional[Callback] = None, **overrides: Any
) -> "asyncio.Task[Optional[Result]]":
    """
    Start a request on the running event loop.

    The callback receives ``(error, payload, response, termination)`` once.
    On success ``error`` is None and ``payload`` is the body text (the
    headers for HEAD). On failure only ``error`` and ``termination`` are set.

    Returns:
        The task running the request. It resolves to the :class:`Result`,
        or to None when an error was handed to the callback.

    Raises:
        RuntimeError: If called without a running event loop.
    """
    loop = asyncio.get_running_loop()
    if not callable(callback):
        callback = _noop
    return loop.create_task(_deliver(options, callback, overrides))


def head(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """HEAD request; the callback gets the response headers."""
    return remote(options, callback, method="HEAD")


def get(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """GET request."""
    return remote(options, callback, method="GET")


def post(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """POST request."""
    return remote(options, callback, method="POST")


def put(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """PUT request."""
    return remote(options, callback, method="PUT")


def delete(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """DELETE request."""
    return remote(options, callback, method="DELETE")


def down(
    options: OptionsType, callback: Optional[Callback] = None
) -> "asyncio.Task[Optional[Result]]":
    """Download a resource: GET with ``encoding="binary"``."""
    return remote(options, callback, method="GET", encoding=BINARY)
