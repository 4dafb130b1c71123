"""src/wayfetch/client/options.py

Per-call request options.

A :class:`RequestSpec` is built fresh for every call from whatever the
caller passed (a URL string, a mapping of options, or another RequestSpec),
so defaults are never shared between calls.
"""

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

from wayfetch.exceptions import InvalidInputError
from wayfetch.http.url import URL
from wayfetch.transport.agent import Agent
from wayfetch.utils.timing import Timeout

__all__ = [
    "RequestSpec",
    "METHODS",
    "UTF8",
    "BINARY",
    "DEFAULT_MAX_REDIRECTS",
]

METHODS = ("HEAD", "GET", "POST", "PUT", "DELETE")
UTF8 = "utf8"
BINARY = "binary"
DEFAULT_MAX_REDIRECTS = 10

_ENCODINGS = {
    "utf8": UTF8,
    "utf-8": UTF8,
    "binary": BINARY,
    "latin1": BINARY,
    "latin-1": BINARY,
}

OptionsType = Union[str, Mapping[str, Any], "RequestSpec"]


def _parse_max_redirects(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_MAX_REDIRECTS
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_REDIRECTS
    return max(parsed, 0)


def _parse_encoding(value: Any) -> str:
    if value is None:
        return UTF8
    try:
        return _ENCODINGS[str(value).strip().lower()]
    except KeyError:
        raise InvalidInputError(
            f"Unsupported response encoding {value!r}, expected 'utf8' or 'binary'"
        ) from None


def _parse_method(value: Any) -> str:
    if value is None:
        return "GET"
    method = str(value).strip().upper()
    if method not in METHODS:
        raise InvalidInputError(f"Unsupported method {value!r}")
    return method


# pylint: disable=too-many-instance-attributes
@dataclass
class RequestSpec:
    """
    Options for one logical request, redirects included.

    Attributes:
        url: Absolute http(s) URL of the first hop.
        method: HEAD, GET, POST, PUT or DELETE.
        headers: Request headers, normalized before they are sent.
        encoding: ``"utf8"`` to decode the body as UTF-8 text, ``"binary"``
            to map each byte to one character.
        body: Payload as bytes, text, a binary file object, or an (async)
            iterator of bytes.
        file: Path of a file to upload instead of ``body``.
        agent: Connection agent handed to the transport.
        max_redirects: Number of 301/302 hops to follow.
        timeout: Optional timeouts, None waits forever.
    """

    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    encoding: str = UTF8
    body: Any = None
    file: Optional[Union[str, "os.PathLike[str]"]] = None
    agent: Optional[Agent] = None
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    timeout: Optional[Timeout] = None

    @classmethod
    def coerce(cls, options: OptionsType, **overrides: Any) -> "RequestSpec":
        """
        Build a validated RequestSpec.

        Args:
            options: URL string, mapping of RequestSpec field names, or a
                RequestSpec (copied, never modified).
            overrides: Fields forced by the caller, e.g. ``method``.

        Raises:
            InvalidInputError: If the URL is missing or invalid, or a field
                has an unsupported value.
        """
        if isinstance(options, str):
            values: Dict[str, Any] = {"url": options}
        elif isinstance(options, RequestSpec):
            values = {f.name: getattr(options, f.name) for f in fields(cls)}
        elif isinstance(options, Mapping):
            values = dict(options)
        else:
            raise InvalidInputError("request url must be a string")

        values.update(overrides)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidInputError(f"Unknown request options: {', '.join(unknown)}")

        url = values.get("url")
        if not isinstance(url, str):
            raise InvalidInputError("request url must be a string")
        URL(url)

        headers = values.get("headers") or {}
        if not isinstance(headers, Mapping):
            raise InvalidInputError("request headers must be a mapping")

        agent = values.get("agent")
        if agent is not None and not isinstance(agent, Agent):
            raise InvalidInputError("agent must be a wayfetch.transport.Agent")

        try:
            timeout = Timeout.coerce(values.get("timeout"))
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid timeout: {values.get('timeout')!r}") from exc

        return cls(
            url=url,
            method=_parse_method(values.get("method")),
            headers=dict(headers),
            encoding=_parse_encoding(values.get("encoding")),
            body=values.get("body"),
            file=values.get("file") or None,
            agent=agent,
            max_redirects=_parse_max_redirects(values.get("max_redirects")),
            timeout=timeout,
        )

    def with_url(self, url: str) -> "RequestSpec":
        """Copy of this spec aimed at another URL."""
        return replace(self, url=url)
