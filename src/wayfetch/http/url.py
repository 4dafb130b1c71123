"""src/wayfetch/http/url.py

URL parsing and redirect target resolution for Wayfetch.
"""

import re
import urllib.parse

from wayfetch.exceptions import InvalidInputError

__all__ = ["URL", "is_absolute_http", "resolve_location"]

_ABSOLUTE_HTTP = re.compile(r"^https?://", re.IGNORECASE)
_DEFAULT_PORTS = {"http": 80, "https": 443}


def is_absolute_http(url: str) -> bool:
    """Whether ``url`` starts with ``http://`` or ``https://``."""
    return bool(_ABSOLUTE_HTTP.match(url))


class URL:
    """Parsed absolute http(s) URL, split the way a request needs it."""

    __slots__ = ("raw", "scheme", "host", "port", "path")

    def __init__(self, url: str):
        if not isinstance(url, str):
            raise InvalidInputError("request url must be a string")

        parsed = urllib.parse.urlsplit(url.strip())
        scheme = parsed.scheme.lower()
        if scheme not in _DEFAULT_PORTS:
            raise InvalidInputError(f"Unsupported URL scheme: {url!r}")
        if not parsed.hostname:
            raise InvalidInputError(f"Invalid URL, could not determine host: {url!r}")

        try:
            port = parsed.port
        except ValueError as exc:
            raise InvalidInputError(f"Invalid port in URL: {url!r}") from exc

        path = parsed.path or "/"
        if parsed.query:
            path += f"?{parsed.query}"

        self.raw = url
        self.scheme = scheme
        self.host = parsed.hostname
        self.port = port or _DEFAULT_PORTS[scheme]
        self.path = path

    @property
    def use_ssl(self) -> bool:
        return self.scheme == "https"

    @property
    def netloc(self) -> str:
        """Host, plus the port when it is not the scheme's default."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port == _DEFAULT_PORTS[self.scheme]:
            return host
        return f"{host}:{self.port}"

    @property
    def origin(self) -> str:
        """``scheme://netloc`` of this URL."""
        return f"{self.scheme}://{self.netloc}"

    def __repr__(self) -> str:
        return f"URL({self.raw!r})"


def resolve_location(current: URL, location: str) -> str:
    """
    Resolve a redirect ``Location`` against the URL of the hop that
    received it.

    Absolute http(s) locations are returned verbatim.
    """
    location = location.strip()
    if is_absolute_http(location):
        return location

    base = current.origin + current.path
    return urllib.parse.urljoin(base, location)
