"""src/wayfetch/client/response.py

HTTP Response handling module.

A :class:`Response` describes one hop: its status, headers and, for every
method but HEAD, the fully drained body.
"""

import json as std_json
from typing import Any, List, Optional

from wayfetch.exceptions import InvalidResponseError
from wayfetch.http.headers import Headers

__all__ = ["Response"]


class Response:
    """
    Represents one received HTTP response.

    Attributes:
        status_code: HTTP status code as integer.
        reason: Reason phrase from the status line.
        headers: Case-insensitive response headers (names lower-cased).
        body: Decoded body text, None for HEAD responses.
        content: Raw body bytes, empty for HEAD responses.
        url: Effective URL of the hop that produced this response.
        history: Earlier responses of a redirect chain, oldest first.
    """

    # pylint: disable=too-many-instance-attributes
    __slots__ = (
        "status_code",
        "reason",
        "headers",
        "body",
        "content",
        "url",
        "history",
        "encoding",
    )

    def __init__(
        self,
        status_code: int,
        headers: Optional[Headers] = None,
        body: Optional[str] = None,
        content: bytes = b"",
        *,
        reason: str = "",
        url: Optional[str] = None,
        encoding: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.headers: Headers = headers if headers is not None else Headers()
        self.body = body
        self.content = content
        self.url = url
        self.encoding = encoding
        self.history: List["Response"] = []

    @property
    def status(self) -> int:
        """Alias for status_code for compatibility."""
        return self.status_code

    @property
    def is_redirect(self) -> bool:
        """301/302 carrying a Location header."""
        return self.status_code in (301, 302) and "location" in self.headers

    def text(self) -> str:
        """Return the body as text (empty string for HEAD responses)."""
        return self.body or ""

    def json(self) -> Any:
        """
        Returns JSON-decoded body.
        """
        try:
            return std_json.loads(self.content.decode("utf-8"))
        except (std_json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise InvalidResponseError("Failed to decode JSON response") from exc

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"
