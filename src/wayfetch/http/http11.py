"""src/wayfetch/http/http11.py

HTTP/1.1 request serialization and response head parsing.
"""

from typing import List, Mapping, Tuple

from wayfetch.exceptions import InvalidResponseError, ProtocolError
from wayfetch.http.headers import Headers

__all__ = ["HttpParser", "build_request_head"]


def build_request_head(method: str, path: str, headers: Mapping[str, str]) -> bytes:
    """
    Builds the request line and header block, ending with the blank line.

    Raises:
        ProtocolError: If a header name or value would break the framing.
    """
    lines = [f"{method} {path} HTTP/1.1"]
    for k, v in headers.items():
        # Validate against HTTP header injection attacks
        if "\r" in k or "\n" in k or "\r" in v or "\n" in v:
            raise ProtocolError(f"Invalid character in header {k}: {v!r}")
        if "\x00" in k or "\x00" in v:
            raise ProtocolError(f"Null byte in header {k}: {v!r}")
        lines.append(f"{k}: {v}")

    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


class HttpParser:
    """
    HTTP/1.1 response head parser.

    Handles:
    - Status Line parsing.
    - Header parsing with duplicate handling.
    - Defensive sizing.
    """

    __slots__ = ("max_header_size",)

    def __init__(self, max_header_size: int = 65536):
        self.max_header_size = max_header_size

    def parse_head(self, data: bytes) -> Tuple[int, str, Headers]:
        """
        Parse a response head (status line and headers, with or without the
        trailing blank line).

        Returns:
            Tuple of (status_code, reason, headers)

        Raises:
            ProtocolError: If headers are too large or cannot be decoded.
            InvalidResponseError: If the status line is invalid.
        """
        if len(data) > self.max_header_size:
            raise ProtocolError(
                f"Headers exceed maximum size of {self.max_header_size} bytes"
            )

        try:
            text = data.decode("iso-8859-1")
        except UnicodeDecodeError as e:  # pragma: no cover
            raise ProtocolError(f"Header decoding failed: {e}") from e

        lines = text.rstrip("\r\n").split("\r\n")
        if not lines or not lines[0]:
            raise InvalidResponseError("Empty response")

        status_code, reason = self._parse_status_line(lines[0])
        return status_code, reason, self._parse_headers(lines[1:])

    @staticmethod
    def _parse_status_line(line: str) -> Tuple[int, str]:
        # HTTP/1.1 200 OK
        parts = line.split(" ", 2)
        if len(parts) < 2 or not parts[0].startswith("HTTP/"):
            raise InvalidResponseError(f"Invalid status line: {line}")
        try:
            status_code = int(parts[1])
        except ValueError as exc:
            raise InvalidResponseError(f"Invalid status line: {line}") from exc

        return status_code, parts[2] if len(parts) > 2 else ""

    @staticmethod
    def _parse_headers(lines: List[str]) -> Headers:
        headers = Headers()
        for line in lines:
            if not line or ":" not in line:
                # Tolerate stray lines from sloppy servers
                continue
            key, value = line.split(":", 1)
            headers.add(key.strip(), value.strip())

        return headers
