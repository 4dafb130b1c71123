"""src/wayfetch/exceptions.py

Wayfetch Exceptions hierarchy.
"""

# pylint: disable=redefined-builtin

from typing import Optional


class WayfetchError(Exception):
    """Base exception for all Wayfetch errors."""


class InvalidInputError(WayfetchError, ValueError):
    """
    Request options could not be used (missing or non-string URL,
    unknown method or encoding, unsupported body type).
    Raised before any I/O happens.
    """


class FilesystemError(WayfetchError, OSError):
    """The file given as request body could not be read."""

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        errno: Optional[int] = None,
    ):
        super().__init__(errno, message, filename)

    def __str__(self) -> str:
        return str(self.strerror)


class RequestError(WayfetchError):
    """General exception for Request errors."""


class NetworkError(RequestError):
    """
    Base exception for network-related errors.
    Wraps socket errors and other connection issues.
    """


class TimeoutError(RequestError):
    """
    Base exception for timeouts.
    """

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message)


class ConnectTimeout(TimeoutError):
    """Timeout during connection establishment."""


class ReadTimeout(TimeoutError):
    """Timeout during data reception."""


class TlsError(NetworkError):
    """TLS/SSL handshake or verification errors."""


class ProtocolError(RequestError):
    """
    Errors related to HTTP protocol (parsing, violations).
    """


class InvalidResponseError(ProtocolError):
    """Server sent a response that could not be understood."""


class RedirectLimitExceeded(RequestError):
    """More 301/302 redirects than allowed were received."""

    def __init__(self, max_redirects: int):
        super().__init__(f"redirect count over {max_redirects}")
        self.max_redirects = max_redirects
