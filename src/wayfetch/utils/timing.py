"""src/wayfetch/utils/timing.py

Timeouts configuration.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Timeout:
    """
    Timeout configuration. Every field defaults to None, meaning wait forever.

    Attributes:
        connect: Maximum time to wait for connection establishment.
        read: Maximum time to wait for each read from the server.
        total: Fallback for ``connect`` and ``read`` when they are unset.
    """

    connect: Optional[float] = None
    read: Optional[float] = None
    total: Optional[float] = None

    @classmethod
    def from_float(cls, timeout: Optional[float]) -> "Timeout":
        """Create a Timeout instance from a single float (total timeout fallback)."""
        if timeout is None:
            return cls()
        return cls(connect=timeout, read=timeout, total=timeout)

    @classmethod
    def coerce(cls, value: Union["Timeout", float, int, None]) -> Optional["Timeout"]:
        """Accept a Timeout, a number of seconds, or None."""
        if value is None or isinstance(value, Timeout):
            return value
        return cls.from_float(float(value))

    @property
    def connect_timeout(self) -> Optional[float]:
        return self.connect if self.connect is not None else self.total

    @property
    def read_timeout(self) -> Optional[float]:
        return self.read if self.read is not None else self.total
