"""src/wayfetch/http/headers.py

HTTP header normalization and response header mapping for Wayfetch.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Union, cast

__all__ = ["normalize_headers", "Headers"]


def normalize_headers(headers: Optional[Mapping[Any, Any]]) -> Dict[str, str]:
    """
    Build a new header mapping with trimmed, lower-cased names and
    trimmed string values.

    The given mapping is left untouched.
    """
    normalized: Dict[str, str] = {}
    if not headers:
        return normalized

    for key, value in headers.items():
        normalized[str(key).strip().lower()] = str(value).strip()

    return normalized


class Headers(Mapping[str, str]):
    """
    Case-insensitive mapping of response headers.

    Names are stored lower-cased. Repeated headers keep every value; item
    access joins them with commas, except Set-Cookie which yields the first.
    Access raw lists via get_all().
    """

    __slots__ = ("_headers",)

    def __init__(self, headers: Optional[Mapping[str, Union[str, List[str]]]] = None):
        self._headers: Dict[str, List[str]] = {}
        if headers:
            for k, v in headers.items():
                if isinstance(v, list):
                    self._headers[k.lower()] = list(v)
                else:
                    self._headers[k.lower()] = [v]

    def add(self, key: str, value: str) -> None:
        """Append a value, keeping any previous ones for the same name."""
        self._headers.setdefault(key.lower(), []).append(value)

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return cast(str, value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._headers

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get header value.

        Args:
            key: Header name (case-insensitive).
            default: Default value if header not found.

        Returns:
            Comma-joined string for multiple values (except Set-Cookie
            which returns first), or default if not found.
        """
        values = self._headers.get(key.lower())
        if not values:
            return default

        if key.lower() == "set-cookie":
            return values[0]

        return ", ".join(values)

    def get_all(self, key: str) -> List[str]:
        """Get all values of a header, empty list if not found."""
        return list(self._headers.get(key.lower(), []))
