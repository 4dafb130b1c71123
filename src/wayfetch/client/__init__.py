"""src/wayfetch/client/__init__.py"""

from .facade import delete, down, fetch, get, head, post, put, remote
from .options import RequestSpec
from .redirects import RedirectController, Result, Termination
from .response import Response

__all__ = [
    "RequestSpec",
    "Response",
    "Result",
    "Termination",
    "RedirectController",
    "fetch",
    "remote",
    "head",
    "get",
    "post",
    "put",
    "delete",
    "down",
]
