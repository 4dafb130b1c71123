"""src/wayfetch/client/redirects.py

Redirect following.

:class:`RedirectController` drives one logical request through as many
301/302 hops as ``max_redirects`` allows. Each hop gets its own copy of the
request spec and its own dispatch context; nothing is shared between hops
except the hop counter and the response history.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, Union

from wayfetch.client.dispatcher import dispatch, prepare
from wayfetch.client.options import RequestSpec
from wayfetch.client.response import Response
from wayfetch.exceptions import RedirectLimitExceeded
from wayfetch.http.headers import Headers
from wayfetch.http.url import resolve_location

__all__ = ["RedirectState", "Termination", "Result", "RedirectController"]

log = logging.getLogger(__name__)


class RedirectState(Enum):
    """States of a redirect sequence."""

    DISPATCHING = "dispatching"
    REDIRECTING = "redirecting"
    TERMINAL_SUCCESS = "terminal_success"
    TERMINAL_ERROR = "terminal_error"


class Termination(IntEnum):
    """How a request finished."""

    HEAD_OR_ERROR = 1
    COMPLETE = 2


@dataclass
class Result:
    """
    Outcome of a request.

    Attributes:
        payload: Body text, or the response headers for HEAD requests.
        response: Final response (earlier hops in ``response.history``).
        termination: Termination reason.
        hops: Number of redirects followed.
    """

    payload: Union[str, Headers]
    response: Response
    termination: Termination
    hops: int = 0

    @property
    def url(self) -> Optional[str]:
        """Effective URL of the final hop."""
        return self.response.url


class RedirectController:
    """
    State machine following 301/302 redirects for one request.

    Attributes:
        spec: Spec of the current hop.
        max_redirects: Redirect limit, read once from the initial spec.
        hops: Redirects followed so far.
        state: Current state.
        history: Redirect responses received so far, oldest first.
    """

    __slots__ = ("spec", "max_redirects", "hops", "state", "history")

    def __init__(self, spec: RequestSpec) -> None:
        self.spec = spec
        self.max_redirects = spec.max_redirects
        self.hops = 0
        self.state = RedirectState.DISPATCHING
        self.history: List[Response] = []

    def _transition(self, response: Response) -> RedirectState:
        if self.spec.method == "HEAD":
            return RedirectState.TERMINAL_SUCCESS
        if response.is_redirect:
            return RedirectState.REDIRECTING
        return RedirectState.TERMINAL_SUCCESS

    def _finish(self, response: Response) -> Result:
        response.history = list(self.history)
        if self.spec.method == "HEAD":
            return Result(response.headers, response, Termination.HEAD_OR_ERROR, self.hops)
        return Result(response.body or "", response, Termination.COMPLETE, self.hops)

    async def run(self) -> Result:
        """
        Dispatch until a non-redirect response arrives.

        Raises:
            RedirectLimitExceeded: If more than ``max_redirects`` redirects
                are received.
            WayfetchError: Whatever a hop raised.
        """
        while True:
            try:
                context, source = prepare(self.spec)
                response = await dispatch(context, source, self.spec.encoding)
            except Exception:
                self.state = RedirectState.TERMINAL_ERROR
                raise

            self.state = self._transition(response)
            if self.state is RedirectState.TERMINAL_SUCCESS:
                return self._finish(response)

            self.hops += 1
            if self.hops > self.max_redirects:
                self.state = RedirectState.TERMINAL_ERROR
                log.warning(
                    "Redirect limit of %s exceeded at %s", self.max_redirects, self.spec.url
                )
                raise RedirectLimitExceeded(self.max_redirects)

            next_url = resolve_location(context.url, response.headers["location"])
            log.info("Redirecting %s -> %s", self.spec.url, next_url)
            self.history.append(response)
            self.spec = self.spec.with_url(next_url)
            self.state = RedirectState.DISPATCHING
