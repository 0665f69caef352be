"""
standin Expectation

One registered request expectation: the matchers a request must satisfy, the
responses to send back in order, the call-count verifier and listeners.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from ..common.counter import AtomicCounter
from ..common.timeout import DEFAULT_POLL_INTERVAL, Timeout, WaitFor, is_true_before
from ..encdec.decoders import Decoder, DecoderChain, RequestDecoders
from ..encdec.encoders import ResponseEncoders
from ..match import request as rm
from ..match.core import Matcher, anything, greater_than_or_equal_to, wrap
from .request import ClientRequest, HttpMethod
from .response import Response, ResponseWithoutContent

logger = logging.getLogger("standin.mock.expectation")

Listener = Callable[[ClientRequest], Any]


class Expectation:
    """
    A request expectation.

    All matchers must accept a request for the expectation to match; with no
    matchers beyond the method and path, every request to that method and path
    matches. Responses are sent in registration order, the last one repeating
    once the list is exhausted.

    Example:
        expectation = Expectation(HttpMethod.GET, rm.path_matching('/items'))
        expectation.query('page', '1').header('Accept', 'application/json')
        expectation.responds().code(200).body('[]', 'application/json')
        expectation.called(1)
    """

    def __init__(
        self,
        method: Union[str, HttpMethod],
        path: Union[str, Matcher],
        decoders: Optional[RequestDecoders] = None,
        encoders: Optional[ResponseEncoders] = None
    ):
        self.method = HttpMethod.of(method)
        path_matcher = path if isinstance(path, Matcher) else rm.path_matching(path)

        self._matchers: List[Matcher] = [rm.method_matching(self.method), path_matcher]
        self._listeners: List[Listener] = []
        self._responses: List[Response] = []
        self._call_verifier: Matcher = anything()
        self._call_count = AtomicCounter()

        self._decoders = DecoderChain(decoders if decoders is not None else RequestDecoders.defaults())
        self._encoders = encoders if encoders is not None else ResponseEncoders.defaults()

    # Matchers

    def matcher(self, matcher: Matcher) -> 'Expectation':
        self._matchers.append(matcher)
        return self

    def secure(self, value: bool = True) -> 'Expectation':
        return self.matcher(rm.scheme_matching(value))

    def header(self, name: Union[str, Matcher], value: Any = None) -> 'Expectation':
        """
        Require a header.

        header(name) only requires the header to be present, even with an empty
        value; header(matcher) adds a request matcher directly.
        """
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.header_exists(name))
        return self.matcher(rm.header_matching(name, value))

    def headers(self, headers: Mapping[str, Any]) -> 'Expectation':
        for name, value in headers.items():
            self.header(name, value)
        return self

    def query(self, name: Union[str, Matcher], value: Any = None) -> 'Expectation':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.query_exists(name))
        return self.matcher(rm.query_matching(name, value))

    def queries(self, queries: Mapping[str, Any]) -> 'Expectation':
        for name, value in queries.items():
            self.query(name, value)
        return self

    def cookie(self, name: Union[str, Matcher], value: Any = None) -> 'Expectation':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.cookie_exists(name))
        return self.matcher(rm.cookie_matching(name, value))

    def cookies(self, cookies: Mapping[str, Any]) -> 'Expectation':
        for name, value in cookies.items():
            self.cookie(name, value)
        return self

    def param(self, name: Union[str, Matcher], value: Any = None) -> 'Expectation':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.body_param_exists(name))
        return self.matcher(rm.body_param_matching(name, value))

    def body(self, matcher: Any, content_type: str) -> 'Expectation':
        """
        Require a decoded body.

        Raises:
            DecoderNotFoundError: If no decoder is registered for the content type
        """
        decoder = self._decoders.require(content_type)
        return self.matcher(rm.body_matching(wrap(matcher), content_type, decoder))

    def decoder(self, content_type: str, decoder: Decoder) -> 'Expectation':
        """Register a decoder for this expectation only; must precede the body() call that needs it."""
        self._decoders.local_decoders.register(content_type, decoder)
        return self

    # Responses, verification and listeners

    def responds(self) -> Response:
        response = self._new_response()
        self._responses.append(response)
        return response

    def responder(self, configure: Callable[[Response], Any]) -> 'Expectation':
        response = self._new_response()
        configure(response)
        self._responses.append(response)
        return self

    def called(self, expected: Union[int, Matcher, None] = None) -> 'Expectation':
        """Set the call-count verifier; with no argument at least one call is expected."""
        self._call_verifier = greater_than_or_equal_to(1) if expected is None else wrap(expected)
        return self

    def listener(self, listener: Listener) -> 'Expectation':
        self._listeners.append(listener)
        return self

    def _new_response(self) -> Response:
        if self.method is HttpMethod.HEAD:
            return ResponseWithoutContent(self._encoders)
        return Response(self._encoders)

    # Runtime

    @property
    def matchers(self) -> List[Matcher]:
        return list(self._matchers)

    @property
    def responses(self) -> List[Response]:
        return list(self._responses)

    @property
    def call_count(self) -> int:
        return self._call_count.value

    def matches(self, request: ClientRequest) -> bool:
        return all(m.matches(request) for m in self._matchers)

    def _response_at(self, index: int) -> Optional[Response]:
        if not self._responses:
            return None
        return self._responses[min(index, len(self._responses) - 1)]

    def current_response(self) -> Optional[Response]:
        """Response for the next call, or None when no responses are configured."""
        return self._response_at(self._call_count.value)

    def mark(self, request: ClientRequest):
        """Count a call and notify listeners."""
        self._call_count.increment_and_get()
        self._notify(request)

    def respond(self, request: ClientRequest) -> Optional[Response]:
        """
        Claim the response for this call, count it and notify listeners.

        The response index and the count come from one atomic step, so
        concurrent callers each get the response for their own call.
        """
        index = self._call_count.get_and_increment()
        response = self._response_at(index)
        self._notify(request)
        return response

    def _notify(self, request: ClientRequest):
        for listener in self._listeners:
            try:
                listener(request)
            except Exception:
                logger.exception(f"Listener failed for {request}")

    def verify(self, timeout: Timeout = None, poll_interval: float = DEFAULT_POLL_INTERVAL) -> bool:
        """Whether the call count satisfies the verifier within the timeout."""
        wait = WaitFor.of(timeout)
        return is_true_before(
            lambda: self._call_verifier.matches(self._call_count.value),
            wait.seconds,
            poll_interval
        )

    def describe(self) -> str:
        parts = ', '.join(m.describe() for m in self._matchers)
        return f"Expectation ({self.method.value}): {parts}, and called {self._call_verifier.describe()}"

    def __str__(self) -> str:
        return self.describe()
