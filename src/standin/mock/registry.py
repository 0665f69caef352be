"""
standin Expectation Registry

Ordered store of HTTP expectations plus WebSocket expectations keyed by path.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from ..common.timeout import DEFAULT_POLL_INTERVAL, Timeout, WaitFor
from ..encdec.decoders import RequestDecoders
from ..encdec.encoders import ResponseEncoders
from ..errors import VerificationError
from ..match.core import Matcher
from .expectation import Expectation
from .request import ClientRequest, HttpMethod
from .websocket import WebSocketExpectation

logger = logging.getLogger("standin.mock.registry")

Configure = Optional[Callable[[Expectation], Any]]
Path = Union[str, Matcher]


class ExpectationRegistry:
    """
    Registered expectations, matched first-registered-first-matched.

    Registration is expected to happen before traffic starts; matching may run
    from many request threads at once.

    Example:
        registry = ExpectationRegistry()
        registry.get('/alpha', lambda e: e.responds().body('A'))
        registry.put('/items/1', lambda e: e.responder(lambda r: r.code(201)).responder(lambda r: r.code(200)))
        match = registry.find_match(request)
    """

    def __init__(
        self,
        decoders: Optional[RequestDecoders] = None,
        encoders: Optional[ResponseEncoders] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL
    ):
        self.decoders = decoders if decoders is not None else RequestDecoders.defaults()
        self.encoders = encoders if encoders is not None else ResponseEncoders.defaults()
        self.poll_interval = poll_interval

        self._expectations: List[Expectation] = []
        self._web_sockets: Dict[str, WebSocketExpectation] = {}
        self._lock = threading.Lock()

    # Registration

    def request(self, method: Union[str, HttpMethod], path: Path, configure: Configure = None) -> Expectation:
        expectation = Expectation(method, path, self.decoders, self.encoders)
        if configure is not None:
            configure(expectation)

        with self._lock:
            self._expectations.append(expectation)

        logger.debug(f"Registered {expectation.describe()}")
        return expectation

    def any(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.ANY, path, configure)

    def get(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.GET, path, configure)

    def head(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.HEAD, path, configure)

    def post(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.POST, path, configure)

    def put(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.PUT, path, configure)

    def delete(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.DELETE, path, configure)

    def patch(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.PATCH, path, configure)

    def options(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.OPTIONS, path, configure)

    def trace(self, path: Path, configure: Configure = None) -> Expectation:
        return self.request(HttpMethod.TRACE, path, configure)

    def web_socket(
        self,
        path: str,
        configure: Optional[Callable[[WebSocketExpectation], Any]] = None
    ) -> WebSocketExpectation:
        """Register WebSocket expectations for a path, replacing any earlier ones for it."""
        expectation = WebSocketExpectation(path)
        if configure is not None:
            configure(expectation)

        with self._lock:
            self._web_sockets[path] = expectation
        return expectation

    # Lookup

    def find_match(self, request: ClientRequest) -> Optional[Expectation]:
        for expectation in self.all():
            if expectation.matches(request):
                return expectation
        return None

    def find_ws_match(self, path: str) -> Optional[WebSocketExpectation]:
        with self._lock:
            return self._web_sockets.get(path)

    @property
    def web_socket_paths(self) -> List[str]:
        with self._lock:
            return list(self._web_sockets)

    def all(self) -> List[Expectation]:
        with self._lock:
            return list(self._expectations)

    def web_sockets(self) -> List[WebSocketExpectation]:
        with self._lock:
            return list(self._web_sockets.values())

    def clear(self):
        with self._lock:
            self._expectations.clear()
            self._web_sockets.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._expectations)

    # Verification

    def _first_unmet(self, timeout: Timeout) -> Optional[str]:
        wait = WaitFor.of(timeout)

        for expectation in self.all():
            if not expectation.verify(wait, self.poll_interval):
                return f"{expectation.describe()} (actual calls: {expectation.call_count})"

        for ws in self.web_sockets():
            if not ws.verify(wait, self.poll_interval):
                return f"WebSocket expectations for {ws.path} were not met"

        return None

    def verify(self, timeout: Timeout = 1.0) -> bool:
        """
        Check every expectation's call count, stopping at the first failure.

        Each expectation gets its own timeout window, so the total wait can
        reach timeout times the number of expectations.

        Args:
            timeout: Seconds (or WaitFor) each expectation may take to be satisfied

        Returns:
            True if all expectations are satisfied
        """
        unmet = self._first_unmet(timeout)
        if unmet is not None:
            logger.error(f"Call count mismatch -> {unmet}")
            return False
        return True

    def assert_verified(self, timeout: Timeout = 1.0):
        """
        Like verify(), but raise on failure.

        Raises:
            VerificationError: Naming the first expectation that was not satisfied
        """
        unmet = self._first_unmet(timeout)
        if unmet is not None:
            raise VerificationError(unmet, WaitFor.of(timeout).seconds)
