"""
standin Mock Server

FastAPI-based HTTP and WebSocket mock server for tests.

Features:
- Expectations matched in registration order against every request attribute
- Response cycling, delays and chunked transfer
- Call-count verification with bounded waiting
- Optional BASIC or DIGEST authentication and global request requirements
- Diagnostic reports for unmatched requests and messages
"""

import logging
import socket
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional

import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import PlainTextResponse, Response as HttpResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from ..common.timeout import Timeout
from ..common.utils import HEADERS_TO_SKIP, render_content
from ..encdec.content_type import CONTENT_TYPE_HEADER
from ..encdec.cookie import Cookie
from ..encdec.decoders import Decoder, RequestDecoders
from ..encdec.encoders import Encoder, ResponseEncoders
from ..errors import ConfigurationError
from .auth import AuthenticationConfig, Authenticator
from .config import ServerConfig
from .registry import ExpectationRegistry
from .report import UnmatchedRequestReport, UnmatchedWsReport
from .request import ClientRequest, HttpMethod
from .requirements import Requirements
from .response import Response
from .websocket import MessageType, OutboundMessage, WebSocketExpectation

NOT_FOUND_BODY = "404: Not Found"

# WebSocket close code for a connection to a path with no expectations
POLICY_VIOLATION = 1008

HTTP_METHODS = [m.value for m in HttpMethod.standard()]


@dataclass
class ServerMetrics:
    """Track mock server metrics."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, matched: bool):
        with self._lock:
            self.total_requests += 1
            if matched:
                self.matched_requests += 1
            else:
                self.unmatched_requests += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        with self._lock:
            total = self.total_requests
            matched = self.matched_requests
            unmatched = self.unmatched_requests
        return {
            'total_requests': total,
            'matched_requests': matched,
            'unmatched_requests': unmatched,
            'match_rate': round((matched / total * 100) if total > 0 else 0, 2),
            'start_time': self.start_time
        }


class MockServer:
    """
    Embeddable mock HTTP/WebSocket server.

    Expectations are registered up front, the server runs on an ephemeral port
    in a background thread, and the test verifies call counts at the end.

    Example:
        with MockServer() as server:
            server.expectations(lambda e: e.get('/alpha', lambda x: x.called(1).responds().body('A')))
            requests.get(server.http_url('/alpha'))
            server.assert_verified()

        # In-process, without a socket
        client = TestClient(MockServer().app)
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize mock server.

        Args:
            config: Optional ServerConfig for server behavior
        """
        self.config = config or ServerConfig()
        self.metrics = ServerMetrics()

        self.logger = logging.getLogger("standin.mock")
        level = 'DEBUG' if self.config.log_level.lower() == 'trace' else self.config.log_level.upper()
        logging.getLogger("standin").setLevel(getattr(logging, level))

        self.decoders = RequestDecoders.defaults()
        self.encoders = ResponseEncoders.defaults()
        self.registry = ExpectationRegistry(self.decoders, self.encoders, poll_interval=self.config.poll_interval)
        self._requirements = Requirements()
        self._authenticator: Optional[Authenticator] = None

        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._port: Optional[int] = None
        self._lifecycle_lock = threading.Lock()

        self.app = self._create_app()

    # Configuration

    def expects(self) -> ExpectationRegistry:
        return self.registry

    def expectations(self, configure: Callable[[ExpectationRegistry], Any]) -> 'MockServer':
        """Configure expectations through a callback, starting the server if auto_start is enabled."""
        configure(self.registry)
        if self.config.auto_start:
            self.start()
        return self

    def requirements(self, configure: Callable[[Requirements], Any]) -> 'MockServer':
        configure(self._requirements)
        return self

    def authentication(self, configure: Callable[[AuthenticationConfig], Any]) -> 'MockServer':
        """
        Enable authentication for every request.

        Raises:
            ConfigurationError: If the callback configures conflicting schemes or none at all
        """
        auth_config = AuthenticationConfig()
        configure(auth_config)
        self._authenticator = Authenticator(auth_config)
        return self

    def decoder(self, content_type: str, decoder: Decoder) -> 'MockServer':
        self.decoders.register(content_type, decoder)
        return self

    def encoder(self, content_type: str, object_type: type, encoder: Encoder) -> 'MockServer':
        self.encoders.register(content_type, object_type, encoder)
        return self

    def clear_expectations(self):
        """Remove all HTTP and WebSocket expectations and requirements."""
        self.registry.clear()
        self._requirements.clear()

    def verify(self, timeout: Timeout = None) -> bool:
        return self.registry.verify(self.config.verify_timeout if timeout is None else timeout)

    def assert_verified(self, timeout: Timeout = None):
        self.registry.assert_verified(self.config.verify_timeout if timeout is None else timeout)

    # App

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with catch-all HTTP and WebSocket routes."""
        app = FastAPI(
            title="standin Mock Server",
            description="Expectation-driven mock HTTP server for tests",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        @app.api_route("/{path:path}", methods=HTTP_METHODS)
        async def mock_request(request: Request, path: str):
            """Handle incoming requests and serve mock responses."""
            return await self._handle_request(request)

        async def mock_web_socket(websocket: WebSocket, path: str):
            await self._handle_web_socket(websocket)

        app.add_api_websocket_route("/{path:path}", mock_web_socket)

        return app

    async def _handle_request(self, request: Request) -> HttpResponse:
        body = await request.body()
        client_request = ClientRequest.from_starlette(request, body)
        return await run_in_threadpool(self._dispatch, client_request)

    def _dispatch(self, request: ClientRequest) -> HttpResponse:
        """
        Answer one request: authentication, then requirements, then expectation matching.

        Runs on a worker thread, so delays block only this request.
        """
        self.logger.debug(f"Incoming: {request}")

        if self._authenticator is not None:
            challenge = self._authenticator.check(request)
            if challenge is not None:
                return HttpResponse(status_code=401, headers=challenge)

        expectation = None
        if self._requirements.check(request):
            expectation = self.registry.find_match(request)

        if expectation is None:
            self.metrics.record(matched=False)
            return self._unmatched(request)

        self.metrics.record(matched=True)
        response = expectation.respond(request)

        if response is None:
            self.logger.debug(f"No response configured for {request}; sending 204")
            return HttpResponse(status_code=204)

        try:
            return self._send(request, response)
        except Exception:
            self.logger.exception(f"Failed to build response for {request}")
            return HttpResponse(status_code=500)

    def _unmatched(self, request: ClientRequest) -> HttpResponse:
        report = UnmatchedRequestReport(
            request,
            self.registry.all(),
            self._requirements.all()
        ).render()

        self.logger.warning(f"No match found for {request}\n{report}")
        if self.config.report_to_console:
            print(report)

        return PlainTextResponse(NOT_FOUND_BODY, status_code=404)

    def _send(self, request: ClientRequest, response: Response) -> HttpResponse:
        """Translate a configured Response into an outbound FastAPI response."""
        if response.delay_ms:
            time.sleep(response.delay_ms / 1000.0)

        content = response.content
        media_type = response.media_type

        if self.config.log_response_content:
            self.logger.debug(f"Response for {request}: {response.status_code} "
                              f"{render_content(content, media_type)}")

        chunking = response.chunking
        if chunking is not None and content:
            chunks = chunking.prepare_chunks(content)

            def stream() -> Iterator[bytes]:
                for index, chunk in enumerate(chunks):
                    if index:
                        delay = chunking.next_delay()
                        if delay:
                            time.sleep(delay / 1000.0)
                    yield chunk

            outbound = StreamingResponse(stream(), status_code=response.status_code, media_type=media_type)
        else:
            outbound = HttpResponse(content=content, status_code=response.status_code, media_type=media_type)

        for name, values in response.header_map.items():
            if name.lower() in HEADERS_TO_SKIP or name.lower() == CONTENT_TYPE_HEADER.lower():
                continue
            for value in values:
                outbound.headers.append(name, value)

        for name, cookie in response.cookie_map.items():
            if isinstance(cookie, Cookie):
                outbound.set_cookie(
                    name,
                    cookie.value or '',
                    max_age=cookie.max_age,
                    path=cookie.path or '/',
                    domain=cookie.domain,
                    secure=cookie.secure,
                    httponly=cookie.http_only
                )
            else:
                outbound.set_cookie(name, str(cookie))

        return outbound

    async def _handle_web_socket(self, websocket: WebSocket):
        path = websocket.url.path
        expectation = self.registry.find_ws_match(path)
        if expectation is None:
            self.logger.warning(f"No WebSocket expectations for {path}; closing connection")
            await websocket.close(code=POLICY_VIOLATION)
            return

        await websocket.accept()
        expectation.connect()
        self.logger.debug(f"WebSocket connected: {path}")

        for message in expectation.outbound_messages:
            await self._ws_send(websocket, message)

        while True:
            event = await websocket.receive()
            if event['type'] == 'websocket.disconnect':
                self.logger.debug(f"WebSocket disconnected: {path}")
                break

            if event.get('text') is not None:
                payload, message_type = event['text'], MessageType.TEXT
            else:
                payload, message_type = event.get('bytes') or b'', MessageType.BINARY

            await self._ws_receive(websocket, expectation, payload, message_type)

    async def _ws_receive(
        self,
        websocket: WebSocket,
        expectation: WebSocketExpectation,
        payload: Any,
        message_type: MessageType
    ):
        inbound = expectation.find_match(payload, message_type)
        if inbound is None:
            report = UnmatchedWsReport(expectation, payload).render()
            self.logger.warning(f"Unmatched WebSocket message on {expectation.path}\n{report}")
            if self.config.report_to_console:
                print(report)
            return

        inbound.mark()
        for reaction in inbound.reactions:
            await self._ws_send(websocket, reaction)

    @staticmethod
    async def _ws_send(websocket: WebSocket, message: OutboundMessage):
        data = message.data
        if isinstance(data, bytes):
            await websocket.send_bytes(data)
        else:
            await websocket.send_text(data)

    # Lifecycle

    @property
    def port(self) -> int:
        if self._port is None:
            raise ConfigurationError("Server is not started", suggestion="call start() first")
        return self._port

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def http_url(self, path: str = '') -> str:
        scheme = 'https' if self.config.secure else 'http'
        return f"{scheme}://{self.config.host}:{self.port}{path}"

    def ws_url(self, path: str = '') -> str:
        scheme = 'wss' if self.config.secure else 'ws'
        return f"{scheme}://{self.config.host}:{self.port}{path}"

    def start(self) -> 'MockServer':
        """
        Start serving in a background thread; a no-op if already running.

        Raises:
            RuntimeError: If the server does not come up within startup_timeout
        """
        with self._lifecycle_lock:
            if self.running:
                return self

            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.config.host, self.config.port))
            self._port = sock.getsockname()[1]

            uvicorn_config = uvicorn.Config(
                self.app,
                log_level=self.config.log_level.lower(),
                ssl_keyfile=self.config.ssl_keyfile,
                ssl_certfile=self.config.ssl_certfile,
                access_log=False,
                lifespan='off'
            )
            self._server = uvicorn.Server(uvicorn_config)
            self._thread = threading.Thread(
                target=self._server.run,
                kwargs={'sockets': [sock]},
                name=f"standin-{self._port}",
                daemon=True
            )
            self._thread.start()

            deadline = time.monotonic() + self.config.startup_timeout
            while not self._server.started:
                if not self._thread.is_alive() or time.monotonic() > deadline:
                    self._server.should_exit = True
                    sock.close()
                    raise RuntimeError(f"Mock server failed to start on {self.config.host}:{self._port}")
                time.sleep(0.01)

            self.logger.info(f"Mock server listening on {self.http_url()}")
            return self

    def stop(self):
        """Stop serving and wait for the background thread to finish."""
        with self._lifecycle_lock:
            if self._server is None:
                return

            self._server.should_exit = True
            if self._thread is not None:
                self._thread.join(timeout=self.config.startup_timeout)

            self.logger.info(f"Mock server on port {self._port} stopped")
            self._server = None
            self._thread = None

    def __enter__(self) -> 'MockServer':
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
