"""
standin Response

Outbound response definition attached to an expectation.
"""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..encdec.content_type import CONTENT_TYPE_HEADER, TEXT_PLAIN
from ..encdec.cookie import Cookie
from ..encdec.encoders import Encoder, EncoderChain, ResponseEncoders
from ..errors import ConfigurationError
from .request import HttpMethod

logger = logging.getLogger("standin.mock.response")

ALLOW_HEADER = 'Allow'

Delay = Union[int, Tuple[int, int]]


def _header_key(name: str) -> str:
    # one Content-Type entry regardless of the case it was configured with
    return CONTENT_TYPE_HEADER if name.lower() == CONTENT_TYPE_HEADER.lower() else name


@dataclass
class ChunkingConfig:
    """
    Chunked transfer settings for a response.

    Attributes:
        chunks: Number of chunks the content is split into
        delay: Milliseconds between chunks, fixed or a (min, max) random range
    """

    chunks: int = 2
    delay: Delay = 0

    def __post_init__(self):
        if self.chunks < 1:
            raise ConfigurationError(f"Chunk count must be at least 1, got {self.chunks}")
        if isinstance(self.delay, tuple):
            low, high = self.delay
            if low < 0 or high < low:
                raise ConfigurationError(f"Invalid chunk delay range {self.delay}")
        elif self.delay < 0:
            raise ConfigurationError(f"Chunk delay must not be negative, got {self.delay}")

    def next_delay(self) -> int:
        """Delay before the next chunk, in milliseconds."""
        if isinstance(self.delay, tuple):
            low, high = self.delay
            return random.randint(low, high)
        return self.delay

    def prepare_chunks(self, content: bytes) -> List[bytes]:
        """
        Split content into `chunks` pieces.

        Pieces differ in size by at most one byte; the remainder goes to the
        leading pieces. Content shorter than the chunk count yields fewer,
        one-byte pieces, and empty content yields no pieces.
        """
        if not content:
            return []

        count = min(self.chunks, len(content))
        size, remainder = divmod(len(content), count)

        pieces = []
        offset = 0
        for index in range(count):
            length = size + (1 if index < remainder else 0)
            pieces.append(content[offset:offset + length])
            offset += length
        return pieces


class Response:
    """
    A configured HTTP response.

    Headers accumulate: calling header() twice for the same name sends both
    values. The body is encoded once, on first access of `content`, through the
    response-local encoders and then the server-wide ones.

    Example:
        response = Response(ResponseEncoders.defaults())
        response.code(201).header('Location', '/items/1').body({'id': 1}, 'application/json')
    """

    def __init__(self, server_encoders: Optional[ResponseEncoders] = None):
        self._local_encoders = ResponseEncoders()
        self._encoder_chain = EncoderChain(
            server_encoders if server_encoders is not None else ResponseEncoders.defaults(),
            self._local_encoders
        )

        self._code = 200
        self._headers: Dict[str, List[str]] = {}
        self._cookies: Dict[str, Union[str, Cookie]] = {}
        self._body: Any = None
        self._delay = 0
        self._chunking: Optional[ChunkingConfig] = None

        self._content: Optional[bytes] = None
        self._content_lock = threading.Lock()

    # Configuration

    def code(self, status: int) -> 'Response':
        self._code = status
        return self

    def header(self, name: str, *values: str) -> 'Response':
        self._headers.setdefault(_header_key(name), []).extend(str(v) for v in values)
        return self

    def headers(self, headers: Mapping[str, Union[str, List[str]]]) -> 'Response':
        for name, value in headers.items():
            if isinstance(value, (list, tuple)):
                self.header(name, *value)
            else:
                self.header(name, value)
        return self

    def allows(self, *methods: Union[str, HttpMethod]) -> 'Response':
        """Add methods to the Allow header."""
        return self.header(ALLOW_HEADER, *(HttpMethod.of(m).value for m in methods))

    def cookie(self, name: str, value: Union[str, Cookie]) -> 'Response':
        self._cookies[name] = value
        return self

    def cookies(self, cookies: Mapping[str, Union[str, Cookie]]) -> 'Response':
        self._cookies.update(cookies)
        return self

    def body(self, content: Any, content_type: Optional[str] = None) -> 'Response':
        self._body = content
        if content_type is not None:
            self.content_type(content_type)
        return self

    def content_type(self, value: str) -> 'Response':
        self._headers[CONTENT_TYPE_HEADER] = [value]
        return self

    def delay(self, milliseconds: int) -> 'Response':
        if milliseconds < 0:
            raise ConfigurationError(f"Response delay must not be negative, got {milliseconds}")
        self._delay = milliseconds
        return self

    def chunked(self, chunks: int = 2, delay: Delay = 0) -> 'Response':
        self._chunking = ChunkingConfig(chunks=chunks, delay=delay)
        return self

    def encoder(self, content_type: str, object_type: type, encoder: Encoder) -> 'Response':
        self._local_encoders.register(content_type, object_type, encoder)
        return self

    def encoders(self, encoders: ResponseEncoders) -> 'Response':
        self._local_encoders.merge(encoders)
        return self

    # Accessors

    @property
    def status_code(self) -> int:
        return self._code

    @property
    def header_map(self) -> Dict[str, List[str]]:
        return {name: list(values) for name, values in self._headers.items()}

    @property
    def cookie_map(self) -> Dict[str, Union[str, Cookie]]:
        return dict(self._cookies)

    @property
    def media_type(self) -> str:
        values = self._headers.get(CONTENT_TYPE_HEADER)
        return ','.join(values) if values else TEXT_PLAIN

    @property
    def delay_ms(self) -> int:
        return self._delay

    @property
    def chunking(self) -> Optional[ChunkingConfig]:
        return self._chunking

    @property
    def content(self) -> bytes:
        """
        Encoded response body, computed once and cached.

        Raises:
            EncoderNotFoundError: If the body is not bytes and no encoder handles it
        """
        if self._body is None:
            return b''

        with self._content_lock:
            if self._content is None:
                self._content = self._encoder_chain.encode(self._body, self.media_type)
                logger.debug(f"Encoded {type(self._body).__name__} body as {self.media_type} "
                             f"({len(self._content)} bytes)")
            return self._content

    def __repr__(self) -> str:
        return f"Response(code={self._code}, content_type={self.media_type!r})"


class ResponseWithoutContent(Response):
    """Response for HEAD requests: headers and status only, any configured body is ignored."""

    def body(self, content: Any, content_type: Optional[str] = None) -> 'Response':
        if content_type is not None:
            self.content_type(content_type)
        return self

    @property
    def content(self) -> bytes:
        return b''
