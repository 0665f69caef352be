"""
standin Request Decoders

Content-type keyed decoders that turn a raw request body into a Python value
for body matching.

Decoders are plain callables taking the body bytes and a DecodingContext.
Resolution checks exact media types first and then prefixes, so a decoder
registered for 'application/json' also serves 'application/json; charset=utf-8'.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import parse_qs

from ..errors import DecoderNotFoundError
from .content_type import (
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    APPLICATION_URLENCODED,
    TEXT_JSON,
    TEXT_PLAIN,
    split_content_type,
)


@dataclass(frozen=True)
class DecodingContext:
    """Request details available to a decoder."""

    content_length: int
    content_type: Optional[str]
    character_encoding: Optional[str]

    @property
    def charset(self) -> str:
        return self.character_encoding or 'utf-8'


Decoder = Callable[[bytes, DecodingContext], Any]


def utf8_string(body: bytes, context: DecodingContext) -> str:
    """Decode the body as text using the request charset (utf-8 by default)."""
    return body.decode(context.charset) if body else ''


def parse_json(body: bytes, context: DecodingContext) -> Any:
    """Decode the body as JSON; an empty body decodes to None."""
    if not body:
        return None
    return json.loads(body.decode(context.charset))


def url_encoded(body: bytes, context: DecodingContext) -> Dict[str, list]:
    """Decode a form body into a mapping of name to list of values (blank values kept)."""
    if not body:
        return {}
    return parse_qs(body.decode(context.charset), keep_blank_values=True)


def passthrough(body: bytes, context: DecodingContext) -> bytes:
    return body


class RequestDecoders:
    """
    Registry of request decoders keyed by content type.

    Example:
        decoders = RequestDecoders()
        decoders.register('application/json', parse_json)
        decoder = decoders.resolve('application/json; charset=utf-8')
    """

    def __init__(self):
        self._decoders: Dict[str, Decoder] = {}

    @classmethod
    def defaults(cls) -> 'RequestDecoders':
        """Create a registry with the built-in JSON, form, text and binary decoders."""
        decoders = cls()
        decoders.register(APPLICATION_JSON, parse_json)
        decoders.register(TEXT_JSON, parse_json)
        decoders.register(APPLICATION_URLENCODED, url_encoded)
        decoders.register(TEXT_PLAIN, utf8_string)
        decoders.register(APPLICATION_OCTET_STREAM, passthrough)
        return decoders

    def register(self, content_type: str, decoder: Decoder) -> 'RequestDecoders':
        media_type, _ = split_content_type(content_type)
        self._decoders[media_type or content_type] = decoder
        return self

    def merge(self, other: 'RequestDecoders') -> 'RequestDecoders':
        self._decoders.update(other._decoders)
        return self

    def resolve(self, content_type: Optional[str]) -> Optional[Decoder]:
        media_type, _ = split_content_type(content_type)
        if media_type is None:
            return None

        if media_type in self._decoders:
            return self._decoders[media_type]

        for registered, decoder in self._decoders.items():
            if media_type.startswith(registered):
                return decoder

        return None

    def __len__(self) -> int:
        return len(self._decoders)


class DecoderChain:
    """Looks up decoders in expectation-local registries first, then server-wide ones."""

    def __init__(self, server_decoders: RequestDecoders, local_decoders: Optional[RequestDecoders] = None):
        self.server_decoders = server_decoders
        self.local_decoders = local_decoders if local_decoders is not None else RequestDecoders()

    def resolve(self, content_type: Optional[str]) -> Optional[Decoder]:
        return self.local_decoders.resolve(content_type) or self.server_decoders.resolve(content_type)

    def require(self, content_type: str) -> Decoder:
        """
        Resolve a decoder or fail.

        Raises:
            DecoderNotFoundError: If neither registry has a decoder for the content type
        """
        decoder = self.resolve(content_type)
        if decoder is None:
            raise DecoderNotFoundError(content_type)
        return decoder
