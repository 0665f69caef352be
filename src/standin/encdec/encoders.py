"""
standin Response Encoders

Encoders turn configured response content into bytes, keyed by content type
and by the Python type of the content.
"""

import json
from typing import Any, Callable, List, Optional, Tuple

from ..errors import EncoderNotFoundError
from .content_type import (
    APPLICATION_JSON,
    TEXT_HTML,
    TEXT_JSON,
    TEXT_PLAIN,
    TEXT_XML,
    split_content_type,
)

Encoder = Callable[[Any], bytes]


def json_encoder(content: Any) -> bytes:
    return json.dumps(content).encode('utf-8')


def text_encoder(content: Any) -> bytes:
    return str(content).encode('utf-8')


class ResponseEncoders:
    """
    Registry of response encoders keyed by (content type, object type).

    Object types are checked with isinstance, so an encoder registered for dict
    also serves dict subclasses.
    """

    def __init__(self):
        self._encoders: List[Tuple[str, type, Encoder]] = []

    @classmethod
    def defaults(cls) -> 'ResponseEncoders':
        """Create a registry with JSON and text encoders."""
        encoders = cls()
        for content_type in (APPLICATION_JSON, TEXT_JSON):
            encoders.register(content_type, dict, json_encoder)
            encoders.register(content_type, list, json_encoder)
            encoders.register(content_type, str, text_encoder)
        for content_type in (TEXT_PLAIN, TEXT_HTML, TEXT_XML):
            encoders.register(content_type, str, text_encoder)
        return encoders

    def register(self, content_type: str, object_type: type, encoder: Encoder) -> 'ResponseEncoders':
        media_type, _ = split_content_type(content_type)
        # later registrations win
        self._encoders.insert(0, (media_type or content_type, object_type, encoder))
        return self

    def merge(self, other: 'ResponseEncoders') -> 'ResponseEncoders':
        for entry in reversed(other._encoders):
            self._encoders.insert(0, entry)
        return self

    def resolve(self, content_type: Optional[str], object_type: type) -> Optional[Encoder]:
        media_type, _ = split_content_type(content_type)
        if media_type is None:
            return None

        for registered, registered_type, encoder in self._encoders:
            if media_type.startswith(registered) and issubclass(object_type, registered_type):
                return encoder

        return None

    def __len__(self) -> int:
        return len(self._encoders)


class EncoderChain:
    """Looks up encoders in response-local registries first, then server-wide ones."""

    def __init__(self, server_encoders: ResponseEncoders, local_encoders: Optional[ResponseEncoders] = None):
        self.server_encoders = server_encoders
        self.local_encoders = local_encoders if local_encoders is not None else ResponseEncoders()

    def resolve(self, content_type: Optional[str], object_type: type) -> Optional[Encoder]:
        return (
            self.local_encoders.resolve(content_type, object_type)
            or self.server_encoders.resolve(content_type, object_type)
        )

    def encode(self, content: Any, content_type: Optional[str]) -> bytes:
        """
        Encode content for the given content type.

        Raw bytes are passed through untouched when no encoder claims them.

        Raises:
            EncoderNotFoundError: If no encoder handles a non-bytes content object
        """
        encoder = self.resolve(content_type, type(content))
        if encoder is not None:
            return encoder(content)

        if isinstance(content, (bytes, bytearray)):
            return bytes(content)

        raise EncoderNotFoundError(content_type or '<none>', type(content))
