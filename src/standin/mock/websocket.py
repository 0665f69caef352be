"""
standin WebSocket Expectations

Expectations for a WebSocket path: the connection itself, the inbound messages
the client should send, the reactions to them, and messages pushed to the
client as soon as it connects.
"""

import json
import threading
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from ..common.timeout import DEFAULT_POLL_INTERVAL, Timeout, WaitFor, is_true_before
from ..match.core import Matcher, wrap


class MessageType(str, Enum):
    """WebSocket frame type."""

    TEXT = 'text'
    BINARY = 'binary'

    @classmethod
    def resolve(cls, payload: Any) -> 'MessageType':
        return cls.BINARY if isinstance(payload, (bytes, bytearray)) else cls.TEXT


def _render_payload(payload: Any, message_type: MessageType) -> Union[str, bytes]:
    if message_type is MessageType.BINARY:
        if isinstance(payload, (bytes, bytearray)):
            return bytes(payload)
        return str(payload).encode('utf-8')
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode('utf-8')
    if isinstance(payload, (dict, list)):
        return json.dumps(payload)
    return str(payload)


class OutboundMessage:
    """A message sent to the client, either on connect or as a reaction."""

    def __init__(self, payload: Any = None, message_type: Optional[MessageType] = None):
        self._payload = payload
        self._message_type = message_type

    def payload(self, value: Any) -> 'OutboundMessage':
        self._payload = value
        return self

    def message_type(self, value: MessageType) -> 'OutboundMessage':
        self._message_type = value
        return self

    @property
    def resolved_type(self) -> MessageType:
        return self._message_type or MessageType.resolve(self._payload)

    @property
    def data(self) -> Union[str, bytes]:
        """Payload rendered for the wire: bytes for BINARY frames, str for TEXT frames."""
        return _render_payload(self._payload, self.resolved_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._payload!r}, {self.resolved_type.value})"


class MessageReaction(OutboundMessage):
    """A message sent back when a matching inbound message arrives."""


class InboundMessage:
    """
    An expected message from the client.

    The payload may be a literal (compared for equality) or a Matcher. When no
    message type is given it is inferred from a literal payload, and a Matcher
    payload defaults to TEXT.
    """

    def __init__(self, payload: Any = None, message_type: Optional[MessageType] = None):
        self._payload_matcher: Optional[Matcher] = None
        self._message_type = message_type
        self._reactions: List[MessageReaction] = []
        self._marked = threading.Event()
        if payload is not None:
            self.payload(payload)

    def payload(self, value: Any) -> 'InboundMessage':
        self._payload_matcher = wrap(value)
        if self._message_type is None and not isinstance(value, Matcher):
            self._message_type = MessageType.resolve(value)
        return self

    def message_type(self, value: MessageType) -> 'InboundMessage':
        self._message_type = value
        return self

    def reaction(self, payload: Any = None, message_type: Optional[MessageType] = None) -> MessageReaction:
        reaction = MessageReaction(payload, message_type)
        self._reactions.append(reaction)
        return reaction

    @property
    def resolved_type(self) -> MessageType:
        return self._message_type or MessageType.TEXT

    @property
    def reactions(self) -> List[MessageReaction]:
        return list(self._reactions)

    @property
    def marked(self) -> bool:
        return self._marked.is_set()

    def matches(self, payload: Union[str, bytes], message_type: Optional[MessageType] = None) -> bool:
        if self._payload_matcher is None:
            return False
        actual_type = message_type or MessageType.resolve(payload)
        return actual_type is self.resolved_type and self._payload_matcher.matches(payload)

    def mark(self):
        self._marked.set()

    def describe(self) -> str:
        payload = self._payload_matcher.describe() if self._payload_matcher else '<no payload>'
        return f"{self.resolved_type.value} message {payload}"


class WebSocketExpectation:
    """
    Expectations for one WebSocket path.

    Example:
        ws = WebSocketExpectation('/stream')
        ws.receives('ping').reaction('pong')
        ws.sends('welcome')
    """

    def __init__(self, path: str):
        self.path = path
        self._inbound: List[InboundMessage] = []
        self._outbound: List[OutboundMessage] = []
        self._connected = threading.Event()

    def receives(
        self,
        payload: Any = None,
        message_type: Optional[MessageType] = None,
        configure: Optional[Callable[[InboundMessage], Any]] = None
    ) -> InboundMessage:
        message = InboundMessage(payload, message_type)
        if configure is not None:
            configure(message)
        self._inbound.append(message)
        return message

    def sends(self, payload: Any = None, message_type: Optional[MessageType] = None) -> OutboundMessage:
        message = OutboundMessage(payload, message_type)
        self._outbound.append(message)
        return message

    def connect(self):
        self._connected.set()

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    @property
    def inbound_messages(self) -> List[InboundMessage]:
        return list(self._inbound)

    @property
    def outbound_messages(self) -> List[OutboundMessage]:
        return list(self._outbound)

    @property
    def expected_message_count(self) -> int:
        return len(self._inbound)

    def find_match(self, payload: Union[str, bytes], message_type: Optional[MessageType] = None) -> Optional[InboundMessage]:
        """First inbound message expectation accepting the payload, if any."""
        for message in self._inbound:
            if message.matches(payload, message_type):
                return message
        return None

    def verify(self, timeout: Timeout = None, poll_interval: float = DEFAULT_POLL_INTERVAL) -> bool:
        """Whether the client connected and sent every expected message, each within its own timeout window."""
        seconds = WaitFor.of(timeout).seconds
        if not is_true_before(lambda: self.connected, seconds, poll_interval):
            return False
        return all(
            is_true_before(lambda m=message: m.marked, seconds, poll_interval)
            for message in self._inbound
        )

    def describe(self) -> str:
        return f"WebSocket {self.path} ({len(self._inbound)} inbound, {len(self._outbound)} on connect)"
