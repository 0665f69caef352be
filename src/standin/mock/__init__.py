"""
standin Mock Server Module

Expectation-driven mock HTTP/WebSocket server for tests.

This module provides:
- FastAPI-based mock server with a background-thread lifecycle
- Expectations, responses and the expectation registry
- Global request requirements and authentication
- Unmatched request reports
"""

from .request import ClientRequest, HttpMethod
from .response import ChunkingConfig, Response, ResponseWithoutContent
from .expectation import Expectation
from .websocket import InboundMessage, MessageReaction, MessageType, OutboundMessage, WebSocketExpectation
from .requirements import RequestRequirement, Requirements
from .registry import ExpectationRegistry
from .report import UnmatchedRequestReport, UnmatchedWsReport
from .auth import AuthenticationConfig, AuthenticationScheme, Authenticator
from .config import ServerConfig
from .server import MockServer, ServerMetrics

__all__ = [
    # Server
    'MockServer',
    'ServerConfig',
    'ServerMetrics',

    # Requests and responses
    'ClientRequest',
    'HttpMethod',
    'ChunkingConfig',
    'Response',
    'ResponseWithoutContent',

    # Expectations
    'Expectation',
    'ExpectationRegistry',
    'RequestRequirement',
    'Requirements',

    # WebSocket
    'InboundMessage',
    'MessageReaction',
    'MessageType',
    'OutboundMessage',
    'WebSocketExpectation',

    # Diagnostics and auth
    'UnmatchedRequestReport',
    'UnmatchedWsReport',
    'AuthenticationConfig',
    'AuthenticationScheme',
    'Authenticator',
]
