"""
standin

Embeddable mock HTTP/WebSocket server for testing HTTP clients.
"""

from .errors import (
    ConfigurationError,
    DecoderNotFoundError,
    EncoderNotFoundError,
    StandinError,
    VerificationError,
)
# mock must load before match: request matchers depend on mock.request
from .mock import (
    ClientRequest,
    Expectation,
    ExpectationRegistry,
    HttpMethod,
    MockServer,
    Response,
    ServerConfig,
)
from .match import CookieMatcher, Matcher
from .encdec import Cookie
from .common import WaitFor

__all__ = [
    'ConfigurationError',
    'DecoderNotFoundError',
    'EncoderNotFoundError',
    'StandinError',
    'VerificationError',
    'ClientRequest',
    'Expectation',
    'ExpectationRegistry',
    'HttpMethod',
    'MockServer',
    'Response',
    'ServerConfig',
    'CookieMatcher',
    'Matcher',
    'Cookie',
    'WaitFor',
]

__version__ = '1.0.0'
