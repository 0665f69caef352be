"""
standin Authentication

Optional BASIC or DIGEST authentication applied to every HTTP request before
expectation matching. A request without valid credentials is answered with a
401 challenge and never reaches the expectations.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
import threading
from enum import Enum
from typing import Dict, Optional

from ..errors import ConfigurationError
from .request import ClientRequest

logger = logging.getLogger("standin.mock.auth")

DEFAULT_USERNAME = 'admin'
DEFAULT_PASSWORD = '$3cr3t'

BASIC_REALM = 'BasicTesting'
DIGEST_REALM = 'DigestTesting'


class AuthenticationScheme(str, Enum):
    BASIC = 'Basic'
    DIGEST = 'Digest'


class AuthenticationConfig:
    """
    Which scheme to enforce and the single account it accepts.

    Example:
        config = AuthenticationConfig()
        config.basic('user', 'pass')
    """

    def __init__(self):
        self.scheme: Optional[AuthenticationScheme] = None
        self.username = DEFAULT_USERNAME
        self.password = DEFAULT_PASSWORD

    def basic(self, username: Optional[str] = None, password: Optional[str] = None) -> 'AuthenticationConfig':
        return self._configure(AuthenticationScheme.BASIC, username, password)

    def digest(self, username: Optional[str] = None, password: Optional[str] = None) -> 'AuthenticationConfig':
        return self._configure(AuthenticationScheme.DIGEST, username, password)

    def _configure(
        self,
        scheme: AuthenticationScheme,
        username: Optional[str],
        password: Optional[str]
    ) -> 'AuthenticationConfig':
        if self.scheme is not None and self.scheme is not scheme:
            raise ConfigurationError(
                f"Authentication is already configured as {self.scheme.value}; cannot also use {scheme.value}",
                suggestion="configure a single authentication scheme per server"
            )
        self.scheme = scheme
        if username is not None:
            self.username = username
        if password is not None:
            self.password = password
        return self


def _md5(value: str) -> str:
    return hashlib.md5(value.encode('utf-8')).hexdigest()


def parse_digest_header(value: str) -> Dict[str, str]:
    """Parse the parameters of a 'Digest ...' Authorization header value."""
    params: Dict[str, str] = {}
    _, _, rest = value.partition(' ')

    key = ''
    buffer = ''
    in_quotes = False
    reading_key = True
    for char in rest + ',':
        if reading_key:
            if char == '=':
                reading_key = False
            elif char != ',':
                key += char
            continue

        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            params[key.strip().lower()] = buffer.strip()
            key, buffer, reading_key = '', '', True
        else:
            buffer += char

    return params


class Authenticator:
    """Checks requests against an AuthenticationConfig and issues challenges."""

    def __init__(self, config: AuthenticationConfig):
        if config.scheme is None:
            raise ConfigurationError("No authentication scheme configured")
        self.config = config
        self._nonces = set()
        self._lock = threading.Lock()

    def check(self, request: ClientRequest) -> Optional[Dict[str, str]]:
        """
        Authenticate a request.

        Returns:
            None when the request is authorized, otherwise the headers of the
            401 challenge to send back
        """
        authorization = request.header('Authorization')
        if self.config.scheme is AuthenticationScheme.BASIC:
            authorized = self._check_basic(authorization)
        else:
            authorized = self._check_digest(authorization, request.method.value)

        if authorized:
            return None

        logger.debug(f"Rejected {self.config.scheme.value} authentication for {request}")
        return {'WWW-Authenticate': self.challenge()}

    def challenge(self) -> str:
        if self.config.scheme is AuthenticationScheme.BASIC:
            return f'Basic realm="{BASIC_REALM}"'

        nonce = secrets.token_hex(16)
        with self._lock:
            self._nonces.add(nonce)
        opaque = _md5(DIGEST_REALM)
        return (
            f'Digest realm="{DIGEST_REALM}", qop="auth", algorithm=MD5, '
            f'nonce="{nonce}", opaque="{opaque}"'
        )

    def _check_basic(self, authorization: Optional[str]) -> bool:
        if not authorization or not authorization.lower().startswith('basic '):
            return False
        try:
            decoded = base64.b64decode(authorization[6:].strip(), validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            return False

        username, _, password = decoded.partition(':')
        return (
            hmac.compare_digest(username.encode('utf-8'), self.config.username.encode('utf-8'))
            and hmac.compare_digest(password.encode('utf-8'), self.config.password.encode('utf-8'))
        )

    def _check_digest(self, authorization: Optional[str], method: str) -> bool:
        if not authorization or not authorization.lower().startswith('digest '):
            return False

        params = parse_digest_header(authorization)
        required = ('username', 'realm', 'nonce', 'uri', 'response')
        if any(name not in params for name in required):
            return False

        with self._lock:
            known_nonce = params['nonce'] in self._nonces
        if not known_nonce or params['username'] != self.config.username:
            return False

        ha1 = _md5(f"{self.config.username}:{params['realm']}:{self.config.password}")
        ha2 = _md5(f"{method}:{params['uri']}")

        qop = params.get('qop')
        if qop == 'auth':
            if 'nc' not in params or 'cnonce' not in params:
                return False
            expected = _md5(f"{ha1}:{params['nonce']}:{params['nc']}:{params['cnonce']}:{qop}:{ha2}")
        else:
            expected = _md5(f"{ha1}:{params['nonce']}:{ha2}")

        return hmac.compare_digest(expected.encode('utf-8'), params['response'].encode('utf-8'))
