"""
Tests for standin encoders, decoders and cookies
"""

import json

import pytest

from standin.encdec import (
    Cookie,
    DecoderChain,
    DecodingContext,
    EncoderChain,
    RequestDecoders,
    ResponseEncoders,
    parse_json,
    url_encoded,
    utf8_string,
)
from standin.encdec.content_type import is_text_content, split_content_type
from standin.errors import DecoderNotFoundError, EncoderNotFoundError


def context(content_type='application/json', charset=None, length=0):
    return DecodingContext(content_length=length, content_type=content_type, character_encoding=charset)


class TestContentType:
    """Test content type helpers."""

    def test_split(self):
        """Test media type and charset are separated."""
        assert split_content_type('Text/Plain; charset="UTF-8"') == ('text/plain', 'UTF-8')
        assert split_content_type('application/json') == ('application/json', None)
        assert split_content_type(None) == (None, None)

    @pytest.mark.parametrize('content_type,expected', [
        ('text/plain', True),
        ('application/json; charset=utf-8', True),
        ('application/x-www-form-urlencoded', True),
        ('image/png', False),
        (None, False),
    ])
    def test_is_text_content(self, content_type, expected):
        """Test text detection for reports."""
        assert is_text_content(content_type) is expected


class TestDecoders:
    """Test request decoders."""

    def test_builtin_decoders(self):
        """Test the JSON, text and form decoders."""
        assert parse_json(b'{"a": 1}', context()) == {'a': 1}
        assert parse_json(b'', context()) is None
        assert utf8_string('caf\xe9'.encode('latin-1'), context('text/plain', 'latin-1')) == 'caf\xe9'
        assert url_encoded(b'a=1&b=', context()) == {'a': ['1'], 'b': ['']}

    def test_resolve_by_prefix(self):
        """Test content-type parameters do not prevent resolution."""
        decoders = RequestDecoders.defaults()
        assert decoders.resolve('application/json; charset=utf-8') is parse_json
        assert decoders.resolve('image/png') is None

    def test_chain_prefers_local(self):
        """Test local decoders shadow server-wide ones."""
        local = RequestDecoders().register('application/json', utf8_string)
        chain = DecoderChain(RequestDecoders.defaults(), local)
        assert chain.resolve('application/json') is utf8_string

    def test_chain_keeps_empty_local_registry(self):
        """Test decoders registered after the chain is built are still found."""
        local = RequestDecoders()
        chain = DecoderChain(RequestDecoders.defaults(), local)
        local.register('text/csv', utf8_string)
        assert chain.resolve('text/csv') is utf8_string

    def test_require_missing(self):
        """Test a missing decoder is reported as an error."""
        chain = DecoderChain(RequestDecoders.defaults())
        with pytest.raises(DecoderNotFoundError) as exc_info:
            chain.require('application/vnd.custom')
        assert exc_info.value.content_type == 'application/vnd.custom'
        assert isinstance(exc_info.value, LookupError)


class TestEncoders:
    """Test response encoders."""

    def test_json(self):
        """Test dicts are JSON encoded."""
        chain = EncoderChain(ResponseEncoders.defaults())
        assert json.loads(chain.encode({'a': [1, 2]}, 'application/json')) == {'a': [1, 2]}

    def test_text(self):
        """Test strings are utf-8 encoded."""
        chain = EncoderChain(ResponseEncoders.defaults())
        assert chain.encode('héllo', 'text/plain; charset=utf-8') == 'héllo'.encode('utf-8')

    def test_bytes_pass_through(self):
        """Test raw bytes need no encoder."""
        chain = EncoderChain(ResponseEncoders.defaults())
        assert chain.encode(b'\x00\x01', 'application/octet-stream') == b'\x00\x01'

    def test_missing_encoder(self):
        """Test unencodable content raises."""
        chain = EncoderChain(ResponseEncoders.defaults())
        with pytest.raises(EncoderNotFoundError) as exc_info:
            chain.encode({'a': 1}, 'text/csv')
        assert exc_info.value.object_type is dict

    def test_later_registration_wins(self):
        """Test newer encoders take precedence."""
        encoders = ResponseEncoders.defaults()
        encoders.register('application/json', dict, lambda obj: b'custom')
        assert EncoderChain(encoders).encode({}, 'application/json') == b'custom'

    def test_local_encoders_first(self):
        """Test response-local encoders shadow server-wide ones."""
        local = ResponseEncoders().register('text/plain', str, lambda s: s.upper().encode())
        chain = EncoderChain(ResponseEncoders.defaults(), local)
        assert chain.encode('abc', 'text/plain') == b'ABC'

    def test_chain_keeps_empty_local_registry(self):
        """Test encoders registered after the chain is built are still used."""
        local = ResponseEncoders()
        chain = EncoderChain(ResponseEncoders.defaults(), local)
        local.register('text/plain', int, lambda n: str(n).encode())
        assert chain.encode(7, 'text/plain') == b'7'


class TestCookie:
    """Test request cookie parsing."""

    def test_parse_header(self):
        """Test name/value pairs are parsed."""
        cookies = Cookie.parse_header('a=1; b=two')
        assert cookies == {'a': Cookie(value='1'), 'b': Cookie(value='two')}

    def test_parse_empty(self):
        """Test empty headers give no cookies."""
        assert Cookie.parse_header(None) == {}
        assert Cookie.parse_header('') == {}

    def test_defaults(self):
        """Test attribute defaults."""
        cookie = Cookie(value='v')
        assert cookie.version == 0
        assert not cookie.http_only
        assert not cookie.secure
        assert cookie.max_age is None
