"""
standin Encoding/Decoding

Cookies, content types, request decoders and response encoders.
"""

from .cookie import Cookie
from .decoders import (
    DecoderChain,
    DecodingContext,
    RequestDecoders,
    parse_json,
    passthrough,
    url_encoded,
    utf8_string,
)
from .encoders import EncoderChain, ResponseEncoders, json_encoder, text_encoder

__all__ = [
    'Cookie',
    'DecoderChain',
    'DecodingContext',
    'RequestDecoders',
    'parse_json',
    'passthrough',
    'url_encoded',
    'utf8_string',
    'EncoderChain',
    'ResponseEncoders',
    'json_encoder',
    'text_encoder',
]
