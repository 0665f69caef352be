"""
standin Common Utilities

Header and body helpers shared by the request view, the transport and the
diagnostic reports.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..encdec.content_type import is_text_content

# Headers whose values legitimately contain commas and must not be split
SINGLE_VALUE_HEADERS = frozenset([
    'authorization',
    'cookie',
    'date',
    'expires',
    'if-modified-since',
    'if-range',
    'if-unmodified-since',
    'last-modified',
    'proxy-authorization',
    'retry-after',
    'set-cookie',
    'user-agent',
    'www-authenticate',
])

# Headers the transport computes itself; configured values are not sent
HEADERS_TO_SKIP = frozenset(['content-length', 'transfer-encoding', 'connection'])


def split_header_values(name: str, raw_values: Iterable[str]) -> List[str]:
    """
    Expand raw header occurrences into individual values.

    A list-valued header such as 'Accept-Encoding: gzip, deflate' becomes
    ['gzip', 'deflate']. Date-like and credential headers are kept whole. An
    empty header value is kept as a single empty string so the header still
    counts as present.

    Args:
        name: Header name (any case)
        raw_values: Each occurrence of the header, as received

    Returns:
        Flat list of header values
    """
    values: List[str] = []
    single = name.lower() in SINGLE_VALUE_HEADERS

    for raw in raw_values:
        if single or ',' not in raw:
            values.append(raw.strip())
        else:
            values.extend(part.strip() for part in raw.split(',') if part.strip())

    return values


def group_header_items(items: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """
    Group (name, value) header pairs into a multimap keyed by lower-cased name.

    Args:
        items: Header pairs in arrival order, names in any case

    Returns:
        Mapping of lower-cased header name to its expanded values
    """
    raw: Dict[str, List[str]] = {}
    for name, value in items:
        raw.setdefault(name.lower(), []).append(value)

    return {name: split_header_values(name, values) for name, values in raw.items()}


def safe_decode(body: Optional[bytes], charset: Optional[str] = None) -> str:
    """
    Decode bytes for display, never raising.

    Args:
        body: Bytes to decode
        charset: Character set to try (utf-8 when unset)

    Returns:
        Decoded text, or '[binary data]' if the bytes are not valid text
    """
    if not body:
        return ''
    try:
        return body.decode(charset or 'utf-8')
    except (UnicodeDecodeError, LookupError):
        return "[binary data]"


def render_content(body: Optional[bytes], content_type: Optional[str], charset: Optional[str] = None) -> str:
    """Render a body for logs: text for text-like content types, otherwise the byte values."""
    if body is None:
        return '<empty>'
    if is_text_content(content_type):
        return safe_decode(body, charset)
    return str(list(body))
