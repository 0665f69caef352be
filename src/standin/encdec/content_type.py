"""
Common content type values and helpers.
"""

from typing import Optional, Tuple

TEXT_PLAIN = 'text/plain'
TEXT_HTML = 'text/html'
TEXT_XML = 'text/xml'
TEXT_JSON = 'text/json'
APPLICATION_JSON = 'application/json'
APPLICATION_XML = 'application/xml'
APPLICATION_JAVASCRIPT = 'application/javascript'
APPLICATION_URLENCODED = 'application/x-www-form-urlencoded'
APPLICATION_OCTET_STREAM = 'application/octet-stream'
MULTIPART_FORM_DATA = 'multipart/form-data'

CONTENT_TYPE_HEADER = 'Content-Type'

# Content types whose bodies are safe to render as text in logs and reports
TEXT_CONTENT_HINTS = ('text/', '/json', '/javascript', '/xml', APPLICATION_URLENCODED)


def split_content_type(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a Content-Type header value into its media type and charset.

    Args:
        value: Content-Type header value, e.g. 'text/plain; charset=utf-8'

    Returns:
        Tuple of (lower-cased media type or None, charset or None)
    """
    if not value:
        return None, None

    parts = [p.strip() for p in value.split(';')]
    media_type = parts[0].lower() or None
    charset = None
    for param in parts[1:]:
        key, _, val = param.partition('=')
        if key.strip().lower() == 'charset' and val:
            charset = val.strip().strip('"')

    return media_type, charset


def is_text_content(content_type: Optional[str]) -> bool:
    """Whether content of this type can be rendered as text."""
    if not content_type:
        return False
    lowered = content_type.lower()
    return any(hint in lowered for hint in TEXT_CONTENT_HINTS)
