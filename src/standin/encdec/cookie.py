"""
standin Cookie

Cookie value used both for incoming request cookies and for response cookies.
"""

from dataclasses import dataclass
from http.cookies import CookieError, SimpleCookie
from typing import Dict, Optional


@dataclass(frozen=True)
class Cookie:
    """An HTTP cookie with its optional attributes."""

    value: Optional[str] = None
    comment: Optional[str] = None
    domain: Optional[str] = None
    path: Optional[str] = None
    version: int = 0
    http_only: bool = False
    max_age: Optional[int] = None
    secure: bool = False

    @classmethod
    def parse_header(cls, header_value: Optional[str]) -> Dict[str, 'Cookie']:
        """
        Parse a request Cookie header into named cookies.

        Request cookies only carry a name and a value, so every other attribute
        keeps its default.

        Args:
            header_value: Raw value of the Cookie header (may be None)

        Returns:
            Mapping of cookie name to Cookie, in header order
        """
        cookies: Dict[str, Cookie] = {}
        if not header_value:
            return cookies

        parsed = SimpleCookie()
        try:
            parsed.load(header_value)
        except CookieError:
            parsed = SimpleCookie()

        if parsed:
            for name, morsel in parsed.items():
                cookies[name] = cls(value=morsel.value)
            return cookies

        # SimpleCookie rejects some legal-in-practice names; fall back to splitting
        for part in header_value.split(';'):
            if '=' in part:
                name, _, value = part.strip().partition('=')
                cookies[name.strip()] = cls(value=value.strip())
        return cookies
