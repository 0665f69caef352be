"""
standin Cookie Matcher

Composite matcher over the individual fields of a Cookie.
"""

from typing import Any, Callable, Dict, Optional

from ..encdec.cookie import Cookie
from .core import Matcher, wrap

COOKIE_FIELDS = ('value', 'comment', 'domain', 'path', 'max_age', 'http_only', 'secure', 'version')


class CookieMatcher(Matcher):
    """
    Matches a Cookie field by field.

    Only configured fields are checked; a matcher with no fields configured
    accepts any Cookie. Anything that is not a Cookie never matches.

    Example:
        matcher = CookieMatcher().value('abc').domain('example.com').secure(True)
        matcher = CookieMatcher.of(lambda c: c.value(starts_with('session-')))
    """

    def __init__(self):
        self._fields: Dict[str, Matcher] = {}

    @classmethod
    def of(cls, configure: Callable[['CookieMatcher'], Any]) -> 'CookieMatcher':
        """Create a cookie matcher configured through a callback."""
        matcher = cls()
        configure(matcher)
        return matcher

    def _field(self, name: str, expected: Any) -> 'CookieMatcher':
        self._fields[name] = wrap(expected)
        return self

    def value(self, expected: Any) -> 'CookieMatcher':
        return self._field('value', expected)

    def comment(self, expected: Any) -> 'CookieMatcher':
        return self._field('comment', expected)

    def domain(self, expected: Any) -> 'CookieMatcher':
        return self._field('domain', expected)

    def path(self, expected: Any) -> 'CookieMatcher':
        return self._field('path', expected)

    def version(self, expected: Any) -> 'CookieMatcher':
        return self._field('version', expected)

    def http_only(self, expected: bool = True) -> 'CookieMatcher':
        return self._field('http_only', expected)

    def max_age(self, expected: Any) -> 'CookieMatcher':
        return self._field('max_age', expected)

    def secure(self, expected: bool = True) -> 'CookieMatcher':
        return self._field('secure', expected)

    def field_matcher(self, name: str) -> Optional[Matcher]:
        return self._fields.get(name)

    def matches(self, item: Any) -> bool:
        if not isinstance(item, Cookie):
            return False
        return all(matcher.matches(getattr(item, name)) for name, matcher in self._fields.items())

    def describe(self) -> str:
        if not self._fields:
            return "any cookie"
        parts = [f"{name}({matcher.describe()})" for name, matcher in self._fields.items()]
        return "a cookie matching " + ' '.join(parts)
