"""
standin Request Matchers

Matchers over a ClientRequest, one per request attribute.

Multi-valued attributes (headers, query and body parameters) hand the full list
of values for a name to the value matcher, so a plain string means "one of the
values is this" and a list of strings means "exactly these values, any order".
"""

from typing import Any, Callable, Dict, List, Optional, Union

from ..encdec.decoders import Decoder, DecodingContext
from ..mock.request import ClientRequest, HttpMethod
from .cookie import CookieMatcher
from .core import (
    Matcher,
    anything,
    equal_to,
    equal_to_ignoring_case,
    predicate,
    starts_with,
    values_matcher,
    wrap,
)


class AttributeMatcher(Matcher):
    """Applies a value matcher to one attribute extracted from the request."""

    def __init__(self, label: str, extract: Callable[[ClientRequest], Any], matcher: Matcher):
        self.label = label
        self.extract = extract
        self.matcher = matcher

    def matches(self, item: Any) -> bool:
        if not isinstance(item, ClientRequest):
            return False
        return self.matcher.matches(self.extract(item))

    def describe(self) -> str:
        return f"{self.label} {self.matcher.describe()}"


class MappedValuesMatcher(Matcher):
    """
    Matches when some entry of a request multimap has a matching name and matching values.

    Entries whose name does not match are ignored; a request without any
    matching name does not match.
    """

    def __init__(
        self,
        label: str,
        mapping: Callable[[ClientRequest], Dict[str, Any]],
        name_matcher: Matcher,
        value_matcher: Matcher
    ):
        self.label = label
        self.mapping = mapping
        self.name_matcher = name_matcher
        self.value_matcher = value_matcher

    def matches(self, item: Any) -> bool:
        if not isinstance(item, ClientRequest):
            return False
        return any(
            self.name_matcher.matches(name) and self.value_matcher.matches(values)
            for name, values in self.mapping(item).items()
        )

    def describe(self) -> str:
        return f"{self.label} {self.name_matcher.describe()} with value {self.value_matcher.describe()}"


class MapKeyMatcher(Matcher):
    """Matches on the presence (or absence) of a name in a request multimap."""

    def __init__(
        self,
        label: str,
        mapping: Callable[[ClientRequest], Dict[str, Any]],
        name_matcher: Matcher,
        present: bool = True
    ):
        self.label = label
        self.mapping = mapping
        self.name_matcher = name_matcher
        self.present = present

    def matches(self, item: Any) -> bool:
        if not isinstance(item, ClientRequest):
            return False
        found = any(self.name_matcher.matches(name) for name in self.mapping(item))
        return found == self.present

    def describe(self) -> str:
        state = "exists" if self.present else "does not exist"
        return f"{self.label} {self.name_matcher.describe()} {state}"


class BodyMatcher(Matcher):
    """
    Decodes the request body and matches the decoded value.

    The request content type must start with the configured content type. The
    decoder is resolved once, when Expectation.body() attaches the matcher; a
    matcher without a decoder never matches. A body that fails to decode does
    not match.
    """

    def __init__(self, matcher: Matcher, content_type: str, decoder: Optional[Decoder] = None):
        self.matcher = matcher
        self.content_type = content_type
        self.decoder = decoder

    def matches(self, item: Any) -> bool:
        if not isinstance(item, ClientRequest) or self.decoder is None:
            return False
        if not item.content_type or not item.content_type.lower().startswith(self.content_type.lower()):
            return False

        context = DecodingContext(
            content_length=item.content_length,
            content_type=item.content_type,
            character_encoding=item.character_encoding,
        )
        try:
            decoded = self.decoder(item.body, context)
        except (ValueError, UnicodeDecodeError, LookupError):
            return False
        return self.matcher.matches(decoded)

    def describe(self) -> str:
        return f"Body of type {self.content_type!r} is {self.matcher.describe()}"


def _name(name: Union[str, Matcher], ignore_case: bool = False) -> Matcher:
    if isinstance(name, Matcher):
        return name
    return equal_to_ignoring_case(name) if ignore_case else equal_to(name)


def _headers(request: ClientRequest) -> Dict[str, List[str]]:
    return request.headers


def _query(request: ClientRequest) -> Dict[str, List[str]]:
    return request.query


def _cookies(request: ClientRequest) -> Dict[str, Any]:
    return request.cookies


def _body_parameters(request: ClientRequest) -> Dict[str, List[str]]:
    return request.body_parameters


# Method, path and scheme

def method_matching(*methods: Union[str, HttpMethod, Matcher]) -> Matcher:
    """
    Match the request method.

    HttpMethod.ANY accepts every standard method. Several methods accept any
    of them. A Matcher is applied to the HttpMethod as-is.
    """
    if len(methods) == 1 and isinstance(methods[0], Matcher):
        return AttributeMatcher("HTTP method is", lambda r: r.method, methods[0])

    resolved = [HttpMethod.of(m) for m in methods]
    if HttpMethod.ANY in resolved:
        resolved = HttpMethod.standard()

    if len(resolved) == 1:
        only = resolved[0]
        return AttributeMatcher("HTTP method is", lambda r: r.method, predicate(lambda m: m == only, only.value))

    allowed = frozenset(resolved)
    names = ', '.join(m.value for m in resolved)
    return AttributeMatcher(
        "HTTP method is",
        lambda r: r.method,
        predicate(lambda m: m in allowed, f"one of ({names})")
    )


def path_matching(
    path: Union[str, Matcher, Callable[[str], bool]],
    description: Optional[str] = None
) -> Matcher:
    """Match the request path. '*' matches any path; other strings match exactly."""
    if isinstance(path, Matcher):
        matcher = path
    elif isinstance(path, str):
        matcher = anything() if path == '*' else equal_to(path)
    elif callable(path):
        matcher = predicate(path, description or "a path predicate")
    else:
        raise TypeError(f"Unsupported path specification: {path!r}")
    return AttributeMatcher("Path is", lambda r: r.path, matcher)


def scheme_matching(secure: bool) -> Matcher:
    return AttributeMatcher(
        "Scheme is",
        lambda r: r.scheme,
        equal_to_ignoring_case('https' if secure else 'http')
    )


# Headers

def header_matching(name: Union[str, Matcher], value: Any) -> Matcher:
    return MappedValuesMatcher("Header", _headers, _name(name, ignore_case=True), values_matcher(value))


def header_exists(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Header", _headers, _name(name, ignore_case=True))


def header_does_not_exist(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Header", _headers, _name(name, ignore_case=True), present=False)


def content_type_header(value: Union[str, Matcher]) -> Matcher:
    """
    Match the Content-Type header.

    A string matches as a prefix so parameters such as charset are ignored; a
    single-value Matcher is applied to each Content-Type value.
    """
    value_matcher = value if isinstance(value, Matcher) else starts_with(value)
    return header_matching('Content-Type', value_matcher)


# Query parameters

def query_matching(name: Union[str, Matcher], value: Any) -> Matcher:
    return MappedValuesMatcher("Query parameter", _query, _name(name), values_matcher(value))


def query_exists(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Query parameter", _query, _name(name))


def query_does_not_exist(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Query parameter", _query, _name(name), present=False)


# Cookies

def cookie_matching(name: Union[str, Matcher], value: Union[str, CookieMatcher, Matcher]) -> Matcher:
    """Match a request cookie. A string value matches the cookie value exactly."""
    if isinstance(value, Matcher):
        cookie_matcher = value
    else:
        cookie_matcher = CookieMatcher().value(value)
    return MappedValuesMatcher("Cookie", _cookies, _name(name), cookie_matcher)


def cookie_exists(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Cookie", _cookies, _name(name))


def cookie_does_not_exist(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Cookie", _cookies, _name(name), present=False)


def has_no_cookies() -> Matcher:
    return AttributeMatcher(
        "Cookies are",
        lambda r: r.cookies,
        predicate(lambda cookies: not cookies, "empty")
    )


# Body

def body_param_matching(name: Union[str, Matcher], value: Any) -> Matcher:
    return MappedValuesMatcher("Body parameter", _body_parameters, _name(name), values_matcher(value))


def body_param_exists(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Body parameter", _body_parameters, _name(name))


def body_param_does_not_exist(name: Union[str, Matcher]) -> Matcher:
    return MapKeyMatcher("Body parameter", _body_parameters, _name(name), present=False)


def body_matching(matcher: Any, content_type: str, decoder: Optional[Decoder] = None) -> BodyMatcher:
    """
    Match the decoded request body.

    Args:
        matcher: Matcher (or literal) applied to the decoded body
        content_type: Content type prefix the request must carry
        decoder: Decoder for the body; Expectation.body() resolves and passes it

    Returns:
        BodyMatcher
    """
    return BodyMatcher(wrap(matcher), content_type, decoder)


def request_matching(fn: Callable[[ClientRequest], bool], description: str = "a request predicate") -> Matcher:
    return predicate(lambda r: isinstance(r, ClientRequest) and bool(fn(r)), description)
