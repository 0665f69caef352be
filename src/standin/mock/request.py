"""
standin Client Request

Transport-independent view of an incoming HTTP request, which is what every
request matcher inspects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qs

from ..common.utils import group_header_items
from ..encdec.content_type import APPLICATION_URLENCODED, split_content_type
from ..encdec.cookie import Cookie


class HttpMethod(str, Enum):
    """HTTP request methods. ANY is a registration sentinel that never arrives on the wire."""

    ANY = '*'
    GET = 'GET'
    HEAD = 'HEAD'
    POST = 'POST'
    PUT = 'PUT'
    DELETE = 'DELETE'
    PATCH = 'PATCH'
    OPTIONS = 'OPTIONS'
    TRACE = 'TRACE'

    @classmethod
    def standard(cls) -> List['HttpMethod']:
        """All real request methods (everything except ANY)."""
        return [m for m in cls if m is not cls.ANY]

    @classmethod
    def of(cls, value: Union[str, 'HttpMethod']) -> 'HttpMethod':
        if isinstance(value, HttpMethod):
            return value
        return cls(value.upper())

    def __str__(self) -> str:
        return self.value


HeaderInput = Union[Mapping[str, Union[str, Iterable[str]]], Iterable[Tuple[str, str]], None]


def _header_items(headers: HeaderInput) -> List[Tuple[str, str]]:
    if headers is None:
        return []
    if isinstance(headers, Mapping):
        items = []
        for name, value in headers.items():
            if isinstance(value, str):
                items.append((name, value))
            else:
                items.extend((name, v) for v in value)
        return items
    return list(headers)


def _multimap(values: Optional[Mapping[str, Any]]) -> Dict[str, List[str]]:
    result: Dict[str, List[str]] = {}
    for name, value in (values or {}).items():
        result[name] = [value] if isinstance(value, str) else list(value)
    return result


@dataclass
class ClientRequest:
    """
    An incoming request as seen by the matching engine.

    Header names are stored lower-cased and list-valued headers are expanded
    into individual values. Query and body parameters keep blank values, so
    '?flag' is distinguishable from an absent parameter.
    """

    method: HttpMethod
    path: str
    scheme: str = 'http'
    headers: Dict[str, List[str]] = field(default_factory=dict)
    query: Dict[str, List[str]] = field(default_factory=dict)
    cookies: Dict[str, Cookie] = field(default_factory=dict)
    body: bytes = b''
    content_type: Optional[str] = None
    character_encoding: Optional[str] = None
    body_parameters: Dict[str, List[str]] = field(default_factory=dict)
    protocol: str = 'HTTP/1.1'

    @classmethod
    def build(
        cls,
        method: Union[str, HttpMethod],
        path: str,
        headers: HeaderInput = None,
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[bytes] = None,
        scheme: str = 'http',
        protocol: str = 'HTTP/1.1'
    ) -> 'ClientRequest':
        """
        Build a request, deriving cookies, content type and form parameters from the raw parts.

        Args:
            method: HTTP method name or HttpMethod
            path: Request path without the query string
            headers: Mapping of name to value(s), or (name, value) pairs
            query: Mapping of parameter name to value(s)
            body: Raw body bytes
            scheme: 'http' or 'https'
            protocol: HTTP protocol version string

        Returns:
            ClientRequest
        """
        header_map = group_header_items(_header_items(headers))
        raw_body = body or b''

        raw_content_type = header_map['content-type'][0] if header_map.get('content-type') else None
        media_type, charset = split_content_type(raw_content_type)

        cookies: Dict[str, Cookie] = {}
        for cookie_header in header_map.get('cookie', []):
            cookies.update(Cookie.parse_header(cookie_header))

        body_parameters: Dict[str, List[str]] = {}
        if media_type == APPLICATION_URLENCODED and raw_body:
            try:
                body_parameters = parse_qs(raw_body.decode(charset or 'utf-8'), keep_blank_values=True)
            except (UnicodeDecodeError, LookupError):
                body_parameters = {}

        return cls(
            method=HttpMethod.of(method),
            path=path,
            scheme=scheme.lower(),
            headers=header_map,
            query=_multimap(query),
            cookies=cookies,
            body=raw_body,
            content_type=raw_content_type,
            character_encoding=charset,
            body_parameters=body_parameters,
            protocol=protocol,
        )

    @classmethod
    def from_starlette(cls, request: Any, body: bytes) -> 'ClientRequest':
        """
        Build a request from a Starlette/FastAPI request and its already-read body.

        Args:
            request: starlette.requests.Request
            body: Result of `await request.body()`

        Returns:
            ClientRequest
        """
        query: Dict[str, List[str]] = {}
        for name, value in request.query_params.multi_items():
            query.setdefault(name, []).append(value)

        http_version = request.scope.get('http_version', '1.1')

        return cls.build(
            method=request.method,
            path=request.url.path,
            headers=request.headers.items(),
            query=query,
            body=body,
            scheme=request.url.scheme,
            protocol=f"HTTP/{http_version}",
        )

    @property
    def content_length(self) -> int:
        return len(self.body)

    def header_values(self, name: str) -> List[str]:
        return list(self.headers.get(name.lower(), []))

    def header(self, name: str) -> Optional[str]:
        values = self.headers.get(name.lower())
        return values[0] if values else None

    def __str__(self) -> str:
        query = '&'.join(f"{k}={v}" for k, vals in self.query.items() for v in vals)
        target = f"{self.path}?{query}" if query else self.path
        return f"{self.scheme.upper()} {self.method} {target} ({self.content_length} bytes)"
