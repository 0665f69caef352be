"""
standin Unmatched Reports

Plain-text diagnostics explaining why a request or WebSocket message matched
nothing: the request as received, then every requirement and expectation with
each of its matchers marked as passed or failed.
"""

import threading
from typing import Any, List, Optional, Sequence

from ..common.utils import render_content
from .expectation import Expectation
from .request import ClientRequest
from .requirements import RequestRequirement
from .websocket import WebSocketExpectation

CHECKMARK = '✓'
FAILED = 'X'


def _mark(ok: bool) -> str:
    return CHECKMARK if ok else FAILED


class _CachedReport:
    """Renders once; later calls return the cached text."""

    def __init__(self):
        self._rendered: Optional[str] = None
        self._lock = threading.Lock()

    def render(self) -> str:
        with self._lock:
            if self._rendered is None:
                self._rendered = self._render()
            return self._rendered

    def _render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


class UnmatchedRequestReport(_CachedReport):
    """
    Report for an HTTP request that matched no expectation.

    Args:
        request: The unmatched request
        expectations: Registered expectations, in registration order
        requirements: Registered request requirements
    """

    def __init__(
        self,
        request: ClientRequest,
        expectations: Sequence[Expectation],
        requirements: Sequence[RequestRequirement] = ()
    ):
        super().__init__()
        self.request = request
        self.expectations = list(expectations)
        self.requirements = list(requirements)

    def _render(self) -> str:
        lines: List[str] = ["# Unmatched Request", ""]
        self._render_request(lines)
        self._render_requirements(lines)
        self._render_expectations(lines)
        return '\n'.join(lines) + '\n'

    def _render_request(self, lines: List[str]):
        request = self.request
        query = ', '.join(f"{name}={values}" for name, values in request.query.items())
        lines.append(f"{request.scheme.upper()} {request.method} {request.path or '<empty>'} ? {query or '<empty>'}")

        lines.append("Headers:")
        if request.headers:
            for name, values in request.headers.items():
                lines.append(f" - {name}: {values}")
        else:
            lines.append(" - <no-headers>")

        lines.append("Cookies:")
        if request.cookies:
            for name, cookie in request.cookies.items():
                lines.append(f" - {name} ({cookie.domain or '<empty>'}, {cookie.path or '<empty>'}): {cookie.value}")
        else:
            lines.append(" - <empty>")

        lines.append(f"Character-Encoding: {request.character_encoding or '<empty>'}")
        lines.append(f"Content-Type: {request.content_type or '<empty>'}")
        lines.append(f"Content-Length: {request.content_length}")
        lines.append("Content:")
        if request.body:
            lines.append(f"  {render_content(request.body, request.content_type, request.character_encoding)}")
        else:
            lines.append("  <empty>")

    def _render_requirements(self, lines: List[str]):
        lines.extend(["", "# Requirements", ""])
        for index, requirement in enumerate(self.requirements):
            lines.append(f"Requirement {index} ({requirement.describe()}):")
            applicable = requirement.applies_to(self.request)
            for matcher in requirement.matchers:
                if applicable:
                    lines.append(f"  {_mark(matcher.matches(self.request))} {matcher.describe()}")
                else:
                    lines.append(f"  - {matcher.describe()}")
            lines.append("")

    def _render_expectations(self, lines: List[str]):
        lines.extend(["# Expectations", ""])
        for index, expectation in enumerate(self.expectations):
            matchers = expectation.matchers
            lines.append(f"Expectation {index} ({len(matchers)} matchers):")

            failed = 0
            for matcher in matchers:
                matched = matcher.matches(self.request)
                if not matched:
                    failed += 1
                lines.append(f"  {_mark(matched)} {matcher.describe()}")

            lines.append(f"  ({len(matchers)} matchers: {len(matchers) - failed} matched, {failed} failed)")
            lines.append("")


class UnmatchedWsReport(_CachedReport):
    """Report for a WebSocket message that matched no inbound message expectation."""

    def __init__(self, expectation: WebSocketExpectation, payload: Any = None):
        super().__init__()
        self.expectation = expectation
        self.payload = payload

    def _render(self) -> str:
        ws = self.expectation
        lines = ["# Unmatched Web Socket Message", ""]
        if self.payload is not None:
            lines.extend([f"Received: {self.payload!r}", ""])

        lines.extend(["# Expectations", "", f"Expectation ({ws.path}):"])
        lines.append(f"  {_mark(ws.connected)} Client connection made.")

        failed = 0 if ws.connected else 1
        for message in ws.inbound_messages:
            if not message.marked:
                failed += 1
            lines.append(f"  {_mark(message.marked)} Received {message.describe()}")

        count = ws.expected_message_count + 1
        lines.append(f"  ({count} matchers: {count - failed} matched, {failed} failed)")
        return '\n'.join(lines) + '\n'
