"""
standin Requirements

Server-wide conditions that every request to a method and path must meet,
independent of which expectation ends up matching it.
"""

from typing import Any, Callable, List, Optional, Union

from ..match import request as rm
from ..match.core import Matcher
from .request import ClientRequest, HttpMethod


class RequestRequirement:
    """Matchers that apply to every request with a matching method and path."""

    def __init__(self, method: Union[str, HttpMethod, Matcher], path: Union[str, Matcher]):
        self.method_matcher = method if isinstance(method, Matcher) else rm.method_matching(method)
        self.path_matcher = path if isinstance(path, Matcher) else rm.path_matching(path)
        self._matchers: List[Matcher] = []

    def matcher(self, matcher: Matcher) -> 'RequestRequirement':
        self._matchers.append(matcher)
        return self

    def secure(self, value: bool = True) -> 'RequestRequirement':
        return self.matcher(rm.scheme_matching(value))

    def header(self, name: Union[str, Matcher], value: Any = None) -> 'RequestRequirement':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.header_exists(name))
        return self.matcher(rm.header_matching(name, value))

    def query(self, name: Union[str, Matcher], value: Any = None) -> 'RequestRequirement':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.query_exists(name))
        return self.matcher(rm.query_matching(name, value))

    def cookie(self, name: Union[str, Matcher], value: Any = None) -> 'RequestRequirement':
        if isinstance(name, Matcher) and value is None:
            return self.matcher(name)
        if value is None:
            return self.matcher(rm.cookie_exists(name))
        return self.matcher(rm.cookie_matching(name, value))

    @property
    def matchers(self) -> List[Matcher]:
        return list(self._matchers)

    def applies_to(self, request: ClientRequest) -> bool:
        return self.method_matcher.matches(request) and self.path_matcher.matches(request)

    def check(self, request: ClientRequest) -> bool:
        return all(m.matches(request) for m in self._matchers)

    def describe(self) -> str:
        return f"{self.method_matcher.describe()} & {self.path_matcher.describe()}"


class Requirements:
    """
    Registered request requirements.

    Example:
        requirements = Requirements()
        requirements.that(HttpMethod.ANY, '*', lambda r: r.header('Authorization', starts_with('Bearer ')))
        requirements.check(request)
    """

    def __init__(self):
        self._requirements: List[RequestRequirement] = []

    def that(
        self,
        method: Union[str, HttpMethod, Matcher],
        path: Union[str, Matcher],
        configure: Optional[Callable[[RequestRequirement], Any]] = None
    ) -> RequestRequirement:
        requirement = RequestRequirement(method, path)
        if configure is not None:
            configure(requirement)
        self._requirements.append(requirement)
        return requirement

    def applicable(self, request: ClientRequest) -> List[RequestRequirement]:
        return [r for r in self._requirements if r.applies_to(request)]

    def check(self, request: ClientRequest) -> bool:
        """True when no requirement applies to the request or every applicable one passes."""
        return all(r.check(request) for r in self.applicable(request))

    def all(self) -> List[RequestRequirement]:
        return list(self._requirements)

    def clear(self):
        self._requirements.clear()

    def __len__(self) -> int:
        return len(self._requirements)
