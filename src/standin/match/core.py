"""
standin Value Matchers

Small matcher vocabulary used to describe expected request attributes.

A matcher is an immutable boolean predicate with a human-readable description.
Matchers compose with all_of/any_of/is_not (or the & | ~ operators), so request
matchers never need special cases for combined conditions.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Sequence


class Matcher(ABC):
    """A described predicate over a single value."""

    @abstractmethod
    def matches(self, item: Any) -> bool:
        """Return True if the item satisfies this matcher."""

    @abstractmethod
    def describe(self) -> str:
        """Return a human-readable description of what is matched."""

    def __and__(self, other: Any) -> 'Matcher':
        return all_of(self, wrap(other))

    def __or__(self, other: Any) -> 'Matcher':
        return any_of(self, wrap(other))

    def __invert__(self) -> 'Matcher':
        return is_not(self)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.describe()}>"


class PredicateMatcher(Matcher):
    """Matcher backed by a plain callable."""

    def __init__(self, fn: Callable[[Any], bool], description: str = "a predicate function"):
        self._fn = fn
        self._description = description

    def matches(self, item: Any) -> bool:
        return bool(self._fn(item))

    def describe(self) -> str:
        return self._description


class AllOf(Matcher):
    """Conjunction of matchers; an empty conjunction matches everything."""

    def __init__(self, matchers: Sequence[Matcher]):
        self.matchers = tuple(matchers)

    def matches(self, item: Any) -> bool:
        return all(m.matches(item) for m in self.matchers)

    def describe(self) -> str:
        return '(' + ' and '.join(m.describe() for m in self.matchers) + ')'


class AnyOf(Matcher):
    """Disjunction of matchers; an empty disjunction matches nothing."""

    def __init__(self, matchers: Sequence[Matcher]):
        self.matchers = tuple(matchers)

    def matches(self, item: Any) -> bool:
        return any(m.matches(item) for m in self.matchers)

    def describe(self) -> str:
        return '(' + ' or '.join(m.describe() for m in self.matchers) + ')'


class IsNot(Matcher):
    """Negation of a matcher."""

    def __init__(self, matcher: Matcher):
        self.matcher = matcher

    def matches(self, item: Any) -> bool:
        return not self.matcher.matches(item)

    def describe(self) -> str:
        return f"not {self.matcher.describe()}"


class HasItem(Matcher):
    """Matches an iterable containing at least one item accepted by the inner matcher."""

    def __init__(self, matcher: Matcher):
        self.matcher = matcher

    def matches(self, item: Any) -> bool:
        if item is None or isinstance(item, (str, bytes)):
            return False
        try:
            return any(self.matcher.matches(value) for value in item)
        except TypeError:
            return False

    def describe(self) -> str:
        return f"a collection containing {self.matcher.describe()}"


class ContainsInAnyOrder(Matcher):
    """
    Matches an iterable whose items are matched one-to-one by the given matchers.

    Each matcher must consume exactly one item and every item must be consumed;
    item order is irrelevant.
    """

    def __init__(self, matchers: Sequence[Matcher]):
        self.matchers = tuple(matchers)

    def matches(self, item: Any) -> bool:
        if item is None or isinstance(item, (str, bytes)):
            return False
        try:
            values = list(item)
        except TypeError:
            return False

        remaining: List[Matcher] = list(self.matchers)
        for value in values:
            for index, matcher in enumerate(remaining):
                if matcher.matches(value):
                    del remaining[index]
                    break
            else:
                return False

        return not remaining

    def describe(self) -> str:
        return 'a collection over [' + ', '.join(m.describe() for m in self.matchers) + '] in any order'


class AnyValues(Matcher):
    """Matches any collection of values, including an empty one."""

    def matches(self, item: Any) -> bool:
        return item is not None and not isinstance(item, (str, bytes))

    def describe(self) -> str:
        return "any collection of values"


def is_collection_matcher(matcher: Matcher) -> bool:
    """Whether a matcher applies to a whole collection of values rather than to one value."""
    if isinstance(matcher, (HasItem, ContainsInAnyOrder, AnyValues)):
        return True
    if isinstance(matcher, (AllOf, AnyOf)):
        return bool(matcher.matchers) and all(is_collection_matcher(m) for m in matcher.matchers)
    if isinstance(matcher, IsNot):
        return is_collection_matcher(matcher.matcher)
    return False


def wrap(value: Any) -> Matcher:
    """Return value unchanged if it is a Matcher, otherwise an equality matcher for it."""
    return value if isinstance(value, Matcher) else equal_to(value)


def anything() -> Matcher:
    return PredicateMatcher(lambda _: True, "anything")


def not_none() -> Matcher:
    return PredicateMatcher(lambda v: v is not None, "not None")


def equal_to(expected: Any) -> Matcher:
    return PredicateMatcher(lambda v: v == expected, repr(expected))


def equal_to_ignoring_case(expected: str) -> Matcher:
    lowered = expected.lower()
    return PredicateMatcher(
        lambda v: isinstance(v, str) and v.lower() == lowered,
        f"{expected!r} ignoring case"
    )


def starts_with(prefix: str) -> Matcher:
    return PredicateMatcher(
        lambda v: isinstance(v, str) and v.startswith(prefix),
        f"a string starting with {prefix!r}"
    )


def ends_with(suffix: str) -> Matcher:
    return PredicateMatcher(
        lambda v: isinstance(v, str) and v.endswith(suffix),
        f"a string ending with {suffix!r}"
    )


def contains_string(fragment: str) -> Matcher:
    return PredicateMatcher(
        lambda v: isinstance(v, str) and fragment in v,
        f"a string containing {fragment!r}"
    )


def matches_regex(pattern: str) -> Matcher:
    compiled = re.compile(pattern)
    return PredicateMatcher(
        lambda v: isinstance(v, str) and compiled.search(v) is not None,
        f"a string matching /{pattern}/"
    )


def greater_than(value: Any) -> Matcher:
    return PredicateMatcher(lambda v: v is not None and v > value, f"a value greater than {value!r}")


def greater_than_or_equal_to(value: Any) -> Matcher:
    return PredicateMatcher(
        lambda v: v is not None and v >= value,
        f"a value greater than or equal to {value!r}"
    )


def less_than(value: Any) -> Matcher:
    return PredicateMatcher(lambda v: v is not None and v < value, f"a value less than {value!r}")


def less_than_or_equal_to(value: Any) -> Matcher:
    return PredicateMatcher(
        lambda v: v is not None and v <= value,
        f"a value less than or equal to {value!r}"
    )


def predicate(fn: Callable[[Any], bool], description: str = "a predicate function") -> Matcher:
    return PredicateMatcher(fn, description)


def all_of(*matchers: Any) -> Matcher:
    return AllOf([wrap(m) for m in matchers])


def any_of(*matchers: Any) -> Matcher:
    return AnyOf([wrap(m) for m in matchers])


def is_not(matcher: Any) -> Matcher:
    return IsNot(wrap(matcher))


def has_item(matcher: Any) -> Matcher:
    return HasItem(wrap(matcher))


def contains_in_any_order(*matchers: Any) -> Matcher:
    return ContainsInAnyOrder([wrap(m) for m in matchers])


def any_values() -> Matcher:
    """Any iterable of values, including an empty one."""
    return AnyValues()


def values_matcher(value: Any) -> Matcher:
    """
    Convert a value specification for a multi-valued attribute into a matcher.

    Args:
        value: A collection matcher such as has_item() (used as-is), any other
            Matcher or a single string (some value must satisfy it), or an
            iterable of strings (the values must be exactly these, in any order)

    Returns:
        Matcher applied to the full list of values of the attribute
    """
    if isinstance(value, Matcher):
        return value if is_collection_matcher(value) else has_item(value)
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return has_item(value)
    return contains_in_any_order(*value)
