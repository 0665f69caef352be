"""
Tests for standin value matchers

Tests the matcher primitives including:
- Leaf matchers and their descriptions
- Combinators and operators
- Multi-valued matchers
- Cookie matcher
"""

import pytest

from standin.encdec import Cookie
from standin.match import (
    CookieMatcher,
    all_of,
    any_of,
    any_values,
    anything,
    contains_in_any_order,
    contains_string,
    ends_with,
    equal_to,
    equal_to_ignoring_case,
    greater_than,
    greater_than_or_equal_to,
    has_item,
    is_not,
    less_than,
    less_than_or_equal_to,
    matches_regex,
    not_none,
    predicate,
    starts_with,
    wrap,
)
from standin.match.core import is_collection_matcher, values_matcher


class TestLeafMatchers:
    """Test single-value matchers."""

    def test_anything(self):
        """Test anything accepts every value including None."""
        assert anything().matches(None)
        assert anything().matches('x')

    def test_equal_to(self):
        """Test equality matcher."""
        assert equal_to('abc').matches('abc')
        assert not equal_to('abc').matches('abd')
        assert equal_to(3).describe() == '3'

    def test_equal_to_ignoring_case(self):
        """Test case-insensitive equality."""
        matcher = equal_to_ignoring_case('Content-Type')
        assert matcher.matches('content-type')
        assert not matcher.matches('content-length')
        assert not matcher.matches(None)

    def test_string_matchers(self):
        """Test prefix, suffix, substring and regex matchers."""
        assert starts_with('/api').matches('/api/users')
        assert not starts_with('/api').matches('/web')
        assert ends_with('.json').matches('data.json')
        assert contains_string('user').matches('/api/users/1')
        assert matches_regex(r'^/users/\d+$').matches('/users/42')
        assert not matches_regex(r'^/users/\d+$').matches('/users/abc')

    def test_string_matchers_reject_non_strings(self):
        """Test string matchers never match other types."""
        assert not starts_with('1').matches(1)
        assert not contains_string('a').matches(None)

    def test_numeric_matchers(self):
        """Test ordering matchers."""
        assert greater_than(2).matches(3)
        assert not greater_than(2).matches(2)
        assert greater_than_or_equal_to(2).matches(2)
        assert less_than(2).matches(1)
        assert less_than_or_equal_to(2).matches(2)
        assert not less_than(2).matches(None)

    def test_not_none(self):
        """Test not_none matcher."""
        assert not_none().matches('')
        assert not not_none().matches(None)

    def test_predicate_description(self):
        """Test predicate matcher keeps its description."""
        matcher = predicate(lambda v: v % 2 == 0, 'an even number')
        assert matcher.matches(4)
        assert str(matcher) == 'an even number'

    def test_wrap_passes_matchers_through(self):
        """Test wrap turns literals into equality matchers."""
        matcher = starts_with('a')
        assert wrap(matcher) is matcher
        assert wrap('a').matches('a')


class TestCombinators:
    """Test matcher composition."""

    def test_all_of(self):
        """Test conjunction."""
        matcher = all_of(starts_with('/a'), ends_with('z'))
        assert matcher.matches('/abcz')
        assert not matcher.matches('/abc')

    def test_any_of(self):
        """Test disjunction with literal values."""
        matcher = any_of('GET', 'HEAD')
        assert matcher.matches('HEAD')
        assert not matcher.matches('POST')

    def test_is_not(self):
        """Test negation."""
        assert is_not('a').matches('b')
        assert not is_not('a').matches('a')

    def test_operators(self):
        """Test &, | and ~ operators."""
        matcher = (starts_with('a') & ends_with('z')) | equal_to('q')
        assert matcher.matches('abz')
        assert matcher.matches('q')
        assert not matcher.matches('ab')
        assert (~equal_to('x')).matches('y')

    def test_description_composes(self):
        """Test combined descriptions mention both parts."""
        description = (starts_with('a') & ends_with('z')).describe()
        assert "'a'" in description
        assert "'z'" in description


class TestValueCollections:
    """Test matchers over lists of values."""

    def test_has_item(self):
        """Test has_item matches when any value matches."""
        assert has_item('gzip').matches(['gzip', 'deflate'])
        assert not has_item('br').matches(['gzip', 'deflate'])

    def test_has_item_rejects_strings(self):
        """Test has_item does not treat a string as a collection of characters."""
        assert not has_item('g').matches('gzip')
        assert not has_item('g').matches(None)

    def test_contains_in_any_order(self):
        """Test exact multiset matching regardless of order."""
        matcher = contains_in_any_order('a', 'b')
        assert matcher.matches(['b', 'a'])
        assert not matcher.matches(['a'])
        assert not matcher.matches(['a', 'b', 'c'])

    def test_contains_in_any_order_with_matchers(self):
        """Test each matcher consumes one value."""
        matcher = contains_in_any_order(starts_with('a'), starts_with('a'))
        assert matcher.matches(['ab', 'ac'])
        assert not matcher.matches(['ab', 'bc'])

    def test_any_values(self):
        """Test any_values accepts empty collections but not strings."""
        assert any_values().matches([])
        assert any_values().matches(['x'])
        assert not any_values().matches('x')

    @pytest.mark.parametrize('given,values,expected', [
        ('a', ['a', 'b'], True),
        (['a', 'b'], ['b', 'a'], True),
        (['a'], ['a', 'b'], False),
        (has_item(starts_with('x')), ['xy'], True),
        (starts_with('x'), ['ab', 'xy'], True),
        (starts_with('x'), ['ab'], False),
        (~has_item('a'), ['b'], True),
        (any_values(), [], True),
    ])
    def test_values_matcher(self, given, values, expected):
        """Test value specifications for multi-valued attributes."""
        assert values_matcher(given).matches(values) is expected

    def test_collection_matcher_detection(self):
        """Test which matchers apply to a whole list of values."""
        assert is_collection_matcher(has_item('a'))
        assert is_collection_matcher(has_item('a') & contains_in_any_order('a'))
        assert is_collection_matcher(~any_values())
        assert not is_collection_matcher(starts_with('a'))
        assert not is_collection_matcher(has_item('a') | equal_to('b'))


class TestCookieMatcher:
    """Test field-by-field cookie matching."""

    def test_empty_matcher_accepts_any_cookie(self):
        """Test a matcher with no fields configured."""
        assert CookieMatcher().matches(Cookie(value='x'))
        assert CookieMatcher().describe() == 'any cookie'

    def test_non_cookie_never_matches(self):
        """Test that strings are not cookies."""
        assert not CookieMatcher().matches('x')

    def test_configured_fields(self):
        """Test every configured field must match."""
        matcher = CookieMatcher().value(starts_with('sess-')).domain('example.com').secure(True)

        assert matcher.matches(Cookie(value='sess-1', domain='example.com', secure=True))
        assert not matcher.matches(Cookie(value='sess-1', domain='example.com'))
        assert not matcher.matches(Cookie(value='other', domain='example.com', secure=True))

    def test_of_callback(self):
        """Test configuring through a callback."""
        matcher = CookieMatcher.of(lambda c: c.path('/').http_only())
        assert matcher.matches(Cookie(value='v', path='/', http_only=True))
        assert 'path' in matcher.describe()
