"""
standin Matchers

Value matchers and the request-attribute matchers built from them.
"""

from .core import (
    Matcher,
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
from .cookie import CookieMatcher
from .request import (
    body_matching,
    body_param_does_not_exist,
    body_param_exists,
    body_param_matching,
    content_type_header,
    cookie_does_not_exist,
    cookie_exists,
    cookie_matching,
    has_no_cookies,
    header_does_not_exist,
    header_exists,
    header_matching,
    method_matching,
    path_matching,
    query_does_not_exist,
    query_exists,
    query_matching,
    request_matching,
    scheme_matching,
)

__all__ = [
    'Matcher',
    'CookieMatcher',
    'all_of',
    'any_of',
    'any_values',
    'anything',
    'contains_in_any_order',
    'contains_string',
    'ends_with',
    'equal_to',
    'equal_to_ignoring_case',
    'greater_than',
    'greater_than_or_equal_to',
    'has_item',
    'is_not',
    'less_than',
    'less_than_or_equal_to',
    'matches_regex',
    'not_none',
    'predicate',
    'starts_with',
    'wrap',
    'body_matching',
    'body_param_does_not_exist',
    'body_param_exists',
    'body_param_matching',
    'content_type_header',
    'cookie_does_not_exist',
    'cookie_exists',
    'cookie_matching',
    'has_no_cookies',
    'header_does_not_exist',
    'header_exists',
    'header_matching',
    'method_matching',
    'path_matching',
    'query_does_not_exist',
    'query_exists',
    'query_matching',
    'request_matching',
    'scheme_matching',
]
