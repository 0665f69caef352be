"""
standin Common Utilities

Shared helpers used across standin modules.
"""

from .counter import AtomicCounter
from .timeout import ONE_SECOND, WaitFor, is_true_before
from .utils import group_header_items, render_content, safe_decode, split_header_values

__all__ = [
    'AtomicCounter',
    'ONE_SECOND',
    'WaitFor',
    'is_true_before',
    'group_header_items',
    'render_content',
    'safe_decode',
    'split_header_values',
]
