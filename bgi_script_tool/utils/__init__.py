"""
Utility functions and classes.
"""

from .pattern_search import (
    iter_pattern, find_first, find_all, PatternMatches, Searcher, hex_to_bytes
)
from .string_utils import escape_string, unescape_string

__all__ = [
    'iter_pattern', 'find_first', 'find_all', 'PatternMatches', 'Searcher',
    'hex_to_bytes', 'escape_string', 'unescape_string',
]
