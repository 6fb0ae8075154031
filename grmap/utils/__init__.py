"""
Utility modules for GRmap.

Author: Abhinav Mishra
"""

from .sequence import (
    DEFAULT_CONTEXT_SIZE,
    count_occurrences,
    extract_context,
    find_all_positions,
    is_palindromic,
    reverse_complement,
)

__all__ = [
    'DEFAULT_CONTEXT_SIZE',
    'reverse_complement',
    'is_palindromic',
    'find_all_positions',
    'count_occurrences',
    'extract_context',
]
