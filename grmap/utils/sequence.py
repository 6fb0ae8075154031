"""
Sequence manipulation utilities.

Exact-match search, reverse complement and flanking-context helpers used by
the marker matcher.

Author: Abhinav Mishra
"""

from typing import List, Tuple


COMPLEMENT = {
    'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G',
    'a': 't', 't': 'a', 'g': 'c', 'c': 'g',
}

DEFAULT_CONTEXT_SIZE = 20


def reverse_complement(seq: str) -> str:
    """Return reverse complement of DNA sequence.

    Only A/C/G/T (either case) are complemented; any other character
    (N, IUPAC codes) is carried through unchanged.
    """
    return ''.join(COMPLEMENT.get(base, base) for base in reversed(seq))


def is_palindromic(seq: str) -> bool:
    """True if the sequence equals its own reverse complement."""
    return seq == reverse_complement(seq)


def find_all_positions(reference: str, pattern: str) -> List[int]:
    """Find every start offset of pattern in reference.

    Overlapping occurrences are reported: after a hit at ``i`` the scan
    resumes at ``i + 1``. Matching is case-sensitive.

    Args:
        reference: Sequence to search
        pattern: Exact pattern to find

    Returns:
        Ascending list of 0-based start positions
    """
    positions = []
    if not pattern or len(pattern) > len(reference):
        return positions

    start = 0
    while True:
        pos = reference.find(pattern, start)
        if pos == -1:
            break
        positions.append(pos)
        start = pos + 1

    return positions


def count_occurrences(reference: str, pattern: str) -> int:
    """Count overlapping occurrences of pattern in reference."""
    return len(find_all_positions(reference, pattern))


def extract_context(
    reference: str,
    start: int,
    end: int,
    context_size: int = DEFAULT_CONTEXT_SIZE
) -> Tuple[str, str]:
    """Return (upstream, downstream) flanks around the closed span [start, end].

    Flanks are clipped at the reference boundaries, so either may be shorter
    than ``context_size`` or empty.
    """
    upstream = reference[max(0, start - context_size):start]
    downstream = reference[end + 1:end + 1 + context_size]
    return upstream, downstream
