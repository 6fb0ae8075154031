"""
Exact marker matching against a reference sequence.

Every marker is searched on the forward strand and, unless it is its own
reverse complement, as a reverse complement. Markers are split into
contiguous chunks and matched in parallel worker processes; chunk outputs
are concatenated in chunk order.

Author: Abhinav Mishra
"""

import logging
from typing import List, Optional, Sequence

from ..models import DEFAULT_CHROMOSOME, Marker, Match, Strand
from .parallel import default_workers, run_chunks, split_into_chunks
from ..utils.sequence import (
    DEFAULT_CONTEXT_SIZE,
    count_occurrences,
    extract_context,
    find_all_positions,
    is_palindromic,
    reverse_complement,
)

logger = logging.getLogger(__name__)


def match_marker(
    marker: Marker,
    reference: str,
    context_size: int = DEFAULT_CONTEXT_SIZE,
    chromosome: str = DEFAULT_CHROMOSOME,
) -> List[Match]:
    """
    Find all forward and reverse-complement occurrences of one marker.

    Returns forward hits first, then reverse hits, each in ascending
    position. Every returned Match carries the total hit count for the
    marker.
    """
    sequence = marker.sequence
    length = len(sequence)

    patterns = [(sequence, Strand.FORWARD)]
    if not is_palindromic(sequence):
        patterns.append((reverse_complement(sequence), Strand.REVERSE))

    matches = []
    for pattern, strand in patterns:
        for pos in find_all_positions(reference, pattern):
            end = pos + length - 1
            upstream, downstream = extract_context(reference, pos, end, context_size)
            matches.append(Match(
                start=pos,
                end=end,
                strand=strand,
                matched_sequence=pattern,
                marker_id=marker.marker_id,
                marker_length=length,
                upstream=upstream,
                downstream=downstream,
                chromosome=chromosome,
            ))

    for match in matches:
        match.occurrence_count = len(matches)

    return matches


def match_markers(
    markers: Sequence[Marker],
    reference: str,
    context_size: int = DEFAULT_CONTEXT_SIZE,
    chromosome: str = DEFAULT_CHROMOSOME,
) -> List[Match]:
    """Match a list of markers serially, preserving marker order."""
    matches = []
    for marker in markers:
        matches.extend(match_marker(marker, reference, context_size, chromosome))
    return matches


def _match_chunk_worker(chunk_data):
    """
    Worker function for parallel marker matching.

    Module-level so it pickles cleanly for ProcessPoolExecutor.

    Args:
        chunk_data: Tuple of (markers, reference, context_size, chromosome, chunk_idx)

    Returns:
        List of Match objects for the chunk
    """
    markers, reference, context_size, chromosome, chunk_idx = chunk_data
    return match_markers(markers, reference, context_size, chromosome)


def _screen_chunk_worker(chunk_data):
    """Worker returning markers with at least one forward-strand hit."""
    markers, reference, chunk_idx = chunk_data
    return [m for m in markers if count_occurrences(reference, m.sequence) > 0]


class Matcher:
    """Parallel exact matcher for a fixed reference."""

    def __init__(
        self,
        reference: str,
        n_workers: Optional[int] = None,
        context_size: int = DEFAULT_CONTEXT_SIZE,
        chromosome: str = DEFAULT_CHROMOSOME,
    ):
        if not reference:
            raise ValueError("Reference genome is empty")
        if context_size < 0:
            raise ValueError(f"Context size must be non-negative, got {context_size}")

        self.reference = reference
        self.n_workers = n_workers if n_workers else default_workers()
        self.context_size = context_size
        self.chromosome = chromosome

    def run(self, markers: Sequence[Marker]) -> List[Match]:
        """
        Match all markers against the reference.

        Args:
            markers: Markers to locate

        Returns:
            Match records, grouped by chunk in chunk order

        Raises:
            ValueError: If no markers are given
        """
        if not markers:
            raise ValueError("No markers to match")

        chunks = [
            (chunk, self.reference, self.context_size, self.chromosome, idx)
            for idx, chunk in enumerate(split_into_chunks(markers, self.n_workers))
        ]

        logger.info(
            f"Matching {len(markers)} markers against {len(self.reference)} bp "
            f"using {len(chunks)} worker(s)"
        )

        matches = run_chunks(_match_chunk_worker, chunks, self.n_workers, "match")

        n_hit = len({m.marker_id for m in matches})
        logger.info(f"Found {len(matches)} matches for {n_hit} marker(s)")
        return matches

    def screen(self, markers: Sequence[Marker]) -> List[Marker]:
        """Return the markers that occur at least once on the forward strand."""
        if not markers:
            raise ValueError("No markers to screen")

        chunks = [
            (chunk, self.reference, idx)
            for idx, chunk in enumerate(split_into_chunks(markers, self.n_workers))
        ]
        found = run_chunks(_screen_chunk_worker, chunks, self.n_workers, "screen")
        logger.info(f"{len(found)} of {len(markers)} marker(s) matched at least once")
        return found


def screen_markers(
    markers: Sequence[Marker],
    reference: str,
    n_workers: Optional[int] = None,
) -> List[Marker]:
    """Convenience wrapper around Matcher.screen."""
    return Matcher(reference, n_workers=n_workers).screen(markers)
