"""
Core matching and annotation modules for GRmap.

Author: Abhinav Mishra
"""

from .annotator import (
    Annotator,
    annotate_match,
    cpg_overlap,
    nearest_tss,
    overlap_length,
    overlapping_gene,
    repeat_overlap,
)
from .matcher import (
    Matcher,
    match_marker,
    match_markers,
    screen_markers,
)
from .parallel import (
    default_workers,
    run_chunks,
    split_into_chunks,
)

__all__ = [
    # Matching
    'Matcher',
    'match_marker',
    'match_markers',
    'screen_markers',
    # Annotation
    'Annotator',
    'annotate_match',
    'nearest_tss',
    'overlapping_gene',
    'cpg_overlap',
    'repeat_overlap',
    'overlap_length',
    # Parallel execution
    'default_workers',
    'split_into_chunks',
    'run_chunks',
]
