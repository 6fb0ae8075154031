"""
I/O modules for GRmap.

Author: Abhinav Mishra
"""

from .fasta import (
    chromosome_from_header,
    open_text,
    read_fasta,
    read_markers,
)
from .features import (
    iter_rows,
    load_feature_set,
)
from .output import (
    read_matches_tsv,
    read_run_info,
    write_annotations_tsv,
    write_matches_tsv,
)

__all__ = [
    'chromosome_from_header',
    'open_text',
    'read_fasta',
    'read_markers',
    'iter_rows',
    'load_feature_set',
    'write_matches_tsv',
    'read_matches_tsv',
    'read_run_info',
    'write_annotations_tsv',
]
