"""
Genomic feature indexes for GRmap.

Author: Abhinav Mishra
"""

from .index import FeatureIndex, FeatureSet
from .loaders import (
    load_cpg,
    load_genes,
    load_repeats,
    load_tss,
    normalize_chromosome,
)

__all__ = [
    'FeatureIndex',
    'FeatureSet',
    'load_genes',
    'load_tss',
    'load_cpg',
    'load_repeats',
    'normalize_chromosome',
]
