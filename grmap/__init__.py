"""
GRmap - locate marker sequences in a reference genome and annotate them
with genes, TSSs, CpG islands and repeat elements.

Author: Abhinav Mishra
"""

__version__ = "0.2.0"
__author__ = "Abhinav Mishra"

from .models import (
    AnnotatedMatch,
    Marker,
    Match,
    Strand,
)
from .core.annotator import Annotator
from .core.matcher import Matcher
from .features.index import FeatureIndex, FeatureSet

__all__ = [
    "AnnotatedMatch",
    "Annotator",
    "FeatureIndex",
    "FeatureSet",
    "Marker",
    "Match",
    "Matcher",
    "Strand",
]
