"""
Feature file reading.

Author: Abhinav Mishra
"""

import logging
from typing import Iterator, List, Optional

from .fasta import PathLike, open_text
from ..features.index import FeatureIndex, FeatureSet
from ..features.loaders import load_cpg, load_genes, load_repeats, load_tss

logger = logging.getLogger(__name__)


def iter_rows(path: PathLike) -> Iterator[List[str]]:
    """Yield tab-split rows from a possibly gzipped text file."""
    with open_text(path) as f:
        for line in f:
            line = line.rstrip('\r\n')
            if line:
                yield line.split('\t')


def load_feature_set(
    gff: Optional[PathLike] = None,
    tss: Optional[PathLike] = None,
    cpg: Optional[PathLike] = None,
    repeats: Optional[PathLike] = None,
) -> FeatureSet:
    """
    Load the four feature files into a FeatureSet.

    A file left as None gives an empty index, so lookups against it report
    their 'not found' values.

    Raises:
        FileNotFoundError: If a given file does not exist
    """
    features = FeatureSet(
        genes=load_genes(iter_rows(gff)) if gff else FeatureIndex("genes"),
        tss=load_tss(iter_rows(tss)) if tss else FeatureIndex("tss"),
        cpg=load_cpg(iter_rows(cpg)) if cpg else FeatureIndex("cpg"),
        repeats=load_repeats(iter_rows(repeats)) if repeats else FeatureIndex("repeats"),
    )
    logger.info(f"Feature set loaded: {features.summary()}")
    return features
