"""
Per-chromosome feature collections.

Author: Abhinav Mishra
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterator, List, TypeVar

from ..models import CpGIsland, GeneFeature, RepeatElement, TSSRecord

F = TypeVar('F')


class FeatureIndex(Generic[F]):
    """
    Features grouped by chromosome, each group sorted ascending by start.

    Every added feature is kept, including several sharing a start position.
    The sort is stable, so features with equal starts stay in load order.
    """

    def __init__(self, name: str = "features"):
        self.name = name
        self._by_chromosome: Dict[str, List[F]] = defaultdict(list)

    def add(self, feature: F) -> None:
        self._by_chromosome[feature.chromosome].append(feature)

    def finalize(self) -> 'FeatureIndex[F]':
        """Sort each chromosome's features by start. Returns self."""
        for features in self._by_chromosome.values():
            features.sort(key=lambda f: f.start)
        return self

    def on(self, chromosome: str) -> List[F]:
        """Sorted features on a chromosome (empty list if none)."""
        return self._by_chromosome.get(chromosome, [])

    @property
    def chromosomes(self) -> List[str]:
        return sorted(self._by_chromosome)

    def __contains__(self, chromosome: str) -> bool:
        return chromosome in self._by_chromosome

    def __iter__(self) -> Iterator[F]:
        for chromosome in self.chromosomes:
            yield from self._by_chromosome[chromosome]

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_chromosome.values())

    def __repr__(self) -> str:
        return f"FeatureIndex(name={self.name}, chromosomes={len(self._by_chromosome)}, features={len(self)})"


@dataclass
class FeatureSet:
    """The four feature collections used to annotate matches."""
    genes: FeatureIndex[GeneFeature] = field(default_factory=lambda: FeatureIndex("genes"))
    tss: FeatureIndex[TSSRecord] = field(default_factory=lambda: FeatureIndex("tss"))
    cpg: FeatureIndex[CpGIsland] = field(default_factory=lambda: FeatureIndex("cpg"))
    repeats: FeatureIndex[RepeatElement] = field(default_factory=lambda: FeatureIndex("repeats"))

    def summary(self) -> Dict[str, int]:
        return {
            'genes': len(self.genes),
            'tss': len(self.tss),
            'cpg': len(self.cpg),
            'repeats': len(self.repeats),
        }
