"""
Feature annotation of matched marker positions.

Each match is annotated with four independent lookups against the loaded
feature indexes:

- nearest TSS by distance to the match start
- strand-matched gene with the largest overlap
- first CpG island (in start order) overlapping the match
- first strand-matched repeat element (in start order) overlapping the match

Author: Abhinav Mishra
"""

import logging
from collections import Counter
from typing import List, Optional, Sequence, Tuple, Union

from .parallel import default_workers, run_chunks, split_into_chunks
from ..features.index import FeatureIndex, FeatureSet
from ..models import (
    AnnotatedMatch,
    CpGIsland,
    GeneFeature,
    Match,
    RepeatElement,
    TSSRecord,
)

logger = logging.getLogger(__name__)

NO_TSS = ("None", "N/A", "N/A", "N/A")
NO_GENE = ("None", "N/A", "N/A")
NO_CPG = (False, 0, 0)
NO_REPEAT = ("No", "None", 0)


def overlap_length(start_a: int, end_a: int, start_b: int, end_b: int) -> int:
    """Bases shared by two closed intervals (0 if they do not intersect)."""
    if end_a < start_b or start_a > end_b:
        return 0
    return min(end_a, end_b) - max(start_a, start_b) + 1


def nearest_tss(
    tss: FeatureIndex[TSSRecord],
    chromosome: str,
    position: int,
) -> Tuple[str, Union[int, str], str, str]:
    """
    Find the TSS closest to position on a chromosome.

    Ties on distance go to the smallest transcript id, then the smallest
    TSS start.

    Returns:
        (gene_id, distance, gene_type, synonyms), or NO_TSS if the
        chromosome has no TSS records
    """
    records = tss.on(chromosome)
    if not records:
        return NO_TSS

    best = min(
        records,
        key=lambda t: (abs(t.start - position), t.transcript_id, t.start),
    )
    return best.gene_id, abs(best.start - position), best.gene_type, best.synonyms


def overlapping_gene(
    genes: FeatureIndex[GeneFeature],
    chromosome: str,
    start: int,
    end: int,
    strand: str,
) -> Tuple[str, str, str]:
    """
    Find the gene on the same strand with the largest overlap.

    Genes are scanned in start order, so among equal overlaps the gene
    with the lowest start (then earliest loaded) wins.

    Returns:
        (gene_id, gene_type, synonyms), or NO_GENE
    """
    best: Optional[GeneFeature] = None
    best_overlap = 0

    for gene in genes.on(chromosome):
        if gene.start > end:
            break
        if gene.strand != strand:
            continue
        overlap = overlap_length(start, end, gene.start, gene.end)
        if overlap > best_overlap:
            best = gene
            best_overlap = overlap

    if best is None:
        return NO_GENE
    return best.gene_id, best.gene_type, best.synonyms


def cpg_overlap(
    cpg: FeatureIndex[CpGIsland],
    chromosome: str,
    start: int,
    end: int,
) -> Tuple[bool, float, float]:
    """
    Find the first CpG island overlapping [start, end].

    Returns:
        (True, gc_content, obs_exp_ratio), or NO_CPG
    """
    for island in cpg.on(chromosome):
        if island.start > end:
            break
        if island.end >= start:
            return True, island.gc_content, island.obs_exp_ratio
    return NO_CPG


def repeat_overlap(
    repeats: FeatureIndex[RepeatElement],
    chromosome: str,
    start: int,
    end: int,
    strand: str,
) -> Tuple[str, str, int]:
    """
    Find the first repeat on the same strand overlapping [start, end].

    Returns:
        (name, repeat_class, length), or NO_REPEAT
    """
    for element in repeats.on(chromosome):
        if element.start > end:
            break
        if element.strand != strand:
            continue
        if element.end >= start:
            return element.name, element.repeat_class, element.length
    return NO_REPEAT


def annotate_match(
    match: Match,
    features: FeatureSet,
    chromosome: Optional[str] = None,
) -> AnnotatedMatch:
    """
    Annotate one match with all four feature lookups.

    Args:
        match: Match to annotate
        features: Loaded feature indexes
        chromosome: Chromosome to look up; defaults to the match's own

    Returns:
        AnnotatedMatch
    """
    chrom = chromosome or match.chromosome
    strand = match.strand.genomic

    tss_gene, tss_distance, tss_type, tss_synonyms = nearest_tss(
        features.tss, chrom, match.start
    )
    gene_id, gene_type, gene_synonyms = overlapping_gene(
        features.genes, chrom, match.start, match.end, strand
    )
    in_cpg, cpg_gc, cpg_obs_exp = cpg_overlap(
        features.cpg, chrom, match.start, match.end
    )
    repeat_name, repeat_class, repeat_length = repeat_overlap(
        features.repeats, chrom, match.start, match.end, strand
    )

    return AnnotatedMatch(
        match=match,
        chromosome=chrom,
        tss_gene_id=tss_gene,
        tss_distance=tss_distance,
        tss_gene_type=tss_type,
        tss_synonyms=tss_synonyms,
        gff_gene_id=gene_id,
        gff_gene_type=gene_type,
        gff_synonyms=gene_synonyms,
        in_cpg=in_cpg,
        cpg_gc_content=cpg_gc,
        cpg_obs_exp=cpg_obs_exp,
        repeat_name=repeat_name,
        repeat_class=repeat_class,
        repeat_length=repeat_length,
    )


def _annotate_chunk_worker(chunk_data):
    """
    Worker function for parallel annotation.

    Args:
        chunk_data: Tuple of (matches, features, chromosome, chunk_idx)

    Returns:
        List of AnnotatedMatch objects in input order
    """
    matches, features, chromosome, chunk_idx = chunk_data
    return [annotate_match(m, features, chromosome) for m in matches]


class Annotator:
    """Parallel annotator over a fixed FeatureSet."""

    def __init__(
        self,
        features: FeatureSet,
        n_workers: Optional[int] = None,
        chromosome: Optional[str] = None,
    ):
        self.features = features
        self.n_workers = n_workers if n_workers else default_workers()
        self.chromosome = chromosome

    def check_chromosomes(self, matches: Sequence[Match]) -> List[str]:
        """
        Log a warning for each match chromosome absent from every feature index.

        Returns:
            The chromosomes that have no features at all
        """
        known = set()
        for index in (self.features.genes, self.features.tss, self.features.cpg, self.features.repeats):
            known.update(index.chromosomes)

        counts = Counter(self.chromosome or m.chromosome for m in matches)
        unknown = [chrom for chrom in counts if chrom not in known]
        for chrom in unknown:
            logger.warning(
                f"Chromosome {chrom} has no features in any loaded file; "
                f"{counts[chrom]} match(es) on it will be unannotated"
            )
        return unknown

    def run(self, matches: Sequence[Match]) -> List[AnnotatedMatch]:
        """
        Annotate matches, returning results in the same order as the input.
        """
        if not matches:
            logger.info("No matches to annotate")
            return []

        chunks = [
            (chunk, self.features, self.chromosome, idx)
            for idx, chunk in enumerate(split_into_chunks(matches, self.n_workers))
        ]

        self.check_chromosomes(matches)
        logger.info(f"Annotating {len(matches)} matches using {len(chunks)} worker(s)")
        annotated = run_chunks(_annotate_chunk_worker, chunks, self.n_workers, "annotate")

        in_cpg = sum(1 for a in annotated if a.in_cpg)
        in_gene = sum(1 for a in annotated if a.gff_gene_id != "None")
        logger.info(f"Annotation summary: {in_gene} in genes, {in_cpg} in CpG islands")
        return annotated
