"""
Main pipeline orchestration for GRmap.

Author: Abhinav Mishra
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import GRmapConfig
from .core.annotator import Annotator
from .core.matcher import Matcher
from .io.fasta import read_fasta, read_markers
from .io.features import load_feature_set
from .io.output import write_annotations_tsv, write_matches_tsv
from .models import DEFAULT_CHROMOSOME, AnnotatedMatch, Marker, Match

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Summary of a pipeline run."""
    markers_loaded: int
    matches: List[Match]
    match_file: Path
    annotated: Optional[List[AnnotatedMatch]] = None
    annotation_file: Optional[Path] = None

    @property
    def markers_matched(self) -> int:
        return len({m.marker_id for m in self.matches})


class GRmapPipeline:
    """Match markers against a reference, then annotate the hits."""

    def __init__(self, config: GRmapConfig):
        self.config = config

    def load_inputs(self):
        """
        Load the reference and markers.

        Returns:
            Tuple of (chromosome, reference, markers)

        Raises:
            ValueError: If the reference is empty or no markers were loaded
        """
        header_chrom, reference = read_fasta(self.config.reference, uppercase=self.config.uppercase)
        if not reference:
            raise ValueError(f"Reference genome is empty: {self.config.reference}")

        markers = read_markers(self.config.reads, self.config.max_markers)
        if not markers:
            raise ValueError(f"No marker sequences found in {self.config.reads}")

        chromosome = self.config.chromosome or header_chrom
        if chromosome is None:
            logger.warning(
                f"No chromosome name in {self.config.reference} header; using {DEFAULT_CHROMOSOME} "
                f"(set 'chromosome' in the configuration to override)"
            )
            chromosome = DEFAULT_CHROMOSOME
        return chromosome, reference, markers

    def run_match(self, reference: str, markers: List[Marker], chromosome: str) -> List[Match]:
        """Run the match stage and write the match table."""
        matcher = Matcher(
            reference,
            n_workers=self.config.n_workers,
            context_size=self.config.context_size,
            chromosome=chromosome,
        )
        matches = matcher.run(markers)

        run_info = {
            'ReferenceFile': self.config.reference,
            'QueryFile': self.config.reads,
            'Chromosome': chromosome,
            'Total Queries Processed': len(markers),
            'Query Option (number of queries)': self.config.max_markers,
            'Number of Workers Used': matcher.n_workers,
        }
        write_matches_tsv(matches, self.config.match_output, run_info=run_info)
        return matches

    def run_annotate(self, matches: List[Match]) -> List[AnnotatedMatch]:
        """Load feature files, annotate matches and write the annotation table."""
        features = load_feature_set(
            gff=self.config.gff,
            tss=self.config.tss,
            cpg=self.config.cpg,
            repeats=self.config.repeats,
        )
        annotated = Annotator(features, n_workers=self.config.n_workers).run(matches)
        write_annotations_tsv(annotated, self.config.annotation_output)
        return annotated

    def run(self) -> PipelineResult:
        """
        Run the full pipeline.

        Returns:
            PipelineResult summary
        """
        errors = self.config.validate()
        if errors:
            raise ValueError("Invalid configuration:\n  " + "\n  ".join(errors))

        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        chromosome, reference, markers = self.load_inputs()

        logger.info(f"Match stage: {len(markers)} markers on {chromosome}")
        matches = self.run_match(reference, markers, chromosome)
        result = PipelineResult(
            markers_loaded=len(markers),
            matches=matches,
            match_file=self.config.match_output,
        )

        if self.config.annotate and self.config.has_features:
            logger.info("Annotation stage")
            result.annotated = self.run_annotate(matches)
            result.annotation_file = self.config.annotation_output
        else:
            logger.info("No feature files configured, skipping annotation")

        return result
