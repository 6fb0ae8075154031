"""
Data models for GRmap marker matching and annotation.

Author: Abhinav Mishra
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union


DEFAULT_CHROMOSOME = "chr1"

MATCH_COLUMNS = [
    'Start', 'End', 'Strand', 'MatchedSequence', 'MarkerID', 'Length',
    'OccurrenceCount', 'UpstreamContext', 'DownstreamContext',
]

ANNOTATION_COLUMNS = [
    'Start', 'End', 'Strand', 'MatchedSeq', 'Occurrences', 'Chromosome',
    'TSS_Gene', 'TSS_Distance', 'TSS_Gene_Type', 'TSS_Gene_Synonyms',
    'GFF_Gene', 'GFF_Gene_Type', 'GFF_Gene_Synonyms',
    'InCpG', 'CpG_GC_Content', 'CpG_ObsExp',
    'Repeat_Name', 'Repeat_Class', 'Repeat_Length',
]


class Strand(Enum):
    """Orientation of a marker hit relative to the reference."""
    FORWARD = 'F'
    REVERSE = 'R'

    @property
    def genomic(self) -> str:
        """Strand symbol used by feature files ('+' or '-')."""
        return '+' if self is Strand.FORWARD else '-'


@dataclass(frozen=True)
class Marker:
    """A short query sequence to locate in the reference."""
    marker_id: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)


@dataclass
class Match:
    """
    One occurrence of a marker (or its reverse complement) in the reference.

    Positions are 0-based and inclusive on both ends.

    Attributes:
        start: First reference base covered by the hit
        end: Last reference base covered by the hit
        strand: FORWARD for the marker as given, REVERSE for its reverse complement
        matched_sequence: The pattern that was found (marker or reverse complement)
        marker_id: Identifier of the marker
        marker_length: Length of the marker
        occurrence_count: Hits on both strands for this marker in the same pass
        upstream: Up to context-size bases before start
        downstream: Up to context-size bases after end
        chromosome: Reference the hit was found on
    """
    start: int
    end: int
    strand: Strand
    matched_sequence: str
    marker_id: str
    marker_length: int
    occurrence_count: int = 0
    upstream: str = ""
    downstream: str = ""
    chromosome: str = DEFAULT_CHROMOSOME

    def to_row(self) -> List:
        """Values in match-file column order."""
        return [
            self.start,
            self.end,
            self.strand.value,
            self.matched_sequence,
            self.marker_id,
            self.marker_length,
            self.occurrence_count,
            self.upstream,
            self.downstream,
        ]


@dataclass
class GeneFeature:
    """Gene record from a GFF3 annotation."""
    chromosome: str
    start: int
    end: int
    strand: str
    gene_id: str
    gene_type: str = "Unknown"
    synonyms: str = "N/A"


@dataclass
class TSSRecord:
    """Transcription start site of one transcript."""
    chromosome: str
    start: int
    gene_id: str
    transcript_id: str
    gene_type: str = "N/A"
    synonyms: str = "N/A"
    end: Optional[int] = None


@dataclass
class CpGIsland:
    """CpG island interval."""
    chromosome: str
    start: int
    end: int
    gc_content: float
    obs_exp_ratio: float


@dataclass
class RepeatElement:
    """RepeatMasker element."""
    chromosome: str
    start: int
    end: int
    name: str
    repeat_class: str
    strand: str

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass
class AnnotatedMatch:
    """A Match together with the features found around it."""
    match: Match
    chromosome: str
    tss_gene_id: str = "None"
    tss_distance: Union[int, str] = "N/A"
    tss_gene_type: str = "N/A"
    tss_synonyms: str = "N/A"
    gff_gene_id: str = "None"
    gff_gene_type: str = "N/A"
    gff_synonyms: str = "N/A"
    in_cpg: bool = False
    cpg_gc_content: float = 0
    cpg_obs_exp: float = 0
    repeat_name: str = "No"
    repeat_class: str = "None"
    repeat_length: int = 0

    def to_row(self) -> List:
        """Values in annotation-file column order."""
        m = self.match
        return [
            m.start,
            m.end,
            m.strand.value,
            m.matched_sequence,
            m.occurrence_count,
            self.chromosome,
            self.tss_gene_id,
            self.tss_distance,
            self.tss_gene_type,
            self.tss_synonyms,
            self.gff_gene_id,
            self.gff_gene_type,
            self.gff_synonyms,
            'Yes' if self.in_cpg else 'No',
            self.cpg_gc_content,
            self.cpg_obs_exp,
            self.repeat_name,
            self.repeat_class,
            self.repeat_length,
        ]
