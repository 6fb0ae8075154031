"""
Configuration for GRmap runs.

GRmap: locate marker sequences in a reference genome and annotate the hits
with nearby genes, TSSs, CpG islands and repeats.

Author: Abhinav Mishra
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core.parallel import default_workers
from .utils.sequence import DEFAULT_CONTEXT_SIZE


MATCH_OUTPUT = "matchedseqs.txt"
ANNOTATION_OUTPUT = "matchedseqs_annotate.txt"

FEATURE_KEYS = ('gff', 'tss', 'cpg', 'repeats')


def _int_option(data: Dict[str, Any], key: str, default: int) -> int:
    """Integer option from a parsed mapping; a missing or empty key gives default."""
    value = data.get(key)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Configuration key '{key}' must be an integer, got {value!r}")


@dataclass
class GRmapConfig:
    """Full run configuration."""
    reads: Path
    reference: Path
    output_dir: Path = Path('./results')

    # Feature files (annotation runs only if at least one is set)
    gff: Optional[Path] = None
    tss: Optional[Path] = None
    cpg: Optional[Path] = None
    repeats: Optional[Path] = None

    # Processing options
    threads: int = 0  # 0 = one worker per CPU
    max_markers: int = 0  # 0 = load all
    context_size: int = DEFAULT_CONTEXT_SIZE
    uppercase: bool = False

    # Chromosome for matches; None = first word of the reference FASTA header
    chromosome: Optional[str] = None

    annotate: bool = True

    def __post_init__(self):
        self.reads = Path(self.reads)
        self.reference = Path(self.reference)
        self.output_dir = Path(self.output_dir)
        for key in FEATURE_KEYS:
            value = getattr(self, key)
            if value is not None:
                setattr(self, key, Path(value))

    @property
    def n_workers(self) -> int:
        return self.threads if self.threads > 0 else default_workers()

    @property
    def has_features(self) -> bool:
        return any(getattr(self, key) is not None for key in FEATURE_KEYS)

    @property
    def match_output(self) -> Path:
        return self.output_dir / MATCH_OUTPUT

    @property
    def annotation_output(self) -> Path:
        return self.output_dir / ANNOTATION_OUTPUT

    def validate(self) -> List[str]:
        """Check the configuration. Returns list of errors."""
        errors = []

        if not self.reads.exists():
            errors.append(f"Reads file not found: {self.reads}")
        if not self.reference.exists():
            errors.append(f"Reference file not found: {self.reference}")

        for key in FEATURE_KEYS:
            value = getattr(self, key)
            if value is not None and not value.exists():
                errors.append(f"{key} file not found: {value}")

        if self.threads < 0:
            errors.append(f"threads must be >= 0, got {self.threads}")
        if self.max_markers < 0:
            errors.append(f"max_markers must be >= 0, got {self.max_markers}")
        if self.context_size < 0:
            errors.append(f"context_size must be >= 0, got {self.context_size}")

        return errors

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GRmapConfig':
        """Build a configuration from a parsed mapping."""
        for key in ('reads', 'reference'):
            if not data.get(key):
                raise ValueError(f"Configuration is missing required key '{key}'")

        features = data.get('features', {}) or {}

        return cls(
            reads=data['reads'],
            reference=data['reference'],
            output_dir=data.get('output_dir') or './results',
            gff=features.get('gff', data.get('gff')),
            tss=features.get('tss', data.get('tss')),
            cpg=features.get('cpg', data.get('cpg')),
            repeats=features.get('repeats', data.get('repeats')),
            threads=_int_option(data, 'threads', 0),
            max_markers=_int_option(data, 'max_markers', 0),
            context_size=_int_option(data, 'context_size', DEFAULT_CONTEXT_SIZE),
            uppercase=bool(data.get('uppercase')),
            chromosome=data.get('chromosome'),
            annotate=data.get('annotate') is not False,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> 'GRmapConfig':
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")

        return cls.from_dict(data)


def config_template() -> str:
    """Annotated YAML template written by `grmap init`."""
    return '''# GRmap Configuration Template
# Edit this file to configure your analysis

# Required: marker reads and reference genome (FASTA or FASTA.GZ)
reads: illumina_reads_100.fasta.gz
reference: chr1.fasta.gz

# Output directory (matchedseqs.txt, matchedseqs_annotate.txt)
output_dir: ./results

# Optional: feature files for annotation (plain or gzipped)
features:
  gff: Homo_sapiens.GRCh38.chr1.gff3.gz     # GFF3 gene annotation
  tss: human_tss.txt.gz                     # TSS table (with header row)
  cpg: cpgIslandExt.txt.gz                  # UCSC cpgIslandExt
  repeats: rmsk.txt.gz                      # chrom, start, end, name, class, strand

# Processing options
threads: 0          # 0 = one worker per CPU
max_markers: 0      # 0 = load all markers
context_size: 20    # flanking bases reported around each match
uppercase: false    # upper-case the reference before matching

# Chromosome name for matches (default: taken from the reference FASTA header)
# chromosome: chr1

# Run the annotation stage when feature files are given
annotate: true
'''
