"""
Loaders that build feature indexes from tokenised annotation rows.

Each loader takes an iterable of rows (lists of column strings) and is
permissive: comment lines, short rows and rows with unparseable coordinates
are skipped and counted, never raised.

Expected layouts:

- Genes: GFF3, 9 columns, type in column 3, ``ID=``, ``biotype=`` and
  ``Name=`` tags in column 9.
- TSS: header row, then gene_id, transcript_id, tss_start, tss_end,
  chromosome, gene_type, synonyms (last two optional).
- CpG: UCSC cpgIslandExt, 11 columns (bin, chrom, start, end, name, length,
  cpgNum, gcNum, perCpg, perGc, obsExp).
- Repeats: chromosome, start, end, name, class, strand.

Author: Abhinav Mishra
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from .index import FeatureIndex
from ..models import CpGIsland, GeneFeature, RepeatElement, TSSRecord

logger = logging.getLogger(__name__)

GENE_TYPES = {'gene', 'ncRNA_gene', 'pseudogene'}

ID_PATTERN = re.compile(r'(?:^|;)\s*ID=([^;]+)')
BIOTYPE_PATTERN = re.compile(r'(?:^|;)\s*biotype=([^;]+)')
NAME_PATTERN = re.compile(r'(?:^|;)\s*Name=([^;]+)')

# RepeatMasker writes 'C' (complement) for the minus strand
STRAND_ALIASES = {'+': '+', '-': '-', 'C': '-'}


def normalize_chromosome(name: str) -> str:
    """Return chromosome name in 'chrN' form ('1' -> 'chr1', 'chrX' unchanged)."""
    name = name.strip()
    if not name or name.lower().startswith('chr'):
        return name
    return f"chr{name}"


def _clean(row: Sequence[str]) -> List[str]:
    return [col.strip() for col in row]


def _is_comment(row: Sequence[str]) -> bool:
    return not row or not row[0] or row[0].startswith('#')


def _attribute(pattern: re.Pattern, attributes: str) -> Optional[str]:
    found = pattern.search(attributes)
    return found.group(1).strip() if found else None


def _log_counts(kind: str, loaded: int, skipped: int) -> None:
    logger.info(f"Loaded {loaded} {kind} records")
    if skipped:
        logger.warning(f"Skipped {skipped} malformed {kind} rows")


def load_genes(rows: Iterable[Sequence[str]]) -> FeatureIndex[GeneFeature]:
    """Build the gene index from GFF3 rows."""
    index = FeatureIndex("genes")
    loaded = skipped = 0

    for row in rows:
        if _is_comment(row):
            continue
        fields = _clean(row)
        if len(fields) < 9:
            skipped += 1
            continue
        if fields[2] not in GENE_TYPES:
            continue

        try:
            start = int(fields[3])
            end = int(fields[4])
        except ValueError:
            skipped += 1
            continue

        attributes = fields[8]
        index.add(GeneFeature(
            chromosome=normalize_chromosome(fields[0]),
            start=start,
            end=end,
            strand=fields[6],
            gene_id=_attribute(ID_PATTERN, attributes) or "Unknown",
            gene_type=_attribute(BIOTYPE_PATTERN, attributes) or "Unknown",
            synonyms=_attribute(NAME_PATTERN, attributes) or "N/A",
        ))
        loaded += 1

    _log_counts("gene", loaded, skipped)
    return index.finalize()


def load_tss(rows: Iterable[Sequence[str]], has_header: bool = True) -> FeatureIndex[TSSRecord]:
    """Build the TSS index; the first row is a header unless has_header is False."""
    index = FeatureIndex("tss")
    loaded = skipped = 0

    rows = iter(rows)
    if has_header:
        next(rows, None)

    for row in rows:
        if _is_comment(row):
            continue
        fields = _clean(row)
        if len(fields) < 5:
            skipped += 1
            continue

        try:
            start = int(fields[2])
        except ValueError:
            skipped += 1
            continue
        end = int(fields[3]) if fields[3].isdigit() else None

        index.add(TSSRecord(
            chromosome=normalize_chromosome(fields[4]),
            start=start,
            end=end,
            gene_id=fields[0],
            transcript_id=fields[1],
            gene_type=fields[5] if len(fields) > 5 and fields[5] else "N/A",
            synonyms=fields[6] if len(fields) > 6 and fields[6] else "N/A",
        ))
        loaded += 1

    _log_counts("TSS", loaded, skipped)
    return index.finalize()


def load_cpg(rows: Iterable[Sequence[str]]) -> FeatureIndex[CpGIsland]:
    """Build the CpG island index from UCSC cpgIslandExt rows."""
    index = FeatureIndex("cpg")
    loaded = skipped = 0

    for row in rows:
        if _is_comment(row):
            continue
        fields = _clean(row)
        if len(fields) < 11:
            skipped += 1
            continue

        try:
            island = CpGIsland(
                chromosome=normalize_chromosome(fields[1]),
                start=int(fields[2]),
                end=int(fields[3]),
                gc_content=float(fields[9]),
                obs_exp_ratio=float(fields[10]),
            )
        except ValueError:
            skipped += 1
            continue

        index.add(island)
        loaded += 1

    _log_counts("CpG island", loaded, skipped)
    return index.finalize()


def load_repeats(rows: Iterable[Sequence[str]]) -> FeatureIndex[RepeatElement]:
    """Build the repeat index from 6-column RepeatMasker rows."""
    index = FeatureIndex("repeats")
    loaded = skipped = 0

    for row in rows:
        if _is_comment(row):
            continue
        fields = _clean(row)
        if len(fields) < 6:
            skipped += 1
            continue

        strand = STRAND_ALIASES.get(fields[5])
        if strand is None:
            skipped += 1
            continue

        try:
            start = int(fields[1])
            end = int(fields[2])
        except ValueError:
            skipped += 1
            continue

        index.add(RepeatElement(
            chromosome=normalize_chromosome(fields[0]),
            start=start,
            end=end,
            name=fields[3],
            repeat_class=fields[4],
            strand=strand,
        ))
        loaded += 1

    _log_counts("repeat", loaded, skipped)
    return index.finalize()
