"""
Tab-separated output for match and annotation tables.

Match files may start with ``# key: value`` run-information lines before
the column header; readers skip them.

Author: Abhinav Mishra
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .fasta import PathLike, open_text
from ..models import (
    ANNOTATION_COLUMNS,
    DEFAULT_CHROMOSOME,
    MATCH_COLUMNS,
    AnnotatedMatch,
    Match,
    Strand,
)

logger = logging.getLogger(__name__)

# Tabs or backslashes inside a field are written backslash-escaped
ESCAPE_CHAR = '\\'


def _write_table(
    rows: List[list],
    columns: List[str],
    output_path: Path,
    run_info: Optional[Dict[str, object]] = None,
) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows, columns=columns)
    with open(output_path, 'w', newline='') as f:
        for key, value in (run_info or {}).items():
            f.write(f"# {key}: {value}\n")
        df.to_csv(f, sep='\t', index=False, quoting=csv.QUOTE_NONE, escapechar=ESCAPE_CHAR)

    return output_path


def write_matches_tsv(
    matches: Sequence[Match],
    output_path: PathLike,
    run_info: Optional[Dict[str, object]] = None,
) -> Path:
    """
    Write match records to TSV.

    Args:
        matches: Match records in output order
        output_path: Path for output TSV
        run_info: Optional key/value pairs written as leading '#' lines

    Returns:
        Path to written file
    """
    path = _write_table([m.to_row() for m in matches], MATCH_COLUMNS, output_path, run_info)
    logger.info(f"Wrote {len(matches)} matches to {path}")
    return path


def write_annotations_tsv(
    annotated: Sequence[AnnotatedMatch],
    output_path: PathLike,
) -> Path:
    """Write annotated matches to TSV."""
    path = _write_table([a.to_row() for a in annotated], ANNOTATION_COLUMNS, output_path)
    logger.info(f"Wrote {len(annotated)} annotated matches to {path}")
    return path


def read_run_info(path: PathLike) -> Tuple[int, Dict[str, str]]:
    """
    Read the leading ``# key: value`` lines of a table.

    Returns:
        Tuple of (number of leading '#' lines, key/value mapping)
    """
    count = 0
    info = {}
    with open_text(path) as f:
        for line in f:
            if not line.startswith('#'):
                break
            count += 1
            key, sep, value = line[1:].partition(':')
            if sep:
                info[key.strip()] = value.strip()
    return count, info


def read_matches_tsv(
    path: PathLike,
    chromosome: Optional[str] = None,
) -> List[Match]:
    """
    Load match records written by write_matches_tsv.

    Rows with non-numeric coordinates or an unknown strand are skipped.
    The table has no chromosome column; every record gets ``chromosome``
    if given, else the ``# Chromosome:`` run-info value, else chr1.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Match file not found: {path}")

    n_comments, run_info = read_run_info(path)
    chromosome = chromosome or run_info.get('Chromosome') or DEFAULT_CHROMOSOME

    df = pd.read_csv(
        path,
        sep='\t',
        skiprows=n_comments,
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        escapechar=ESCAPE_CHAR,
        on_bad_lines='skip',
    ).fillna('')

    missing = [c for c in MATCH_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Match file {path} is missing columns: {', '.join(missing)}")

    matches = []
    skipped = 0
    for row in df.to_dict('records'):
        start, end = row['Start'], row['End']
        if not (start.isdigit() and end.isdigit()) or row['Strand'] not in ('F', 'R'):
            skipped += 1
            continue
        matches.append(Match(
            start=int(start),
            end=int(end),
            strand=Strand(row['Strand']),
            matched_sequence=row['MatchedSequence'],
            marker_id=row['MarkerID'],
            marker_length=int(row['Length']) if row['Length'].isdigit() else int(end) - int(start) + 1,
            occurrence_count=int(row['OccurrenceCount']) if row['OccurrenceCount'].isdigit() else 0,
            upstream=row['UpstreamContext'],
            downstream=row['DownstreamContext'],
            chromosome=chromosome,
        ))

    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows in {path}")
    logger.info(f"Loaded {len(matches)} matches from {path}")
    return matches
