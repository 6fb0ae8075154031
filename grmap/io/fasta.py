"""
FASTA loading for references and marker sets.

Plain and gzip-compressed files are both accepted; compression is chosen
from the ``.gz`` suffix.

Author: Abhinav Mishra
"""

import gzip
import logging
import re
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

from ..features.loaders import normalize_chromosome
from ..models import Marker

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Header words read as chromosome names: numbered, X, Y, M or MT, with or without 'chr'
CHROMOSOME_PATTERN = re.compile(r'^(?:chr)?(?:\d{1,2}|X|Y|M|MT)$', re.IGNORECASE)


def open_text(path: PathLike) -> TextIO:
    """Open a possibly gzipped text file for reading."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    open_func = gzip.open if str(path).endswith('.gz') else open
    return open_func(path, 'rt')


def chromosome_from_header(header: str) -> Optional[str]:
    """
    Chromosome named by a FASTA header line, in 'chrN' form.

    Only the first word is considered, and only if it looks like a
    chromosome name ('1', 'chr7', 'X', 'MT'); otherwise None.
    """
    words = header.lstrip('>').split()
    if words and CHROMOSOME_PATTERN.match(words[0]):
        return normalize_chromosome(words[0])
    return None


def read_fasta(path: PathLike, uppercase: bool = False) -> Tuple[Optional[str], str]:
    """
    Read a FASTA file into one concatenated sequence.

    All sequence lines are joined regardless of how many records the file
    holds.

    Args:
        path: FASTA or FASTA.GZ file
        uppercase: Convert the sequence to upper case

    Returns:
        Tuple of (chromosome, sequence). The chromosome comes from the first
        header via chromosome_from_header, so it is None when the file has no
        header or the header does not name a chromosome.
    """
    header = None
    sequence = []

    with open_text(path) as f:
        for line in f:
            line = line.strip()
            if line.startswith('>'):
                if header is None:
                    header = line
                continue
            sequence.append(line)

    seq = ''.join(sequence)
    if uppercase:
        seq = seq.upper()

    chromosome = chromosome_from_header(header) if header else None
    if header and chromosome is None:
        logger.info(f"Header '{header}' does not name a chromosome")

    logger.info(f"Loaded reference {path}: {len(seq)} bp ({chromosome or 'chromosome unknown'})")
    return chromosome, seq


def read_markers(path: PathLike, max_markers: int = 0) -> List[Marker]:
    """
    Read up to max_markers marker sequences from a FASTA file.

    The header text after '>' is the marker id, with tabs replaced by spaces;
    a record without a header gets the id 'Unknown'. Records with no sequence
    are dropped.

    Args:
        path: FASTA or FASTA.GZ file of markers
        max_markers: Maximum markers to load; 0 loads all

    Returns:
        List of Marker objects in file order
    """
    markers = []
    marker_id = None
    sequence = []

    def flush():
        if sequence:
            markers.append(Marker(marker_id=marker_id or "Unknown", sequence=''.join(sequence)))

    with open_text(path) as f:
        for line in f:
            line = line.strip()
            if line.startswith('>'):
                flush()
                if max_markers > 0 and len(markers) >= max_markers:
                    break
                marker_id = line[1:].replace('\t', ' ')
                sequence = []
            elif line:
                sequence.append(line)
        else:
            flush()

    logger.info(f"Loaded {len(markers)} markers from {path}")
    return markers
