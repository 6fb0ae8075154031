"""
Chunked process-pool execution shared by the matcher and annotator.

Work is split into contiguous chunks, one per worker. Each chunk is a tuple
whose last element is the chunk index; results are merged in ascending chunk
index, so output order never depends on which worker finishes first.

Author: Abhinav Mishra
"""

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Dict, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def default_workers() -> int:
    """Number of worker processes to use when none is configured."""
    return os.cpu_count() or 1


def split_into_chunks(items: Sequence[T], n_chunks: int) -> List[List[T]]:
    """
    Split items into at most n_chunks contiguous, near-equal chunks.

    Chunk sizes differ by at most one; the first ``len(items) % n_chunks``
    chunks carry the extra item. Empty chunks are not returned.
    """
    n_chunks = max(1, n_chunks)
    base, remainder = divmod(len(items), n_chunks)

    chunks = []
    start = 0
    for i in range(n_chunks):
        size = base + (1 if i < remainder else 0)
        if size <= 0:
            break
        chunks.append(list(items[start:start + size]))
        start += size

    return chunks


def run_chunks(
    worker: Callable[[tuple], List],
    chunks: List[tuple],
    n_workers: int,
    label: str = "work",
) -> List:
    """
    Run worker over chunk tuples and concatenate results in chunk order.

    A single worker (or a single chunk) runs in-process. Any chunk that
    raises aborts the run: the error is logged and re-raised.

    Args:
        worker: Module-level function taking one chunk tuple
        chunks: Chunk tuples, each ending with its chunk index
        n_workers: Maximum number of worker processes
        label: Name used in log messages

    Returns:
        Flat list of worker results
    """
    if n_workers <= 1 or len(chunks) <= 1:
        results = []
        for chunk in chunks:
            results.extend(worker(chunk))
        return results

    chunk_results: Dict[int, List] = {}

    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        future_to_chunk = {
            executor.submit(worker, chunk): chunk[-1]
            for chunk in chunks
        }

        for future in as_completed(future_to_chunk):
            chunk_idx = future_to_chunk[future]
            try:
                chunk_results[chunk_idx] = future.result()
            except Exception as e:
                logger.error(f"{label} chunk {chunk_idx} failed: {e}")
                raise
            logger.debug(
                f"Completed {label} chunk {chunk_idx + 1}/{len(chunks)} "
                f"({len(chunk_results[chunk_idx])} results)"
            )

    results = []
    for chunk_idx in sorted(chunk_results):
        results.extend(chunk_results[chunk_idx])
    return results
