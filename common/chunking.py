"""Byte-range arithmetic for chunked uploads."""

from typing import List

from common.constants import ALIGNMENT_UNIT_BYTES
from common.types import ChunkDescriptor

EMPTY_CONTENT_RANGE = "bytes 0-0/0"


def validate_chunk_size(chunk_size: int) -> int:
    """
    Check that a chunk size is a positive multiple of the alignment unit.

    Args:
        chunk_size: Candidate chunk size in bytes

    Returns:
        The same chunk size

    Raises:
        ValueError: If the size is not positive or not 320 KiB aligned
    """
    if chunk_size <= 0 or chunk_size % ALIGNMENT_UNIT_BYTES != 0:
        raise ValueError(
            f"Chunk size must be a positive multiple of {ALIGNMENT_UNIT_BYTES} bytes, got {chunk_size}"
        )
    return chunk_size


def plan_chunks(total_size: int, chunk_size: int) -> List[ChunkDescriptor]:
    """
    Partition [0, total_size) into consecutive chunk descriptors.

    Every chunk is chunk_size bytes long except the last one, which holds
    the remainder. A zero-length file yields no chunks.

    Args:
        total_size: File size in bytes
        chunk_size: Aligned chunk size in bytes

    Returns:
        Descriptors in increasing offset order
    """
    if total_size < 0:
        raise ValueError(f"File size cannot be negative: {total_size}")
    validate_chunk_size(chunk_size)

    chunks = []
    for index, start in enumerate(range(0, total_size, chunk_size)):
        end = min(start + chunk_size, total_size)
        chunks.append(ChunkDescriptor(start_offset=start, end_offset=end, sequence_index=index))
    return chunks


def content_range(chunk: ChunkDescriptor, total_size: int) -> str:
    """Format the Content-Range header value for a chunk (inclusive end)."""
    return f"bytes {chunk.start_offset}-{chunk.end_offset - 1}/{total_size}"


def progress_percentage(confirmed_bytes: int, total_size: int) -> int:
    """Return floor(confirmed / total * 100); an empty file counts as complete."""
    if total_size <= 0:
        return 100
    return (confirmed_bytes * 100) // total_size
