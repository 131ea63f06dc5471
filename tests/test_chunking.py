"""Tests for byte-range arithmetic."""

import pytest

from common.chunking import (
    EMPTY_CONTENT_RANGE,
    content_range,
    plan_chunks,
    progress_percentage,
    validate_chunk_size
)
from common.constants import ALIGNMENT_UNIT_BYTES, UPLOAD_CHUNK_SIZE_BYTES
from common.types import ChunkDescriptor

UNIT = ALIGNMENT_UNIT_BYTES


def test_default_chunk_size_is_aligned():
    """The default 40 MiB chunk is 128 alignment units."""
    assert UPLOAD_CHUNK_SIZE_BYTES == 40 * 1024 * 1024
    assert UPLOAD_CHUNK_SIZE_BYTES % UNIT == 0
    assert validate_chunk_size(UPLOAD_CHUNK_SIZE_BYTES) == UPLOAD_CHUNK_SIZE_BYTES


@pytest.mark.parametrize('size', [0, -UNIT, UNIT + 1, 1000])
def test_validate_chunk_size_rejects_misaligned(size):
    """Non-positive or non-320KiB-multiple sizes are rejected."""
    with pytest.raises(ValueError):
        validate_chunk_size(size)


@pytest.mark.parametrize('total_size', [1, UNIT - 1, UNIT, 2 * UNIT, 5 * UNIT + 17, 1_000_003])
def test_plan_chunks_partitions_file(total_size):
    """Descriptors cover [0, N) with no gaps or overlaps, strictly increasing."""
    chunk_size = 2 * UNIT
    chunks = plan_chunks(total_size, chunk_size)

    assert chunks[0].start_offset == 0
    assert chunks[-1].end_offset == total_size
    for previous, current in zip(chunks, chunks[1:]):
        assert current.start_offset == previous.end_offset
        assert current.start_offset > previous.start_offset
    assert [c.sequence_index for c in chunks] == list(range(len(chunks)))
    assert all(c.size == chunk_size for c in chunks[:-1])
    assert 0 < chunks[-1].size <= chunk_size
    assert sum(c.size for c in chunks) == total_size


def test_plan_chunks_empty_file_has_no_chunks():
    """A zero-length file produces no descriptors."""
    assert plan_chunks(0, UNIT) == []


def test_plan_chunks_negative_size():
    """Negative sizes are rejected."""
    with pytest.raises(ValueError):
        plan_chunks(-1, UNIT)


def test_content_range_uses_inclusive_end():
    """Content-Range ends at end_offset - 1."""
    chunk = ChunkDescriptor(start_offset=UNIT, end_offset=2 * UNIT, sequence_index=1)
    assert content_range(chunk, 5 * UNIT) == f"bytes {UNIT}-{2 * UNIT - 1}/{5 * UNIT}"


def test_empty_content_range():
    """Zero-length files describe the empty range."""
    assert EMPTY_CONTENT_RANGE == "bytes 0-0/0"


def test_progress_percentage_floors():
    """Percentages are floored, and an empty file counts as complete."""
    assert progress_percentage(0, 3) == 0
    assert progress_percentage(1, 3) == 33
    assert progress_percentage(2, 3) == 66
    assert progress_percentage(3, 3) == 100
    assert progress_percentage(0, 0) == 100
