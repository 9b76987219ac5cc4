"""Split an input buffer into a fixed number of contiguous segments."""
from __future__ import annotations

import logging
from typing import List, Tuple

from . import DEFAULT_SEGMENT_COUNT, DEFAULT_SEGMENT_SIZE

log = logging.getLogger(__name__)


def normalize_geometry(segment_size: int, segment_count: int) -> Tuple[int, int]:
    """Return *(segment_size, segment_count)* with non-positive values replaced by 2.

    Substitutions are logged, never raised: callers rely on the fallback.
    """
    if segment_size <= 0:
        log.warning("segment_size=%d is not positive; using %d", segment_size, DEFAULT_SEGMENT_SIZE)
        segment_size = DEFAULT_SEGMENT_SIZE
    if segment_count <= 0:
        log.warning("segment_count=%d is not positive; using %d", segment_count, DEFAULT_SEGMENT_COUNT)
        segment_count = DEFAULT_SEGMENT_COUNT
    return segment_size, segment_count


def partition(data: bytes, segment_size: int, segment_count: int) -> List[bytes]:
    """Split *data* into exactly *segment_count* segments.

    The first ``segment_count - 1`` segments are ``segment_size`` bytes wide,
    clamped to the end of *data* (so they may be short or empty).  The last
    segment takes every remaining byte and may therefore be longer than
    ``segment_size``.  When nothing remains for it, it is ``segment_size``
    zero bytes instead.
    """
    segment_size, segment_count = normalize_geometry(segment_size, segment_count)
    data = bytes(data)
    n = len(data)

    parts: List[bytes] = []
    for i in range(segment_count - 1):
        start = min(i * segment_size, n)
        end = min(start + segment_size, n)
        parts.append(data[start:end])

    tail = (segment_count - 1) * segment_size
    if tail < n:
        parts.append(data[tail:])
    else:
        parts.append(bytes(segment_size))
    return parts
