"""Digest comparison helpers.

:func:`diff_positions` is the raw byte-level comparator: it reports every
mismatching byte index and knows nothing about token boundaries.
:func:`diff_tokens` lifts that to token indices for callers that know the
segment size.
"""
from __future__ import annotations

from typing import List

from .partition import normalize_geometry


def diff_positions(digest_a: bytes, digest_b: bytes) -> List[int]:
    """Ascending byte indices where *digest_a* and *digest_b* differ.

    Only the overlapping prefix is compared; a length mismatch is not an error.
    """
    return [i for i, (a, b) in enumerate(zip(bytes(digest_a), bytes(digest_b))) if a != b]


def diff_tokens(digest_a: bytes, digest_b: bytes, segment_size: int) -> List[int]:
    """Ascending token indices holding at least one differing byte."""
    segment_size = normalize_geometry(segment_size, 1)[0]
    changed: List[int] = []
    for pos in diff_positions(digest_a, digest_b):
        idx = pos // segment_size
        if not changed or changed[-1] != idx:
            changed.append(idx)
    return changed


def split_tokens(digest: bytes, segment_size: int) -> List[bytes]:
    """Split *digest* into consecutive *segment_size*-byte tokens.

    A trailing partial token (only possible for a truncated digest) is kept.
    """
    segment_size = normalize_geometry(segment_size, 1)[0]
    digest = bytes(digest)
    return [digest[i : i + segment_size] for i in range(0, len(digest), segment_size)]
