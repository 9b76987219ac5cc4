"""Digest assembly: partition, fold every segment, concatenate the tokens."""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from .compare import diff_tokens, split_tokens
from .config import DigestConfig
from .folding import TokenFolder, create_folder
from .partition import normalize_geometry, partition


def assemble(tokens: Iterable[bytes]) -> bytes:
    """Concatenate *tokens* in order."""
    return b"".join(bytes(t) for t in tokens)


def compute_digest(
    data: bytes,
    segment_size: int = 2,
    segment_count: int = 2,
    mode: Union[str, TokenFolder] = "plain",
    secret: Optional[bytes] = None,
    **kwargs,
) -> bytes:
    """Return the ``segment_count * segment_size`` byte digest of *data*.

    Args:
        data: Input bytes (any buffer object)
        segment_size: Bytes per token; values <= 0 fall back to 2
        segment_count: Number of segments/tokens; values <= 0 fall back to 2
        mode: 'plain', 'salted', 'xxhash', or a TokenFolder instance
        secret: Salt for the salted modes (None = process-wide default)
        **kwargs: Strategy options, e.g. ``algorithm='sha3_256'``
    """
    segment_size, segment_count = normalize_geometry(segment_size, segment_count)
    folder = create_folder(mode, secret, **kwargs)
    return assemble(folder.fold(seg, segment_size) for seg in partition(data, segment_size, segment_count))


class Digester:
    """Digesting context that owns its configuration and secret.

    Two digests are only comparable when produced with the same geometry,
    mode and secret; keeping them together on one object makes that hard to
    get wrong::

        d = Digester(DigestConfig(segment_size=4, segment_count=8, mode="salted", secret=key))
        changed = d.changed_tokens(d.digest(old), d.digest(new))
    """

    def __init__(self, config: Optional[DigestConfig] = None, **overrides) -> None:
        config = config or DigestConfig()
        self.config = config.with_overrides(**overrides)
        self.segment_size, self.segment_count = self.config.geometry
        self.folder = self.config.folder()

    @property
    def digest_size(self) -> int:
        return self.segment_size * self.segment_count

    def segments(self, data: bytes) -> List[bytes]:
        return partition(data, self.segment_size, self.segment_count)

    def tokens(self, data: bytes) -> List[bytes]:
        """Per-segment tokens of *data*, in segment order."""
        return [self.folder.fold(seg, self.segment_size) for seg in self.segments(data)]

    def digest(self, data: bytes) -> bytes:
        return assemble(self.tokens(data))

    def hexdigest(self, data: bytes) -> str:
        return self.digest(data).hex()

    def token_slices(self, digest: bytes) -> List[bytes]:
        """Split a digest produced by this context back into its tokens."""
        return split_tokens(digest, self.segment_size)

    def changed_tokens(self, digest_a: bytes, digest_b: bytes) -> List[int]:
        """Indices of tokens that differ between two digests of this context."""
        return diff_tokens(digest_a, digest_b, self.segment_size)

    def __repr__(self) -> str:
        return (
            f"Digester(segment_size={self.segment_size}, segment_count={self.segment_count}, "
            f"folder={self.folder!r})"
        )
