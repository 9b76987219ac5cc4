"""Token folding strategies for ABHash.

Every strategy reduces one segment to a token of exactly ``size`` bytes and
looks at nothing but that segment (plus, for the salted strategies, a
secret).  That is what keeps a change in one segment from leaking into the
tokens of its neighbours.
"""
from __future__ import annotations

import hashlib
from typing import Dict, Optional, Type, Union

import numpy as np
import xxhash

from .partition import normalize_geometry
from .secret import get_secret

# -----------------------------------------------------------
# XOR-fold primitive
# -----------------------------------------------------------


def xor_fold(data: bytes, size: int) -> bytes:
    """XOR byte *j* of *data* into ``token[j % size]`` and invert the result.

    The buffer is zero-padded to a multiple of *size* and reduced column-wise,
    which is the same as the byte-at-a-time fold since XOR with zero is a
    no-op.
    """
    size = normalize_geometry(size, 1)[0]
    rows = max(1, -(-len(data) // size))
    padded = np.zeros(rows * size, dtype=np.uint8)
    if len(data):
        padded[: len(data)] = np.frombuffer(bytes(data), dtype=np.uint8)
    folded = np.bitwise_xor.reduce(padded.reshape(rows, size), axis=0)
    return np.invert(folded).tobytes()


# -----------------------------------------------------------
# Strategies
# -----------------------------------------------------------


class TokenFolder:
    """Base class for token folding strategies."""

    name = "base"

    def fold(self, segment: bytes, size: int) -> bytes:
        """Return the *size*-byte token for *segment*."""
        raise NotImplementedError

    def describe(self) -> Dict[str, str]:
        """Parameters worth recording next to a digest (never the secret)."""
        return {"mode": self.name}

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PlainFolder(TokenFolder):
    """Direct XOR-fold of the segment bytes. Reversible, not collision resistant."""

    name = "plain"

    def fold(self, segment: bytes, size: int) -> bytes:
        return xor_fold(segment, size)


class SaltedDigestFolder(TokenFolder):
    """Fold a cryptographic digest of ``segment + secret`` instead of the raw bytes.

    Parameters
    ----------
    secret : bytes | None
        Salt appended to every segment. ``None`` snapshots the process-wide
        default from :func:`abhash.digest.secret.get_secret`.
    algorithm : str
        Any name accepted by :func:`hashlib.new` (default ``"sha256"``).
    """

    name = "salted"

    def __init__(self, secret: Optional[bytes] = None, algorithm: str = "sha256") -> None:
        try:
            hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Unsupported digest algorithm: {algorithm!r}") from e
        self.secret = get_secret() if secret is None else bytes(secret)
        self.algorithm = algorithm

    def fold(self, segment: bytes, size: int) -> bytes:
        h = hashlib.new(self.algorithm)
        h.update(bytes(segment))
        h.update(self.secret)
        # shake_* digests need an explicit length
        if self.algorithm.startswith("shake_"):
            return xor_fold(h.digest(32), size)  # type: ignore[call-arg]
        return xor_fold(h.digest(), size)

    def describe(self) -> Dict[str, str]:
        return {"mode": self.name, "algorithm": self.algorithm}

    def __repr__(self) -> str:
        return f"SaltedDigestFolder(algorithm={self.algorithm!r})"


class XXHashFolder(TokenFolder):
    """Fold a 128-bit XXH3 digest of ``segment + secret``. Fast, not cryptographic."""

    name = "xxhash"

    def __init__(self, secret: Optional[bytes] = None) -> None:
        self.secret = get_secret() if secret is None else bytes(secret)

    def fold(self, segment: bytes, size: int) -> bytes:
        return xor_fold(xxhash.xxh3_128(bytes(segment) + self.secret).digest(), size)

    def describe(self) -> Dict[str, str]:
        return {"mode": self.name, "algorithm": "xxh3_128"}


_FOLDERS: Dict[str, Type[TokenFolder]] = {
    PlainFolder.name: PlainFolder,
    SaltedDigestFolder.name: SaltedDigestFolder,
    XXHashFolder.name: XXHashFolder,
}


def create_folder(mode: Union[str, TokenFolder] = "plain", secret: Optional[bytes] = None, **kwargs) -> TokenFolder:
    """
    Create the folding strategy for *mode*.

    Args:
        mode: 'plain', 'salted', 'xxhash', or an existing TokenFolder (returned as is)
        secret: Salt for the salted modes (None = process-wide default)
        **kwargs: Strategy-specific options, e.g. ``algorithm`` for 'salted'
    """
    if isinstance(mode, TokenFolder):
        return mode

    key = str(mode).lower()
    if key == "plain":
        return PlainFolder()
    elif key == "salted":
        return SaltedDigestFolder(secret, **kwargs)
    elif key == "xxhash":
        return XXHashFolder(secret)
    else:
        raise ValueError(f"Unsupported mode: {mode} (expected one of {sorted(_FOLDERS)})")


# -----------------------------------------------------------
# Function-style helpers
# -----------------------------------------------------------


def fold_plain(segment: bytes, size: int) -> bytes:
    """Plain-mode token: XOR-fold *segment* into *size* bytes, then invert."""
    return xor_fold(segment, size)


def fold_salted(segment: bytes, size: int, secret: Optional[bytes] = None, algorithm: str = "sha256") -> bytes:
    """Salted-mode token: XOR-fold ``digest(segment + secret)`` into *size* bytes, then invert."""
    return SaltedDigestFolder(secret, algorithm).fold(segment, size)


def fold_xxhash(segment: bytes, size: int, secret: Optional[bytes] = None) -> bytes:
    return XXHashFolder(secret).fold(segment, size)


def available_modes() -> list[str]:
    """Names accepted by :func:`create_folder`."""
    return sorted(_FOLDERS)
