"""ABHash - segment-local digests for coarse change localization.

The input is cut into a fixed number of segments and each segment is folded
into a small token on its own, so editing bytes inside one segment only ever
changes that segment's token:
- Plain XOR-fold tokens (fast, reversible)
- Salted digest tokens (SHA-256 or any hashlib algorithm, plus a secret)
- Byte- and token-level digest comparison
- JSONL manifests for partial-integrity checks

Quick Start:
    # CLI usage
    abhash digest data/ --segment-size 4 --segment-count 16 -o manifest.jsonl
    abhash verify manifest.jsonl

    # Python API
    from abhash import compute_digest, diff_positions
    a = compute_digest(b"abcdefghij", 3, 3)
    b = compute_digest(b"abcdxfghij", 3, 3)
    diff_positions(a, b)  # -> byte indices inside the second token
"""

from .digest import __version__

# Re-export main API
from .digest import (
    DEFAULT_SEGMENT_SIZE,
    DEFAULT_SEGMENT_COUNT,
    partition,
    fold_plain,
    fold_salted,
    fold_xxhash,
    create_folder,
    TokenFolder,
    assemble,
    compute_digest,
    Digester,
    set_secret,
    get_secret,
    diff_positions,
    diff_tokens,
    split_tokens,
    DigestConfig,
    ConfigError,
    load_config,
)

__all__ = [
    "__version__",
    "DEFAULT_SEGMENT_SIZE",
    "DEFAULT_SEGMENT_COUNT",
    "partition",
    "fold_plain",
    "fold_salted",
    "fold_xxhash",
    "create_folder",
    "TokenFolder",
    "assemble",
    "compute_digest",
    "Digester",
    "set_secret",
    "get_secret",
    "diff_positions",
    "diff_tokens",
    "split_tokens",
    "DigestConfig",
    "ConfigError",
    "load_config",
]
