"""ABHash digest package.

Core public API lives here so external users can::

    import abhash as ab
    ab.compute_digest(b"payload", segment_size=4, segment_count=3)
    ab.diff_positions(old, new)

Building blocks are importable individually:
    from abhash.digest.partition import partition
    from abhash.digest.folding import fold_plain, fold_salted, create_folder
    from abhash.digest.assemble import assemble, Digester
    from abhash.digest.compare import diff_positions, diff_tokens
"""

from importlib.metadata import version as _pkg_version


# Semantic version of the installed package
try:
    __version__: str = _pkg_version("abhash")
except Exception:  # pragma: no cover – local dev path
    __version__ = "0.3.0"


# Fallback used whenever a segment size or count is not positive
DEFAULT_SEGMENT_SIZE: int = 2
DEFAULT_SEGMENT_COUNT: int = 2

from .partition import partition, normalize_geometry
from .folding import (
    TokenFolder,
    PlainFolder,
    SaltedDigestFolder,
    XXHashFolder,
    create_folder,
    fold_plain,
    fold_salted,
    fold_xxhash,
    xor_fold,
)
from .secret import set_secret, get_secret
from .assemble import assemble, compute_digest, Digester
from .compare import diff_positions, diff_tokens, split_tokens
from .config import DigestConfig, ConfigError, load_config

__all__ = [
    "__version__",
    "DEFAULT_SEGMENT_SIZE",
    "DEFAULT_SEGMENT_COUNT",
    "partition",
    "normalize_geometry",
    "TokenFolder",
    "PlainFolder",
    "SaltedDigestFolder",
    "XXHashFolder",
    "create_folder",
    "fold_plain",
    "fold_salted",
    "fold_xxhash",
    "xor_fold",
    "set_secret",
    "get_secret",
    "assemble",
    "compute_digest",
    "Digester",
    "diff_positions",
    "diff_tokens",
    "split_tokens",
    "DigestConfig",
    "ConfigError",
    "load_config",
]
