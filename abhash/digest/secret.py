"""Process-wide default secret for the salted folding modes.

Prefer passing ``secret=`` explicitly or owning one through a
:class:`abhash.digest.assemble.Digester`; this default exists for callers
written against the original ``set_secret`` API.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

log = logging.getLogger(__name__)

_SECRET_LOCK = threading.RLock()
_SECRET: bytes = b""


def set_secret(secret: Optional[bytes]) -> None:
    """Replace the default secret. ``None`` resets it to empty."""
    global _SECRET
    value = b"" if secret is None else bytes(secret)
    with _SECRET_LOCK:
        _SECRET = value
    log.debug("Default secret set (%d bytes).", len(value))


def get_secret() -> bytes:
    """Return a snapshot of the default secret."""
    with _SECRET_LOCK:
        return _SECRET
