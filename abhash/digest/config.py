"""Digest configuration: a small value object plus YAML loading.

A config file looks like::

    segment_size: 4
    segment_count: 8
    mode: salted          # plain | salted | xxhash
    algorithm: sha256     # salted mode only
    secret_file: key.bin  # or `secret: "inline text"`

Relative ``secret_file`` paths resolve against the config file's directory.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml  # type: ignore

from . import DEFAULT_SEGMENT_COUNT, DEFAULT_SEGMENT_SIZE
from .folding import TokenFolder, available_modes, create_folder
from .partition import normalize_geometry

log = logging.getLogger(__name__)

_KNOWN_KEYS = {"segment_size", "segment_count", "mode", "algorithm", "secret", "secret_file"}


class ConfigError(ValueError):
    """Raise when a config file cannot be read or holds invalid values."""


@dataclass(frozen=True)
class DigestConfig:
    """Everything needed to reproduce a digest.

    ``secret=None`` defers to the process-wide default secret at the moment a
    folder is created.
    """

    segment_size: int = DEFAULT_SEGMENT_SIZE
    segment_count: int = DEFAULT_SEGMENT_COUNT
    mode: str = "plain"
    algorithm: str = "sha256"
    secret: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        # same case-folding as create_folder
        object.__setattr__(self, "mode", str(self.mode).lower())
        if self.mode not in available_modes():
            raise ValueError(f"Unsupported mode: {self.mode} (expected one of {available_modes()})")

    @property
    def geometry(self) -> Tuple[int, int]:
        """Normalized *(segment_size, segment_count)*."""
        return normalize_geometry(self.segment_size, self.segment_count)

    @property
    def digest_size(self) -> int:
        size, count = self.geometry
        return size * count

    def folder(self) -> TokenFolder:
        if self.mode == "salted":
            return create_folder(self.mode, self.secret, algorithm=self.algorithm)
        return create_folder(self.mode, self.secret)

    def with_overrides(self, **overrides: Any) -> "DigestConfig":
        """Copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view, secret excluded."""
        data = asdict(self)
        data.pop("secret")
        data["segment_size"], data["segment_count"] = self.geometry
        if self.mode != "salted":
            data.pop("algorithm")
        return data


def _read_secret_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read secret file {path}: {e}") from e


def load_config(path: Union[str, Path]) -> DigestConfig:
    """Load a :class:`DigestConfig` from a YAML file."""
    cfg_path = Path(path).expanduser()
    try:
        with cfg_path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {cfg_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{cfg_path}: expected a mapping at top level, got {type(raw).__name__}")

    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(f"{cfg_path}: unknown keys {sorted(unknown)}")
    if "secret" in raw and "secret_file" in raw:
        raise ConfigError(f"{cfg_path}: set either 'secret' or 'secret_file', not both")

    kwargs: Dict[str, Any] = {}
    for key in ("segment_size", "segment_count"):
        if key in raw:
            try:
                kwargs[key] = int(raw[key])
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{cfg_path}: {key} must be an integer, got {raw[key]!r}") from e
    for key in ("mode", "algorithm"):
        if key in raw:
            kwargs[key] = str(raw[key]).lower()

    if "secret" in raw:
        kwargs["secret"] = str(raw["secret"]).encode("utf-8")
    elif "secret_file" in raw:
        secret_path = Path(str(raw["secret_file"])).expanduser()
        if not secret_path.is_absolute():
            secret_path = cfg_path.parent / secret_path
        kwargs["secret"] = _read_secret_file(secret_path)

    try:
        config = DigestConfig(**kwargs)
        config.folder()  # surfaces unknown hash algorithms now rather than mid-run
    except ValueError as e:
        raise ConfigError(f"{cfg_path}: {e}") from e

    log.info("Loaded config from %s: %s", cfg_path, config.to_dict())
    return config
