"""Digest manifests for ABHash.

A manifest is a JSON Lines file with one record per digested file:

    {"path": "data/a.bin", "digest": "9c3f...", "segment_size": 4,
     "segment_count": 8, "mode": "plain", "size_bytes": 1234}

Manifests ending in ``.gz`` are gzip-compressed.  The secret is never
written; verifying a salted manifest needs the same secret again.
"""
from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Union

from .assemble import Digester
from .config import DigestConfig


class ManifestError(ValueError):
    """Raise when a manifest line cannot be parsed into a digest record."""


# -----------------------------------------------------------
# Input collection
# -----------------------------------------------------------


def collect_files(paths: Union[str, Path, List[Union[str, Path]]], recursive: bool = True) -> List[Path]:
    """Expand files, directories and glob patterns into a sorted, de-duplicated file list."""
    if isinstance(paths, (str, Path)):
        paths = [paths]

    all_files: List[Path] = []
    for path in paths:
        path = Path(path)

        if '*' in str(path) or '?' in str(path):
            # Path.glob only takes relative patterns; glob from the anchor for absolute ones
            if path.is_absolute():
                all_files.extend(Path(path.anchor).glob(str(path.relative_to(path.anchor))))
            else:
                all_files.extend(Path('.').glob(str(path)))
        elif path.is_file():
            all_files.append(path)
        elif path.is_dir():
            all_files.extend(path.rglob('*') if recursive else path.glob('*'))

    return sorted({f for f in all_files if f.is_file()})


# -----------------------------------------------------------
# Records
# -----------------------------------------------------------


def create_record(path: Union[str, Path], digest: bytes, config: DigestConfig, size_bytes: int, **metadata) -> Dict[str, Any]:
    """
    Create a standardized manifest record.

    Args:
        path: File the digest was computed from
        digest: Raw digest bytes
        config: Configuration used to compute *digest*
        size_bytes: Input length in bytes
        **metadata: Additional fields stored as is
    """
    record = {'path': str(path), 'digest': bytes(digest).hex()}
    record.update(config.to_dict())
    record['size_bytes'] = size_bytes
    record.update(metadata)
    return record


def record_config(record: Dict[str, Any], secret: Optional[bytes] = None) -> DigestConfig:
    """Rebuild the :class:`DigestConfig` a record was produced with."""
    kwargs = {
        'segment_size': int(record['segment_size']),
        'segment_count': int(record['segment_count']),
        'mode': record.get('mode', 'plain'),
        'secret': secret,
    }
    if 'algorithm' in record and kwargs['mode'] == 'salted':
        kwargs['algorithm'] = record['algorithm']
    return DigestConfig(**kwargs)


# -----------------------------------------------------------
# Writer / reader
# -----------------------------------------------------------


class ManifestWriter:
    """Writer for JSONL digest manifests."""

    def __init__(self, output_path: Union[str, Path], compress: Optional[bool] = None):
        self.output_path = Path(output_path)
        self.compress = self.output_path.suffix == '.gz' if compress is None else compress
        self.total_written = 0
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if self.compress:
            self.current_file = gzip.open(self.output_path, 'wt', encoding='utf-8')
        else:
            self.current_file = open(self.output_path, 'w', encoding='utf-8')

    def write(self, record: Dict[str, Any]) -> None:
        """Write a single record as JSON line."""
        json.dump(record, self.current_file, ensure_ascii=False)
        self.current_file.write('\n')
        self.total_written += 1

    def finalize(self) -> Dict[str, Any]:
        """Close the file and return stats."""
        if self.current_file:
            self.current_file.close()
            self.current_file = None
        return {
            'format': 'jsonl',
            'path': str(self.output_path),
            'total_records': self.total_written,
            'compressed': self.compress,
        }

    def __enter__(self) -> "ManifestWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.finalize()


_REQUIRED_FIELDS = ('path', 'digest', 'segment_size', 'segment_count')


def read_manifest(path: Union[str, Path]) -> Generator[Dict[str, Any], None, None]:
    """Yield records from a (optionally gzipped) JSONL manifest."""
    path = Path(path)
    opener = gzip.open if path.suffix == '.gz' else open
    with opener(path, 'rt', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise ManifestError(f"{path}:{line_num}: invalid JSON ({e})") from e
            if not isinstance(record, dict):
                raise ManifestError(f"{path}:{line_num}: expected an object")
            missing = [k for k in _REQUIRED_FIELDS if k not in record]
            if missing:
                raise ManifestError(f"{path}:{line_num}: missing fields {missing}")
            try:
                bytes.fromhex(record['digest'])
            except (TypeError, ValueError) as e:
                raise ManifestError(f"{path}:{line_num}: digest is not hex") from e
            yield record


# -----------------------------------------------------------
# Verification
# -----------------------------------------------------------


def verify_record(record: Dict[str, Any], secret: Optional[bytes] = None, base_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Re-digest the file behind *record* and report which tokens changed.

    Returns a dict with ``path``, ``status`` ('ok', 'changed' or 'missing')
    and ``changed_tokens``.
    """
    path = Path(record['path'])
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path

    if not path.is_file():
        return {'path': record['path'], 'status': 'missing', 'changed_tokens': []}

    digester = Digester(record_config(record, secret))
    expected = bytes.fromhex(record['digest'])
    actual = digester.digest(path.read_bytes())
    changed = digester.changed_tokens(expected, actual)

    return {
        'path': record['path'],
        'status': 'ok' if expected == actual else 'changed',
        'changed_tokens': changed,
    }
