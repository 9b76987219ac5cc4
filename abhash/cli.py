"""ABHash unified command-line interface.

Usage
-----
$ abhash digest data/ --segment-size 4 --segment-count 16 -o manifest.jsonl
$ abhash compare old.bin new.bin --config abhash.yml
$ abhash diff 9c9bfe01 9c9b0001 --segment-size 2
$ abhash verify manifest.jsonl

The *digest* command digests every file under the given paths and prints
``<hexdigest>  <path>`` lines, or writes a JSONL manifest with ``--output``.

The *compare* command digests two files with the same settings and reports
which tokens (and digest bytes) differ.

The *diff* command compares two hex digests directly.

The *verify* command re-digests the files listed in a manifest and reports
the ones whose tokens changed.  It exits with status 1 if any did.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .digest.assemble import Digester
from .digest.compare import diff_positions, diff_tokens
from .digest.config import ConfigError, DigestConfig, load_config
from .digest.folding import available_modes
from .digest.partition import normalize_geometry
from .digest.output import (
    ManifestWriter,
    collect_files,
    create_record,
    read_manifest,
    verify_record,
)

# -----------------------------------------------------------
# Helpers
# -----------------------------------------------------------


def _hex_digest(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex digest: {value!r}")


def _read_secret(path: Optional[Path]) -> Optional[bytes]:
    if path is None:
        return None
    try:
        return path.expanduser().read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read secret file {path}: {e}") from e


def _build_config(args: argparse.Namespace) -> DigestConfig:
    """Config file first, then command-line overrides."""
    config = load_config(args.config) if args.config else DigestConfig()
    return config.with_overrides(
        segment_size=args.segment_size,
        segment_count=args.segment_count,
        mode=args.mode,
        algorithm=args.algorithm,
        secret=_read_secret(args.secret_file),
    )


def _print_token_report(changed: List[int], positions: List[int], total_tokens: int) -> None:
    print(f"Tokens changed : {len(changed)}/{total_tokens} {changed}")
    print(f"Bytes changed  : {len(positions)} {positions}")


# -----------------------------------------------------------
# Commands
# -----------------------------------------------------------


def _cmd_digest(args: argparse.Namespace) -> int:
    config = _build_config(args)
    digester = Digester(config)

    files = collect_files(args.input, recursive=not args.no_recursive)
    if not files:
        print("Warning: No files found", file=sys.stderr)
        return 1

    writer = ManifestWriter(args.output) if args.output else None
    try:
        for fp in tqdm(files, desc="Digesting files", disable=args.quiet or writer is None):
            data = fp.read_bytes()
            digest = digester.digest(data)
            if writer is not None:
                writer.write(create_record(fp, digest, config, len(data)))
            else:
                print(f"{digest.hex()}  {fp}")
    finally:
        if writer is not None:
            stats = writer.finalize()

    if writer is not None and not args.quiet:
        print(f"💾 {stats['total_records']} digests written to {stats['path']}")
    return 0


def _cmd_compare(args: argparse.Namespace) -> int:
    digester = Digester(_build_config(args))
    old = digester.digest(args.old.read_bytes())
    new = digester.digest(args.new.read_bytes())

    print(f"Old : {old.hex()}")
    print(f"New : {new.hex()}")
    changed = digester.changed_tokens(old, new)
    _print_token_report(changed, diff_positions(old, new), digester.segment_count)
    return 1 if changed else 0


def _cmd_diff(args: argparse.Namespace) -> int:
    positions = diff_positions(args.digest_a, args.digest_b)
    if len(args.digest_a) != len(args.digest_b):
        print(
            f"Note: digest lengths differ ({len(args.digest_a)} vs {len(args.digest_b)} bytes); "
            "comparing the overlapping prefix only",
            file=sys.stderr,
        )
    if args.segment_size is not None:
        size = normalize_geometry(args.segment_size, 1)[0]
        overlap = min(len(args.digest_a), len(args.digest_b))
        total = -(-overlap // size)
        _print_token_report(diff_tokens(args.digest_a, args.digest_b, size), positions, total)
    else:
        print(f"Bytes changed  : {len(positions)} {positions}")
    return 1 if positions else 0


def _cmd_verify(args: argparse.Namespace) -> int:
    secret = _read_secret(args.secret_file)
    base_dir = args.base_dir.resolve() if args.base_dir else None

    counts = {'ok': 0, 'changed': 0, 'missing': 0}
    for record in read_manifest(args.manifest):
        result = verify_record(record, secret=secret, base_dir=base_dir)
        counts[result['status']] += 1
        if result['status'] == 'changed':
            print(f"CHANGED  {result['path']}  tokens {result['changed_tokens']}")
        elif result['status'] == 'missing':
            print(f"MISSING  {result['path']}")

    print(f"\n{counts['ok']} ok, {counts['changed']} changed, {counts['missing']} missing")
    return 0 if counts['changed'] == 0 and counts['missing'] == 0 else 1


# -----------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------


def _add_digest_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, help="YAML configuration file")
    p.add_argument("--segment-size", type=int, help="Bytes per token (default: 2)")
    p.add_argument("--segment-count", type=int, help="Number of segments/tokens (default: 2)")
    p.add_argument("--mode", choices=available_modes(), help="Token folding mode (default: plain)")
    p.add_argument("--algorithm", help="hashlib algorithm for salted mode (default: sha256)")
    p.add_argument("--secret-file", type=Path, help="File whose bytes are used as the secret")


def main(argv: List[str] | None = None) -> int:  # noqa: D401 – simple
    parser = argparse.ArgumentParser(
        prog="abhash",
        description="ABHash - segment-local digests for change localization",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log configuration details")
    sub = parser.add_subparsers(required=True, dest="cmd")

    # digest
    p_digest = sub.add_parser("digest", help="Digest files and print or record the results")
    p_digest.add_argument("input", nargs="+", help="Input files, directories, or glob patterns")
    p_digest.add_argument("-o", "--output", type=Path,
                          help="Write a JSONL manifest here instead of printing (.gz compresses)")
    p_digest.add_argument("--no-recursive", action="store_true",
                          help="Do not descend into subdirectories")
    p_digest.add_argument("-q", "--quiet", action="store_true",
                          help="Suppress progress output")
    _add_digest_options(p_digest)
    p_digest.set_defaults(func=_cmd_digest)

    # compare
    p_compare = sub.add_parser("compare", help="Report which tokens differ between two files")
    p_compare.add_argument("old", type=Path, help="Original file")
    p_compare.add_argument("new", type=Path, help="Modified file")
    _add_digest_options(p_compare)
    p_compare.set_defaults(func=_cmd_compare)

    # diff
    p_diff = sub.add_parser("diff", help="Compare two hex digests")
    p_diff.add_argument("digest_a", type=_hex_digest, help="First digest (hex)")
    p_diff.add_argument("digest_b", type=_hex_digest, help="Second digest (hex)")
    p_diff.add_argument("--segment-size", type=int,
                        help="Also report differing token indices for this token size")
    p_diff.set_defaults(func=_cmd_diff)

    # verify
    p_verify = sub.add_parser("verify", help="Re-digest files listed in a manifest")
    p_verify.add_argument("manifest", type=Path, help="JSONL manifest written by 'abhash digest'")
    p_verify.add_argument("--secret-file", type=Path, help="Secret used when the manifest was written")
    p_verify.add_argument("--base-dir", type=Path, help="Resolve relative manifest paths against this directory")
    p_verify.set_defaults(func=_cmd_verify)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (ValueError, OSError) as e:
        print(f"abhash: error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
