"""Token folding strategies."""
from __future__ import annotations

import hashlib
import random

import pytest
import xxhash

from abhash import compute_digest, create_folder, fold_plain, fold_salted, fold_xxhash, get_secret, set_secret
from abhash.digest.folding import (
    PlainFolder,
    SaltedDigestFolder,
    TokenFolder,
    XXHashFolder,
    available_modes,
    xor_fold,
)


def _slow_fold(data: bytes, size: int) -> bytes:
    token = bytearray(size)
    for i, b in enumerate(data):
        token[i % size] ^= b
    return bytes(~t & 0xFF for t in token)


def test_fold_plain_known_values() -> None:
    assert fold_plain(b"abc", 3) == bytes([0x9E, 0x9D, 0x9C])
    # g ^ j land in the same slot
    assert fold_plain(b"ghij", 3) == bytes([0xF2, 0x97, 0x96])
    assert fold_plain(b"", 4) == b"\xff" * 4


def test_fold_plain_matches_bytewise_fold() -> None:
    rng = random.Random(7)
    for _ in range(200):
        size = rng.randint(1, 17)
        data = rng.randbytes(rng.randint(0, 100))
        assert fold_plain(data, size) == _slow_fold(data, size)


def test_fold_plain_zero_padding_is_neutral() -> None:
    assert fold_plain(b"c", 2) == fold_plain(b"c\x00", 2) == fold_plain(b"c\x00\x00\x00", 2)


def test_fold_plain_nonpositive_size_falls_back() -> None:
    assert fold_plain(b"abcd", 0) == fold_plain(b"abcd", 2)


def test_fold_salted_is_folded_sha256() -> None:
    segment, secret = b"def", b"pepper"
    expected = _slow_fold(hashlib.sha256(segment + secret).digest(), 3)
    assert fold_salted(segment, 3, secret) == expected


def test_fold_salted_empty_secret_by_default() -> None:
    expected = _slow_fold(hashlib.sha256(b"def").digest(), 4)
    assert fold_salted(b"def", 4) == expected
    assert fold_salted(b"def", 4, b"") == expected


def test_fold_salted_secret_changes_token() -> None:
    assert fold_salted(b"segment", 8, b"one") != fold_salted(b"segment", 8, b"two")


def test_fold_salted_pluggable_algorithm() -> None:
    expected = _slow_fold(hashlib.sha3_256(b"xyz" + b"k").digest(), 4)
    assert fold_salted(b"xyz", 4, b"k", algorithm="sha3_256") == expected


def test_fold_salted_unknown_algorithm() -> None:
    with pytest.raises(ValueError, match="Unsupported digest algorithm"):
        SaltedDigestFolder(b"", algorithm="not-a-hash")


def test_fold_xxhash_is_folded_xxh3() -> None:
    expected = _slow_fold(xxhash.xxh3_128(b"abc" + b"s").digest(), 4)
    assert fold_xxhash(b"abc", 4, b"s") == expected


def test_default_secret_used_when_not_given() -> None:
    data = b"abcdefghij"
    unsalted = compute_digest(data, 3, 3, mode="salted")
    set_secret(b"shared")
    assert compute_digest(data, 3, 3, mode="salted") == compute_digest(data, 3, 3, mode="salted", secret=b"shared")
    assert compute_digest(data, 3, 3, mode="salted") != unsalted
    # an explicit secret wins over the default
    assert compute_digest(data, 3, 3, mode="salted", secret=b"") == unsalted


def test_plain_mode_ignores_secret() -> None:
    set_secret(b"shared")
    assert compute_digest(b"abc", 2, 2, mode="plain") == compute_digest(b"abc", 2, 2, mode="plain", secret=b"x")


def test_folder_snapshots_secret() -> None:
    set_secret(b"before")
    folder = create_folder("salted")
    set_secret(b"after")
    assert folder.fold(b"abc", 4) == fold_salted(b"abc", 4, b"before")


def test_create_folder_modes() -> None:
    assert isinstance(create_folder("plain"), PlainFolder)
    assert isinstance(create_folder("SALTED", b"k"), SaltedDigestFolder)
    assert isinstance(create_folder("xxhash"), XXHashFolder)
    assert available_modes() == ["plain", "salted", "xxhash"]


def test_custom_folder_strategy() -> None:
    class FirstByteFolder(TokenFolder):
        name = "first"

        def fold(self, segment: bytes, size: int) -> bytes:
            return (segment[:1] or b"\x00") * size

    folder = FirstByteFolder()
    assert create_folder(folder) is folder
    assert compute_digest(b"abcdefghij", 3, 3, mode=folder) == b"aaadddggg"


def test_describe_never_leaks_secret() -> None:
    info = create_folder("salted", b"top-secret").describe()
    assert info == {"mode": "salted", "algorithm": "sha256"}
    assert "top-secret" not in repr(create_folder("salted", b"top-secret"))


def test_xor_fold_accepts_buffers() -> None:
    assert xor_fold(bytearray(b"abcd"), 2) == xor_fold(b"abcd", 2)
    assert xor_fold(memoryview(b"abcd"), 2) == xor_fold(b"abcd", 2)


def test_default_secret_concurrent_updates() -> None:
    """Folders built while another thread swaps the secret see one whole value."""
    import threading

    secrets = [bytes([i]) * 64 for i in range(1, 9)]
    stop = threading.Event()
    seen = []

    def _writer() -> None:
        while not stop.is_set():
            for s in secrets:
                set_secret(s)

    def _reader() -> None:
        for _ in range(500):
            seen.append(create_folder("salted").secret)

    writer = threading.Thread(target=_writer)
    readers = [threading.Thread(target=_reader) for _ in range(4)]
    writer.start()
    for t in readers:
        t.start()
    for t in readers:
        t.join()
    stop.set()
    writer.join()

    assert len(seen) == 2000
    assert set(seen) <= set(secrets) | {b""}
    assert get_secret() in set(secrets) | {b""}
