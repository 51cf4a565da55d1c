"""Tests for hash algorithm lookup."""

import hashlib
import io

import pytest

from treecmp.exceptions import AlgorithmUnavailableError
from treecmp.hashing import (
    DEFAULT_ALGORITHM,
    canonical_algorithm,
    check_algorithm,
    digest_bytes,
    new_hash,
    update_from_stream,
)


class TestCanonicalAlgorithm:
    @pytest.mark.parametrize("name,expected", [
        ("sha256", "sha256"),
        ("sha256sum", "sha256"),
        ("SHA1SUM", "sha1"),
        ("md5sum", "md5"),
        ("b2sum", "blake2b"),
        (" sha512 ", "sha512"),
    ])
    def test_names(self, name, expected):
        assert canonical_algorithm(name) == expected


class TestNewHash:
    def test_default_is_256_bit(self):
        assert new_hash(DEFAULT_ALGORITHM).digest_size == 32

    def test_coreutils_name(self):
        assert new_hash("sha1sum").name == "sha1"

    def test_unknown_raises(self):
        with pytest.raises(AlgorithmUnavailableError) as exc_info:
            new_hash("sha999sum")
        assert exc_info.value.algorithm == "sha999sum"
        assert "sha999sum" in str(exc_info.value)

    def test_variable_length_rejected(self):
        with pytest.raises(AlgorithmUnavailableError):
            new_hash("shake_128")

    def test_empty_name_rejected(self):
        with pytest.raises(AlgorithmUnavailableError):
            new_hash("")

    def test_check_returns_canonical(self):
        assert check_algorithm("md5sum") == "md5"


class TestDigest:
    def test_digest_bytes(self):
        assert digest_bytes(b"abc", "sha256") == hashlib.sha256(b"abc").hexdigest()

    def test_stream_matches_bytes(self):
        data = b"x" * 200_000
        h = new_hash("sha1")
        update_from_stream(h, io.BytesIO(data))
        assert h.hexdigest() == hashlib.sha1(data).hexdigest()
