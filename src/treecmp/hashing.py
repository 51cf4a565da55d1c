"""Hash algorithm lookup for the archive and listing methods."""

from __future__ import annotations

import hashlib
from typing import BinaryIO

from .exceptions import AlgorithmUnavailableError

DEFAULT_ALGORITHM = "sha256"

_CHUNK_SIZE = 65536

# coreutils names that don't reduce to a hashlib name by dropping "sum"
_ALIASES = {
    "b2": "blake2b",
    "b2sum": "blake2b",
}


def canonical_algorithm(name: str) -> str:
    """Map *name* to the hashlib name it stands for.

    Accepts hashlib names (``sha256``) as well as the coreutils tool names
    (``sha256sum``, ``md5sum``, ``b2sum``).  Does not check availability.
    """
    key = name.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    if key.endswith("sum"):
        key = key[:-3]
    return key


def new_hash(name: str):
    """Return a fresh hash object for *name*.

    Raises:
        AlgorithmUnavailableError: If the interpreter has no such algorithm,
            or it is a variable-length one (shake) with no fixed digest.
    """
    canonical = canonical_algorithm(name)
    try:
        h = hashlib.new(canonical)
    except (ValueError, TypeError):
        raise AlgorithmUnavailableError(name)
    if h.digest_size == 0:
        raise AlgorithmUnavailableError(name)
    return h


def check_algorithm(name: str) -> str:
    """Validate *name* and return its canonical form."""
    new_hash(name)
    return canonical_algorithm(name)


def digest_bytes(data: bytes, algorithm: str) -> str:
    """Hex digest of *data* under *algorithm*."""
    h = new_hash(algorithm)
    h.update(data)
    return h.hexdigest()


def update_from_stream(h, stream: BinaryIO) -> None:
    """Feed *stream* into *h* in fixed-size chunks."""
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        h.update(chunk)
