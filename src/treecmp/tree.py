"""Tree listing helpers for treecmp.

Provides the filemode constants and the canonical recursive listing used by
the listing comparison method.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple


GIT_FILEMODE_TREE = 0o040000
GIT_FILEMODE_BLOB = 0o100644
GIT_FILEMODE_BLOB_EXECUTABLE = 0o100755
GIT_FILEMODE_LINK = 0o120000
GIT_FILEMODE_COMMIT = 0o160000  # submodule (gitlink)


def object_type_for_mode(mode: int) -> str:
    """Return the git object type name stored under a tree entry of *mode*."""
    if mode == GIT_FILEMODE_TREE:
        return "tree"
    if mode == GIT_FILEMODE_COMMIT:
        return "commit"
    return "blob"


class ListingEntry(NamedTuple):
    """A single row of a recursive tree listing."""

    mode: int
    oid: str
    path: str

    @property
    def type(self) -> str:
        return object_type_for_mode(self.mode)

    def format(self) -> str:
        """Format as a ``git ls-tree -r`` line (without trailing newline)."""
        return f"{self.mode:06o} {self.type} {self.oid}\t{self.path}"


def sort_listing(entries: Iterable[ListingEntry]) -> list[ListingEntry]:
    """Order entries lexicographically by path (byte order, like git)."""
    return sorted(entries, key=lambda e: e.path.encode("utf-8", "surrogateescape"))


def serialize_listing(entries: Iterable[ListingEntry]) -> bytes:
    """Serialize a listing to the bytes that get digested.

    The entries are sorted first, so two listings with the same rows always
    serialize identically regardless of the order they were produced in.
    """
    lines = [e.format() + "\n" for e in sort_listing(entries)]
    return "".join(lines).encode("utf-8", "surrogateescape")
