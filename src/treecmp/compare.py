"""Comparison engine: tree-id short-circuit and the four comparison methods."""

from __future__ import annotations

import tarfile
from collections.abc import Callable
from typing import TYPE_CHECKING

from .exceptions import CompareError, RepositoryAccessError
from .hashing import DEFAULT_ALGORITHM, check_algorithm, digest_bytes, new_hash, update_from_stream
from .outcome import DEFAULT_METHOD, ComparisonOutcome, Evidence, Method
from .resolve import resolve, tree_of
from .tree import serialize_listing

if TYPE_CHECKING:
    from .repo import GitRepository

Log = Callable[[str], None]


def _nolog(msg: str) -> None:
    pass


# ---------------------------------------------------------------------------
# Short-circuit
# ---------------------------------------------------------------------------

def short_circuit(tree_a: str, tree_b: str, method: Method) -> ComparisonOutcome | None:
    """Return Identical when both tree ids match, else None.

    Equal tree ids already prove identical content, so this holds for
    every method and no method-specific work is done.
    """
    if tree_a == tree_b:
        return ComparisonOutcome.identical(
            method, Evidence("tree", tree_a, tree_b), short_circuited=True,
        )
    return None


# ---------------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------------

def archive_digest(repo: GitRepository, treeish: str, algorithm: str) -> str:
    """Digest the materialized contents of *treeish*.

    Hashes each archive member's type, permission bits, path, link target,
    size and data in archive order.  Member timestamps are left out:
    ``git archive`` stamps tree archives with the current time.
    """
    h = new_hash(algorithm)
    with repo.archive(treeish) as stream:
        try:
            with tarfile.open(fileobj=stream, mode="r:") as tf:
                for member in tf:
                    header = "\0".join((
                        member.type.decode("ascii", "replace"),
                        format(member.mode & 0o7777, "o"),
                        member.name,
                        member.linkname,
                        str(member.size),
                    )) + "\0"
                    h.update(header.encode("utf-8", "surrogateescape"))
                    if member.isfile():
                        update_from_stream(h, tf.extractfile(member))
        except tarfile.TarError as exc:
            raise RepositoryAccessError(f"Unreadable archive for {treeish}: {exc}")
    return h.hexdigest()


def listing_digest(repo: GitRepository, ref: str, algorithm: str) -> str:
    """Digest the sorted recursive ``(mode, type, id, path)`` listing of *ref*."""
    return digest_bytes(serialize_listing(repo.list_tree(tree_of(repo, ref))), algorithm)


# ---------------------------------------------------------------------------
# Methods
# ---------------------------------------------------------------------------

def _by_archive(repo, ref_a, ref_b, tree_a, tree_b, algorithm, log):
    check_algorithm(algorithm)
    log(f"Using git archive method with {algorithm}")
    # Archives are taken of the tree ids, not the original refs
    log(f"Creating archive for {tree_a}...")
    digest_a = archive_digest(repo, tree_a, algorithm)
    log(f"Creating archive for {tree_b}...")
    digest_b = archive_digest(repo, tree_b, algorithm)
    log(f"Archive checksums:\n  {ref_a}: {digest_a}\n  {ref_b}: {digest_b}")
    evidence = Evidence("archive", digest_a, digest_b)
    if digest_a == digest_b:
        return ComparisonOutcome.identical(Method.ARCHIVE, evidence)
    return ComparisonOutcome.different(Method.ARCHIVE, evidence)


def _by_tree(repo, ref_a, ref_b, tree_a, tree_b, algorithm, log):
    log(f"Tree SHAs:\n  {ref_a}: {tree_a}\n  {ref_b}: {tree_b}")
    return ComparisonOutcome.different(Method.TREE, Evidence("tree", tree_a, tree_b))


def _by_listing(repo, ref_a, ref_b, tree_a, tree_b, algorithm, log):
    check_algorithm(algorithm)
    log(f"Using tree listing method with {algorithm}")
    digest_a = listing_digest(repo, ref_a, algorithm)
    digest_b = listing_digest(repo, ref_b, algorithm)
    log(f"Tree listing checksums:\n  {ref_a}: {digest_a}\n  {ref_b}: {digest_b}")
    evidence = Evidence("listing", digest_a, digest_b)
    if digest_a == digest_b:
        return ComparisonOutcome.identical(Method.LISTING, evidence)
    return ComparisonOutcome.different(Method.LISTING, evidence)


def _by_diff(repo, ref_a, ref_b, tree_a, tree_b, algorithm, log):
    log("Using git diff method")
    if repo.diff_quiet(tree_of(repo, ref_a), tree_of(repo, ref_b)):
        return ComparisonOutcome.identical(
            Method.DIFF, Evidence("diff", detail="no differences in diff"),
        )
    return ComparisonOutcome.different(
        Method.DIFF, Evidence("diff", detail="diff found differences"),
    )


_METHODS = {
    Method.ARCHIVE: _by_archive,
    Method.TREE: _by_tree,
    Method.LISTING: _by_listing,
    Method.DIFF: _by_diff,
}


def dispatch(
    repo: GitRepository,
    method: Method,
    ref_a: str,
    ref_b: str,
    tree_a: str,
    tree_b: str,
    algorithm: str = DEFAULT_ALGORITHM,
    log: Log | None = None,
) -> ComparisonOutcome:
    """Run one comparison method for two refs whose tree ids differ.

    Failures from git or the hash lookup come back as an Error outcome
    rather than being raised.
    """
    try:
        return _METHODS[method](repo, ref_a, ref_b, tree_a, tree_b, algorithm, log or _nolog)
    except CompareError as exc:
        return ComparisonOutcome.failed(method, exc)


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------

def compare_refs(
    repo: GitRepository,
    ref_a: str,
    ref_b: str,
    *,
    method: Method | str = DEFAULT_METHOD,
    algorithm: str = DEFAULT_ALGORITHM,
    log: Log | None = None,
) -> ComparisonOutcome:
    """Compare the final file contents of *ref_a* and *ref_b*.

    Resolves both refs (A first; B is not touched if A is invalid), checks
    tree ids, and only runs *method* when the trees differ.  Every failure
    is returned as an Error outcome.

    Args:
        repo: Repository to read from.
        ref_a: First reference (commit, branch, tag, ``HEAD~1``, ...).
        ref_b: Second reference.
        method: :class:`Method` or its name.
        algorithm: hashlib or coreutils name, used by archive and listing.
        log: Optional callable receiving progress and evidence lines.
    """
    log = log or _nolog
    try:
        method = Method.parse(method)
    except CompareError as exc:
        return ComparisonOutcome.failed(DEFAULT_METHOD, exc)

    try:
        if method.uses_algorithm:
            check_algorithm(algorithm)
        obj_a = resolve(repo, ref_a)
        obj_b = resolve(repo, ref_b)
        for label, obj in (("A", obj_a), ("B", obj_b)):
            log(f"Reference {label}: {obj.ref}\n  SHA: {obj.object_id}\n  Description: {obj.description}")
        tree_a = tree_of(repo, obj_a)
        tree_b = tree_of(repo, obj_b)
    except CompareError as exc:
        return ComparisonOutcome.failed(method, exc)

    log(f"Tree objects:\n  {ref_a} tree: {tree_a}\n  {ref_b} tree: {tree_b}")
    outcome = short_circuit(tree_a, tree_b, method)
    if outcome is not None:
        return outcome
    return dispatch(repo, method, ref_a, ref_b, tree_a, tree_b, algorithm, log)
