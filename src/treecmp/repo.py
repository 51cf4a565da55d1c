"""GitRepository: read-only access to a git repository.

Objects, trees and tree diffs are read through dulwich.  The ``git`` binary
is used only where git's own semantics are needed: parsing revision
expressions (``HEAD~1``, ``v1.0^{tree}``, ``main:docs``) and producing
archives with ``.gitattributes`` filters applied.
"""

from __future__ import annotations

import io
import os
import shutil
import subprocess
import tempfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_DELETE,
    RenameDetector,
    tree_changes,
)
from dulwich.errors import ApplyDeltaError, ChecksumMismatch, FileFormatException, NotGitRepository
from dulwich.objects import Commit, Tag, Tree
from dulwich.patch import write_object_diff
from dulwich.repo import Repo as _DRepo
from dulwich.repo import UnsupportedExtension, UnsupportedVersion

from .exceptions import (
    InvalidReferenceError,
    NotARepositoryError,
    NotATreeError,
    RepositoryAccessError,
)
from .tree import GIT_FILEMODE_TREE, ListingEntry

NO_COMMIT_MESSAGE = "No commit message"

# Upper bound on tag chains followed by peel_to_tree
_MAX_PEEL = 50

# Width of the +/- graph in diff_stat
_STAT_GRAPH_WIDTH = 40

# What dulwich raises when the object store on disk is damaged or unreadable
_READ_ERRORS = (ChecksumMismatch, ApplyDeltaError, FileFormatException, zlib.error, OSError)


class FileStat(NamedTuple):
    """Per-file change counts, as ``git diff --numstat`` reports them."""

    path: str
    insertions: int
    deletions: int
    binary: bool = False


def _decode_path(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def _display_path(raw: bytes) -> str:
    """Path for diff output; bytes that are not UTF-8 are shown as \\xNN."""
    return raw.decode("utf-8", "backslashreplace")


def _entry_tuple(entry) -> tuple:
    """Return ``(path, mode, sha)`` for write_object_diff, or all-None."""
    if entry is None or entry.path is None:
        return (None, None, None)
    return (_display_path(entry.path).encode("utf-8"), entry.mode, entry.sha)


class GitRepository:
    """A git repository opened for comparison queries."""

    def __init__(self, dulwich_repo: _DRepo):
        self._repo = dulwich_repo

    def __repr__(self) -> str:
        return f"GitRepository({self.path!r})"

    @classmethod
    def open(cls, path: str | Path = ".") -> GitRepository:
        """Open the repository containing *path* (searching parent directories).

        Raises:
            NotARepositoryError: If no repository encloses *path*.
            RepositoryAccessError: If the repository uses a format or
                extension (partial clone, reftable, ...) that cannot be read.
        """
        path = os.fspath(path)
        if not os.path.exists(path):
            raise NotARepositoryError(f"Not in a Git repository: {path}")
        try:
            return cls(_DRepo.discover(path))
        except NotGitRepository:
            raise NotARepositoryError(f"Not in a Git repository: {path}")
        except UnsupportedExtension as exc:
            raise RepositoryAccessError(f"Unsupported repository extension in {path}: {exc.extension}")
        except UnsupportedVersion as exc:
            raise RepositoryAccessError(f"Unsupported repository format version in {path}: {exc.version}")
        except OSError as exc:
            raise RepositoryAccessError(f"Cannot open repository {path}: {exc}")

    @property
    def path(self) -> str:
        return self._repo.path

    def close(self) -> None:
        self._repo.close()

    def __enter__(self) -> GitRepository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- git binary ---------------------------------------------------------

    def _git(self, *args: str, stdout=subprocess.PIPE) -> subprocess.CompletedProcess:
        git = shutil.which("git")
        if git is None:
            raise RepositoryAccessError("git is not installed or not on PATH")
        return subprocess.run(
            [git, "-C", self.path, *args],
            stdout=stdout,
            stderr=subprocess.PIPE,
        )

    @staticmethod
    def _stderr(proc: subprocess.CompletedProcess) -> str:
        return proc.stderr.decode("utf-8", "replace").strip() or "unknown error"

    # -- objects ------------------------------------------------------------

    def _object(self, sha: str):
        try:
            return self._repo.object_store[sha.encode("ascii")]
        except KeyError:
            raise RepositoryAccessError(f"Object not found in object store: {sha}")
        except _READ_ERRORS as exc:
            raise RepositoryAccessError(f"Corrupt or unreadable object {sha}: {exc}")

    def rev_parse(self, ref: str) -> str:
        """Resolve *ref* to a full object id with ``git rev-parse --verify``.

        Raises:
            InvalidReferenceError: If *ref* does not name an existing object.
        """
        if not ref or ref.startswith("-"):
            raise InvalidReferenceError(ref, "not a revision")
        proc = self._git("rev-parse", "--verify", "--quiet", ref)
        if proc.returncode != 0:
            raise InvalidReferenceError(ref)
        return proc.stdout.decode("ascii").strip()

    def object_kind(self, sha: str) -> str:
        """Return ``"commit"``, ``"tree"``, ``"blob"`` or ``"tag"``."""
        return self._object(sha).type_name.decode("ascii")

    def commit_subject(self, sha: str) -> str:
        """First line of a commit's message, or a placeholder when empty."""
        obj = self._object(sha)
        if not isinstance(obj, Commit) or not obj.message:
            return NO_COMMIT_MESSAGE
        lines = obj.message.decode("utf-8", "replace").strip().splitlines()
        return lines[0] if lines else NO_COMMIT_MESSAGE

    def peel_to_tree(self, sha: str, *, ref: str | None = None) -> str:
        """Follow tags and commits from *sha* down to a tree id.

        Raises:
            NotATreeError: If the chain ends at a blob (or anything else).
        """
        obj = self._object(sha)
        for _ in range(_MAX_PEEL):
            if isinstance(obj, Tree):
                return obj.id.decode("ascii")
            if isinstance(obj, Commit):
                return obj.tree.decode("ascii")
            if not isinstance(obj, Tag):
                break
            obj = self._object(obj.object[1].decode("ascii"))
        raise NotATreeError(ref or sha, obj.type_name.decode("ascii"))

    # -- materialization ----------------------------------------------------

    @contextmanager
    def archive(self, treeish: str) -> Iterator[BinaryIO]:
        """Yield a tar archive of *treeish*, as ``git archive`` produces it.

        The archive is written to an anonymous temporary file which is
        removed when the context exits, whether normally or by an exception.
        """
        with tempfile.TemporaryFile(prefix="treecmp-") as buf:
            proc = self._git("archive", "--format=tar", treeish, stdout=buf)
            if proc.returncode != 0:
                raise RepositoryAccessError(
                    f"Failed to create archive for {treeish}: {self._stderr(proc)}"
                )
            buf.seek(0)
            yield buf

    def list_tree(self, tree_id: str) -> list[ListingEntry]:
        """Recursive listing of every non-tree entry under *tree_id*.

        Entries come out in tree order; submodules appear as a single
        ``commit`` entry and are not descended into.
        """
        out: list[ListingEntry] = []

        def _walk(sha: bytes, prefix: str) -> None:
            tree = self._object(sha.decode("ascii"))
            if not isinstance(tree, Tree):
                raise RepositoryAccessError(f"Expected a tree at {prefix or '/'}: {sha.decode()}")
            for entry in tree.iteritems():
                path = f"{prefix}{_decode_path(entry.path)}"
                if entry.mode == GIT_FILEMODE_TREE:
                    _walk(entry.sha, path + "/")
                else:
                    out.append(ListingEntry(entry.mode, entry.sha.decode("ascii"), path))

        _walk(tree_id.encode("ascii"), "")
        return out

    # -- diffs --------------------------------------------------------------

    def _changes(self, tree_a: str, tree_b: str, *, renames: bool = False):
        store = self._repo.object_store
        detector = RenameDetector(store) if renames else None
        try:
            return list(tree_changes(
                store, tree_a.encode("ascii"), tree_b.encode("ascii"),
                rename_detector=detector,
            ))
        except KeyError as exc:
            raise RepositoryAccessError(f"Object missing while diffing {tree_a}..{tree_b}: {exc}")
        except _READ_ERRORS as exc:
            raise RepositoryAccessError(f"Corrupt or unreadable object while diffing {tree_a}..{tree_b}: {exc}")

    def diff_quiet(self, tree_a: str, tree_b: str) -> bool:
        """Return True when the two trees have no differences."""
        if tree_a == tree_b:
            return True
        return not self._changes(tree_a, tree_b)

    def diff_name_status(self, tree_a: str, tree_b: str) -> list[tuple[str, str, str | None]]:
        """Return ``(change_type, path, old_path)`` per changed path, sorted by path.

        *change_type* is a dulwich change type (``add``, ``modify``,
        ``delete``, ``rename``, ``copy``).  *old_path* is set for renames
        and copies.
        """
        rows = []
        for change in self._changes(tree_a, tree_b, renames=True):
            if change.type == CHANGE_ADD:
                rows.append((change.type, _display_path(change.new.path), None))
            elif change.type == CHANGE_DELETE:
                rows.append((change.type, _display_path(change.old.path), None))
            else:
                old_path = _display_path(change.old.path)
                new_path = _display_path(change.new.path)
                rows.append((change.type, new_path, old_path if old_path != new_path else None))
        rows.sort(key=lambda r: r[1])
        return rows

    def _patches(self, tree_a: str, tree_b: str) -> Iterator[tuple[str, bytes]]:
        store = self._repo.object_store
        for change in self._changes(tree_a, tree_b):
            old = change.old if change.type != CHANGE_ADD else None
            new = change.new if change.type != CHANGE_DELETE else None
            path = (new if new is not None else old).path
            buf = io.BytesIO()
            try:
                write_object_diff(buf, store, _entry_tuple(old), _entry_tuple(new))
            except KeyError as exc:
                raise RepositoryAccessError(f"Object missing while diffing {_display_path(path)}: {exc}")
            except _READ_ERRORS as exc:
                raise RepositoryAccessError(f"Corrupt or unreadable object while diffing {_display_path(path)}: {exc}")
            yield _display_path(path), buf.getvalue()

    def diff_numstat(self, tree_a: str, tree_b: str) -> list[FileStat]:
        """Per-file insertion and deletion counts."""
        stats = []
        for path, patch in self._patches(tree_a, tree_b):
            insertions = deletions = 0
            in_hunk = False
            binary = False
            for line in patch.splitlines():
                if line.startswith(b"@@"):
                    in_hunk = True
                elif not in_hunk:
                    if line.startswith(b"Binary files "):
                        binary = True
                elif line.startswith(b"+"):
                    insertions += 1
                elif line.startswith(b"-"):
                    deletions += 1
            stats.append(FileStat(path, insertions, deletions, binary))
        return stats

    def diff_stat(self, tree_a: str, tree_b: str) -> str:
        """A ``git diff --stat`` style summary."""
        stats = self.diff_numstat(tree_a, tree_b)
        if not stats:
            return ""
        name_width = max(len(s.path) for s in stats)
        most = max(s.insertions + s.deletions for s in stats)
        count_width = len(str(most))
        scale = min(1.0, _STAT_GRAPH_WIDTH / most) if most else 1.0
        lines = []
        for s in stats:
            if s.binary:
                lines.append(f" {s.path.ljust(name_width)} | Bin")
                continue
            plus = int(round(s.insertions * scale))
            minus = int(round(s.deletions * scale))
            if s.insertions and not plus:
                plus = 1
            if s.deletions and not minus:
                minus = 1
            total = str(s.insertions + s.deletions).rjust(count_width)
            lines.append(f" {s.path.ljust(name_width)} | {total} {'+' * plus}{'-' * minus}".rstrip())

        files = len(stats)
        insertions = sum(s.insertions for s in stats)
        deletions = sum(s.deletions for s in stats)
        summary = f" {files} file{'s' if files != 1 else ''} changed"
        if insertions:
            summary += f", {insertions} insertion{'s' if insertions != 1 else ''}(+)"
        if deletions:
            summary += f", {deletions} deletion{'s' if deletions != 1 else ''}(-)"
        lines.append(summary)
        return "\n".join(lines)

    def diff_unified(self, tree_a: str, tree_b: str) -> list[str]:
        """The full unified diff between two trees, one string per line."""
        lines: list[str] = []
        for _path, patch in self._patches(tree_a, tree_b):
            lines.extend(patch.decode("utf-8", "replace").splitlines())
        return lines
