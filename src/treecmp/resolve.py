"""Reference resolution: ref string -> object id, kind, description, tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .repo import GitRepository


class ObjectKind(str, Enum):
    """Git object kind of a resolved reference."""
    COMMIT = "commit"
    TREE = "tree"
    BLOB = "blob"
    TAG = "tag"
    OTHER = "other"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def from_type_name(cls, name: str) -> ObjectKind:
        try:
            return cls(name)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class ResolvedObject:
    """A reference resolved to a concrete object."""
    ref: str
    object_id: str
    kind: ObjectKind
    description: str


def resolve(repo: GitRepository, ref: str) -> ResolvedObject:
    """Resolve *ref* and describe the object it names.

    Commits are described by their subject line; other objects by kind.

    Raises:
        InvalidReferenceError: If *ref* does not name an existing object.
    """
    sha = repo.rev_parse(ref)
    kind = ObjectKind.from_type_name(repo.object_kind(sha))
    if kind is ObjectKind.COMMIT:
        desc = repo.commit_subject(sha)
    else:
        desc = f"{kind} object"
    return ResolvedObject(ref=ref, object_id=sha, kind=kind, description=desc)


def tree_of(repo: GitRepository, ref: str | ResolvedObject) -> str:
    """Return the tree id *ref* points at (commits and tags are peeled).

    Raises:
        InvalidReferenceError: If *ref* is a string that does not resolve.
        NotATreeError: If the object has no associated tree.
    """
    if isinstance(ref, ResolvedObject):
        return repo.peel_to_tree(ref.object_id, ref=ref.ref)
    return repo.peel_to_tree(repo.rev_parse(ref), ref=ref)
