"""Differences report: what changed between two refs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_COPY,
    CHANGE_DELETE,
    CHANGE_MODIFY,
    CHANGE_RENAME,
)

from .resolve import tree_of

if TYPE_CHECKING:
    from .repo import GitRepository

MAX_DIFF_LINES = 50

_STATUS_NAMES = {
    CHANGE_ADD: "added",
    CHANGE_MODIFY: "modified",
    CHANGE_DELETE: "deleted",
    CHANGE_RENAME: "renamed",
    CHANGE_COPY: "copied",
}

_STATUS_LETTERS = {
    "added": "A",
    "modified": "M",
    "deleted": "D",
    "renamed": "R",
    "copied": "C",
}


class NameStatus(NamedTuple):
    """One changed path. *old_path* is set for renames and copies."""

    status: str
    path: str
    old_path: str | None = None

    def format(self) -> str:
        """Format like ``git diff --name-status``."""
        letter = _STATUS_LETTERS.get(self.status, "?")
        if self.old_path is not None:
            return f"{letter}\t{self.old_path}\t{self.path}"
        return f"{letter}\t{self.path}"


@dataclass
class DifferencesReport:
    """File-level changes between two refs plus a bounded diff excerpt.

    Attributes:
        name_status: Changed paths in path order.
        stat_summary: ``git diff --stat`` style text.
        diff_excerpt: First lines of the unified diff (empty unless verbose).
        truncated: True when the full diff is longer than the excerpt limit.
        total_diff_lines: Line count of the full unified diff (0 unless verbose).
    """
    name_status: list[NameStatus] = field(default_factory=list)
    stat_summary: str = ""
    diff_excerpt: list[str] = field(default_factory=list)
    truncated: bool = False
    total_diff_lines: int = 0

    @property
    def truncation_note(self) -> str | None:
        if not self.truncated:
            return None
        return f"{self.total_diff_lines} total lines of diff, showing first {len(self.diff_excerpt)}"

    def format_lines(self) -> list[str]:
        """Render the report as text lines."""
        lines = [
            "",
            "Content Differences:",
            "======================",
            "",
            "File Status Changes:",
        ]
        lines.extend(ns.format() for ns in self.name_status)
        lines += ["", "Change Summary:"]
        if self.stat_summary:
            lines.extend(self.stat_summary.splitlines())
        if self.diff_excerpt:
            lines += [
                "",
                f"Detailed Differences (first {MAX_DIFF_LINES} lines):",
                "======================================",
            ]
            lines.extend(self.diff_excerpt)
            if self.truncated:
                lines.append(f"... ({self.truncation_note})")
        return lines


def report(
    repo: GitRepository,
    ref_a: str,
    ref_b: str,
    verbose: bool = False,
    *,
    max_lines: int = MAX_DIFF_LINES,
) -> DifferencesReport:
    """Summarize what differs between *ref_a* and *ref_b*.

    Always lists changed paths and a change-count summary.  With
    *verbose*, also includes up to *max_lines* lines of unified diff.
    """
    tree_a = tree_of(repo, ref_a)
    tree_b = tree_of(repo, ref_b)
    name_status = [
        NameStatus(_STATUS_NAMES.get(kind, kind), path, old_path)
        for kind, path, old_path in repo.diff_name_status(tree_a, tree_b)
    ]
    result = DifferencesReport(
        name_status=name_status,
        stat_summary=repo.diff_stat(tree_a, tree_b),
    )
    if verbose:
        full = repo.diff_unified(tree_a, tree_b)
        result.total_diff_lines = len(full)
        result.diff_excerpt = full[:max_lines]
        result.truncated = len(full) > max_lines
    return result
