"""Comparison methods and outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .exceptions import CompareError, InvalidMethodError


class Method(str, Enum):
    """Comparison method.

    Members: ``ARCHIVE``, ``TREE``, ``LISTING``, ``DIFF``.
    """
    ARCHIVE = "archive"
    TREE = "tree"
    LISTING = "listing"
    DIFF = "diff"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def parse(cls, name: str | Method) -> Method:
        """Convert a method name (case-insensitive) to a :class:`Method`."""
        if isinstance(name, Method):
            return name
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise InvalidMethodError(name)

    @property
    def uses_algorithm(self) -> bool:
        """True for the methods that digest content with a hash algorithm."""
        return self in (Method.ARCHIVE, Method.LISTING)


DEFAULT_METHOD = Method.ARCHIVE


class Verdict(str, Enum):
    IDENTICAL = "identical"
    DIFFERENT = "different"
    ERROR = "error"

    def __str__(self) -> str:          # noqa: D105
        return self.value


_EXIT_CODES = {
    Verdict.IDENTICAL: 0,
    Verdict.DIFFERENT: 1,
    Verdict.ERROR: 2,
}


@dataclass(frozen=True)
class Evidence:
    """What a verdict was based on.

    Attributes:
        label: Kind of evidence: ``"tree"``, ``"archive"``, ``"listing"``
            or ``"diff"``.
        a: Value for the first reference (tree id or digest), if any.
        b: Value for the second reference, if any.
        detail: Free-form note (e.g. ``"no differences in diff"``).
    """
    label: str
    a: str | None = None
    b: str | None = None
    detail: str = ""

    @property
    def short(self) -> str:
        """First 12 characters of the first value, for one-line summaries."""
        return self.a[:12] if self.a else ""


@dataclass(frozen=True)
class ComparisonOutcome:
    """Identical, Different or Error, with the evidence or cause."""
    verdict: Verdict
    method: Method
    evidence: Evidence | None = None
    error: CompareError | None = None
    short_circuited: bool = False

    @classmethod
    def identical(cls, method: Method, evidence: Evidence, *, short_circuited: bool = False) -> ComparisonOutcome:
        return cls(Verdict.IDENTICAL, method, evidence, short_circuited=short_circuited)

    @classmethod
    def different(cls, method: Method, evidence: Evidence) -> ComparisonOutcome:
        return cls(Verdict.DIFFERENT, method, evidence)

    @classmethod
    def failed(cls, method: Method, error: CompareError) -> ComparisonOutcome:
        return cls(Verdict.ERROR, method, error=error)

    @property
    def is_identical(self) -> bool:
        return self.verdict is Verdict.IDENTICAL

    @property
    def is_different(self) -> bool:
        return self.verdict is Verdict.DIFFERENT

    @property
    def is_error(self) -> bool:
        return self.verdict is Verdict.ERROR

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 identical, 1 different, 2 error."""
        return _EXIT_CODES[self.verdict]

    def describe(self) -> str:
        """One-line human summary of the verdict."""
        if self.is_error:
            return str(self.error)
        ev = self.evidence
        if self.is_identical:
            if self.short_circuited:
                return f"Content identical (same tree object: {ev.short}...)"
            if ev.label == "diff":
                return "Content identical (no differences in diff)"
            return f"Content identical ({ev.label} checksum: {ev.short}...)"
        if ev.label == "tree":
            return "Content differs (different tree objects)"
        if ev.label == "diff":
            return "Content differs (diff found differences)"
        return f"Content differs ({ev.label} checksums differ)"
