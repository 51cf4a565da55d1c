from .repo import GitRepository
from .resolve import ObjectKind, ResolvedObject, resolve, tree_of
from .outcome import ComparisonOutcome, Evidence, Method, Verdict
from .compare import compare_refs, dispatch, short_circuit
from .report import DifferencesReport, NameStatus, report
from .exceptions import (
    CompareError,
    InvalidReferenceError,
    NotATreeError,
    AlgorithmUnavailableError,
    InvalidMethodError,
    RepositoryAccessError,
    NotARepositoryError,
)

__all__ = [
    "GitRepository", "ObjectKind", "ResolvedObject", "resolve", "tree_of",
    "ComparisonOutcome", "Evidence", "Method", "Verdict",
    "compare_refs", "dispatch", "short_circuit",
    "DifferencesReport", "NameStatus", "report",
    "CompareError", "InvalidReferenceError", "NotATreeError",
    "AlgorithmUnavailableError", "InvalidMethodError",
    "RepositoryAccessError", "NotARepositoryError",
]
