"""Exceptions for treecmp."""


class CompareError(Exception):
    """Base class for every failure that ends a comparison with exit status 2."""


class NotARepositoryError(CompareError):
    """Raised when the given path is not inside a git repository."""


class InvalidReferenceError(CompareError):
    """Raised when a reference does not name an existing object."""

    def __init__(self, ref: str, reason: str | None = None):
        self.ref = ref
        msg = f"Invalid reference: {ref!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class NotATreeError(CompareError):
    """Raised when a resolved object cannot be peeled to a tree (e.g. a blob)."""

    def __init__(self, ref: str, kind: str):
        self.ref = ref
        self.kind = kind
        super().__init__(f"Reference {ref!r} is a {kind}, not a tree-ish")


class AlgorithmUnavailableError(CompareError):
    """Raised when the requested hash algorithm is not available."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Hash algorithm not found: {algorithm}")


class InvalidMethodError(CompareError):
    """Raised when a comparison method name is not recognised."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Invalid method: {method}")


class RepositoryAccessError(CompareError):
    """Raised when git itself fails (corrupt object, filter failure, missing git)."""
