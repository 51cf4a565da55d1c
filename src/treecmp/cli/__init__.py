"""treecmp CLI: compare the final file contents of two git refs."""

from ._helpers import main  # noqa: F401 — entry point

# Import command modules to register Click commands with the main group.
from . import _compare  # noqa: F401
