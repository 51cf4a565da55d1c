"""The compare command."""

from __future__ import annotations

import click

from ..compare import compare_refs
from ..exceptions import CompareError
from ..hashing import DEFAULT_ALGORITHM
from ..outcome import DEFAULT_METHOD, Method
from ..report import report
from ._helpers import (
    main,
    CompareFailure,
    OutputConfig,
    _open_repo,
    _repo_option,
)


def _error_context(method: Method, algorithm: str) -> str:
    if method.uses_algorithm:
        return f"method: {method}, algorithm: {algorithm}"
    return f"method: {method}"


@main.command()
@_repo_option
@click.argument("ref_a")
@click.argument("ref_b")
@click.option("-m", "--method",
              type=click.Choice([m.value for m in Method], case_sensitive=False),
              default=DEFAULT_METHOD.value, show_default=True,
              help="Comparison method (see below).")
@click.option("-a", "--algorithm", default=DEFAULT_ALGORITHM, show_default=True,
              help="Hash algorithm for archive/listing (sha256, sha1, md5, sha256sum, ...).")
@click.option("-v", "--verbose", is_flag=True, help="Show resolved refs, tree ids and checksums.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output; exit code only.")
@click.option("-d", "--show-diff", is_flag=True, help="Show file differences when content differs.")
@click.pass_context
def compare(ctx, ref_a, ref_b, method, algorithm, verbose, quiet, show_diff):
    """Compare the final file contents of REF_A and REF_B.

    History and commit metadata are ignored: two refs with unrelated
    histories but the same files are identical.  When both refs point
    at the same tree object the answer is immediate, whatever the method.

    \b
    Methods:
      archive  git archive checksum; applies .gitattributes filters
               and eol conversion like a checkout (most accurate)
      tree     tree id comparison only (fastest; blind to filters)
      listing  checksum of the recursive path/mode/blob listing
               (fast; a moved or re-filtered file counts as different)
      diff     tree diff, identical when no change is found

    \b
    Exit codes:
      0  content is identical
      1  content differs
      2  error (invalid refs, unknown algorithm, git error, ...)

    \b
    Examples:
      treecmp compare main develop
      treecmp compare abc1234 def5678 -m archive -v
      treecmp compare feature/branch main --show-diff
    """
    out = OutputConfig(verbose=verbose, quiet=quiet)
    method = Method(method.lower())
    repo = _open_repo(ctx)

    with repo:
        out.info(f"Comparing content: {ref_a} vs {ref_b}")
        out.info(f"Method: {method}")
        outcome = compare_refs(repo, ref_a, ref_b, method=method,
                               algorithm=algorithm, log=out.debug)

        if outcome.is_error:
            raise CompareFailure(f"{outcome.error} ({_error_context(method, algorithm)})")

        if outcome.is_identical:
            out.success(outcome.describe())
        else:
            out.failure(outcome.describe())

        if outcome.is_different and show_diff and not quiet:
            try:
                diff_report = report(repo, ref_a, ref_b, verbose)
            except CompareError as exc:
                out.warn(f"could not build differences report: {exc}")
            else:
                for line in diff_report.format_lines():
                    out.echo(line)

    ctx.exit(outcome.exit_code)
