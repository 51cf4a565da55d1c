"""Shared helpers, output configuration, and the main CLI group."""

from __future__ import annotations

import os
from dataclasses import dataclass

import click

from ..exceptions import CompareError
from ..repo import GitRepository


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CompareFailure(click.ClickException):
    """A ClickException that exits with status 2, the error status."""

    exit_code = 2


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputConfig:
    """Verbosity settings, passed explicitly to everything that prints.

    Status lines go to stderr; report and evidence blocks to stdout.
    ``quiet`` wins over ``verbose``.
    """
    verbose: bool = False
    quiet: bool = False

    def info(self, msg: str) -> None:
        if not self.quiet:
            click.secho(msg, fg="blue", err=True)

    def success(self, msg: str) -> None:
        if not self.quiet:
            click.secho(msg, fg="green", err=True)

    def failure(self, msg: str) -> None:
        """A negative verdict (not an error; still silenced by quiet)."""
        if not self.quiet:
            click.secho(msg, fg="red", err=True)

    def warn(self, msg: str) -> None:
        if not self.quiet:
            click.secho(f"Warning: {msg}", fg="yellow", err=True)

    def debug(self, msg: str) -> None:
        """Evidence and progress output, shown only with --verbose."""
        if self.verbose and not self.quiet:
            click.echo(msg)

    def echo(self, msg: str = "") -> None:
        if not self.quiet:
            click.echo(msg)


# ---------------------------------------------------------------------------
# Repo option
# ---------------------------------------------------------------------------

def _store_repo(ctx, param, value):
    """Click callback: store --repo value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["repo_path"] = value
    return value


def _repo_option(f):
    """Shared --repo/-r option decorator."""
    return click.option(
        "--repo", "-r", type=click.Path(), envvar="TREECMP_REPO",
        help="Path inside the git repository (default: current directory, or set TREECMP_REPO).",
        expose_value=False, callback=_store_repo, is_eager=True,
    )(f)


def _open_repo(ctx) -> GitRepository:
    """Open the repository named by --repo (or the current directory)."""
    path = ctx.obj.get("repo_path") or os.getcwd()
    try:
        return GitRepository.open(path)
    except CompareError as exc:
        raise CompareFailure(str(exc))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@_repo_option
@click.pass_context
def main(ctx):
    """treecmp — compare final file contents of git refs.

    Decides whether two refs (commits, branches, tags, HEAD~1, ...) hold
    the same files, ignoring how their histories got there.

    \b
    Quick start:
      treecmp compare main develop
      treecmp compare v1.0.0 main --method listing
      treecmp compare HEAD~1 HEAD --method tree --quiet

    \b
    Exit codes:
      0  content is identical
      1  content differs
      2  error (invalid refs, git error, bad arguments)
    """
    ctx.ensure_object(dict)
