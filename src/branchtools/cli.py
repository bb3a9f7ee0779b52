"""Typer entry points for the branch tools.

``app`` groups every utility under one ``branchtools`` command; the
``*_app`` objects are the standalone ``git-*`` console scripts.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Optional

import typer

from . import __version__
from . import log as branchtools_log
from .commands import (
    append_to_base_cmd,
    append_to_base_remote_cmd,
    archive_branch_cmd,
    archive_remote_branch_cmd,
)
from .commands import show_old_branches as show_old_branches_cmd
from .errors import BranchToolError, ExternalCommandFailedError
from .git import MergeMode
from .io import die, passthrough_error

app = typer.Typer(add_completion=False, help="Branch hygiene helpers for git.")


def _run(command: Callable[[object], None], args: SimpleNamespace) -> None:
    try:
        command(args)
    except ExternalCommandFailedError as exc:
        if exc.output:
            passthrough_error(exc.output)
        else:
            branchtools_log.debug(exc.message)
        raise typer.Exit(code=exc.exit_code) from exc
    except BranchToolError as exc:
        die(exc.message, code=exc.exit_code)


def _validate_log_level(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if value.strip().lower() not in branchtools_log.LEVEL_NAMES:
        raise typer.BadParameter(
            f"expected one of: {', '.join(branchtools_log.LEVEL_NAMES)}"
        )
    return value


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="log verbosity (trace|debug|info|success|warning|warn|error)",
        callback=_validate_log_level,
    ),
    no_color: bool = typer.Option(False, "--no-color", help="disable colored output"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="show version"
    ),
) -> None:
    """Branch hygiene helpers for git."""
    if log_level is not None:
        branchtools_log.set_level(log_level)
    if no_color:
        branchtools_log.set_no_color(True)


@app.command("archive")
def archive(
    target: str = typer.Argument(..., help="local branch to archive"),
) -> None:
    """Rename a local branch to archive/<branch>."""
    _run(archive_branch_cmd, SimpleNamespace(target=target))


@app.command("archive-remote")
def archive_remote(
    current_branch: str = typer.Argument(..., help="branch to return to afterwards"),
    remote_target: str = typer.Argument(..., help="remote branch as <remote>/<branch>"),
) -> None:
    """Move a remote branch to <remote>/archive/<branch>."""
    _run(
        archive_remote_branch_cmd,
        SimpleNamespace(current_branch=current_branch, remote_target=remote_target),
    )


@app.command("append-base")
def append_base(
    target: str = typer.Argument(..., help="local branch to rename"),
    base: str = typer.Argument(..., help="namespace to put the branch under"),
) -> None:
    """Rename a local branch to <base>/<branch>."""
    _run(append_to_base_cmd, SimpleNamespace(target=target, base=base))


@app.command("append-base-remote")
def append_base_remote(
    current_branch: str = typer.Argument(..., help="branch to return to afterwards"),
    remote_target: str = typer.Argument(..., help="remote branch as <remote>/<branch>"),
    base: str = typer.Argument(..., help="namespace to put the branch under"),
) -> None:
    """Move a remote branch to <remote>/<base>/<branch>."""
    _run(
        append_to_base_remote_cmd,
        SimpleNamespace(current_branch=current_branch, remote_target=remote_target, base=base),
    )


@app.command("old-branches")
def old_branches(
    branch: str = typer.Option(
        ..., "-b", "--branch", help="branch the merge filter is evaluated against"
    ),
    days: int = typer.Option(..., "-d", "--days", min=0, help="age threshold in days"),
    exclude: Optional[list[str]] = typer.Option(
        None, "-e", "--exclude", help="skip branches starting with this prefix"
    ),
    mode: MergeMode = typer.Argument(MergeMode.MERGED, help="merged or not-merged"),
) -> None:
    """Report stale remote branches grouped by author."""
    _run(
        show_old_branches_cmd,
        SimpleNamespace(branch=branch, days=days, exclude=exclude or [], mode=mode),
    )


def _standalone(command: Callable[..., None], name: str) -> typer.Typer:
    standalone = typer.Typer(add_completion=False, name=name)
    standalone.command()(command)
    return standalone


archive_branch_app = _standalone(archive, "git-archive-branch")
archive_remote_branch_app = _standalone(archive_remote, "git-archive-remote-branch")
append_to_base_app = _standalone(append_base, "git-append-to-base")
append_to_base_remote_app = _standalone(append_base_remote, "git-append-to-base-remote")
show_old_branches_app = _standalone(old_branches, "git-show-old-branches")


if __name__ == "__main__":
    app()
